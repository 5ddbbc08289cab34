"""CSV Batch Scoring Adapter.

This adapter implements the IngestionPort contract for tabular cohorts: one
row per patient with the Pooled Cohort Equation inputs already extracted.
Rows are read in chunks with pandas and scored vectorized per (sex, race)
stratum.

Expected columns (header case and surrounding whitespace are ignored):
    sex, race, age, total_cholesterol, hdl_cholesterol, systolic_bp,
    smoker, diabetes, treated_hypertension

An optional ``patient_id`` column (and any other column) is carried through
unchanged. Each scored chunk gains ``patient_risk`` and ``healthy_risk``.

Architecture:
    - Implements IngestionPort (Hexagonal Architecture)
    - Streaming pattern: one Result per chunk keeps memory bounded
    - Fail-safe design: unscorable rows are counted and reported, never fatal
"""

import logging
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

import numpy as np
import pandas as pd

from cvd_risk.domain.enums import AdministrativeGender, Race
from cvd_risk.domain.ports import (
    IngestionPort,
    Result,
    SourceNotFoundError,
    TransformationError,
    UnsupportedSourceError,
)
from cvd_risk.domain.services.comparator import healthy_reference_risk
from cvd_risk.domain.services.extractor import plausible_mask
from cvd_risk.domain.services.risk_calculator import pooled_cohort_risk

logger = logging.getLogger(__name__)

NUMERIC_COLUMNS = ["age", "total_cholesterol", "hdl_cholesterol", "systolic_bp"]
FLAG_COLUMNS = ["smoker", "diabetes", "treated_hypertension"]
REQUIRED_COLUMNS = ["sex", "race"] + NUMERIC_COLUMNS + FLAG_COLUMNS

PATIENT_RISK_COLUMN = "patient_risk"
HEALTHY_RISK_COLUMN = "healthy_risk"

_SEX_ALIASES = {
    "male": AdministrativeGender.MALE.value,
    "m": AdministrativeGender.MALE.value,
    "female": AdministrativeGender.FEMALE.value,
    "f": AdministrativeGender.FEMALE.value,
}

_RACE_ALIASES = {
    "black": Race.BLACK.value,
    "african american": Race.BLACK.value,
    "africanamerican": Race.BLACK.value,
    "white": Race.OTHER.value,
    "other": Race.OTHER.value,
}

_FLAG_VALUES = {
    "1": 1.0, "1.0": 1.0, "true": 1.0, "yes": 1.0, "y": 1.0,
    "0": 0.0, "0.0": 0.0, "false": 0.0, "no": 0.0, "n": 0.0,
}


class CSVIngester(IngestionPort):
    """Chunked CSV batch scorer.

    Parameters:
        chunk_size: Rows read per chunk (default: 10000)
        validate_inputs: Drop rows whose age, cholesterol or SBP is
            non-positive or non-finite. When False, such rows are scored and
            carry NaN/inf risks.
        delimiter: Field delimiter (``.tsv`` files always use a tab)
    """

    def __init__(self, chunk_size: int = 10000, validate_inputs: bool = True, delimiter: str = ','):
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.chunk_size = chunk_size
        self.validate_inputs = validate_inputs
        self.delimiter = delimiter
        self.adapter_name = "csv_ingester"

    def can_ingest(self, source: str) -> bool:
        """Check if this adapter can handle the given source.

        Parameters:
            source: Source identifier (file path)

        Returns:
            bool: True if source is a CSV or TSV file, False otherwise
        """
        if not source:
            return False
        return Path(source).suffix.lower() in ('.csv', '.tsv')

    def get_source_info(self, source: str) -> Optional[dict]:
        """Get metadata about the CSV source."""
        try:
            source_path = Path(source)
            if source_path.exists():
                stat = source_path.stat()
                return {
                    'format': 'csv',
                    'size': stat.st_size,
                    'encoding': 'utf-8',
                    'exists': True,
                    'delimiter': self._delimiter_for(source_path),
                    'chunk_size': self.chunk_size,
                }
        except (OSError, ValueError):
            pass

        return None

    def ingest(self, source: str) -> Iterator[Result[pd.DataFrame]]:
        """Score a CSV cohort chunk by chunk.

        Parameters:
            source: Path to CSV file

        Yields:
            Result[pd.DataFrame]: per chunk, a success holding the scored
            rows (if any) and a failure listing the rows that could not be
            scored (if any)

        Raises:
            SourceNotFoundError: If source file doesn't exist
            UnsupportedSourceError: If the file is empty, unparsable, or
                lacks required columns
        """
        source_path = Path(source)
        if not source_path.exists():
            raise SourceNotFoundError(f"CSV source not found: {source}", source=source)

        delimiter = self._delimiter_for(source_path)

        try:
            header = pd.read_csv(source_path, nrows=0, delimiter=delimiter, encoding='utf-8')
            self._check_columns(self._normalize_headers(header.columns), source)

            chunk_count = 0
            total_scored = 0
            total_rejected = 0

            for chunk_df in pd.read_csv(
                source_path,
                chunksize=self.chunk_size,
                delimiter=delimiter,
                encoding='utf-8',
                skipinitialspace=True,
            ):
                chunk_count += 1
                chunk_df.columns = self._normalize_headers(chunk_df.columns)
                scored_df, failed_indices = self.score_frame(chunk_df)

                total_scored += len(scored_df)
                total_rejected += len(failed_indices)

                if len(scored_df) > 0:
                    yield Result.success_result(scored_df)

                if failed_indices:
                    logger.warning(
                        f"Chunk {chunk_count} from {source}: {len(failed_indices)} rows could not be scored, "
                        f"{len(scored_df)} rows scored"
                    )
                    yield Result.failure_result(
                        TransformationError(
                            f"Chunk {chunk_count} from {source}: {len(failed_indices)} rows could not be scored",
                            source=source,
                            raw_data={"row_indices": failed_indices},
                        ),
                        error_details={
                            "source": source,
                            "chunk": chunk_count,
                            "failed_count": len(failed_indices),
                            "row_indices": failed_indices,
                            "total_in_chunk": len(chunk_df),
                        }
                    )

            logger.info(
                f"CSV batch scoring complete: {source} - "
                f"{total_scored} scored, {total_rejected} rejected ({chunk_count} chunks processed)"
            )

        except pd.errors.EmptyDataError:
            raise UnsupportedSourceError(
                f"CSV file {source} is empty",
                source=source,
                adapter=self.adapter_name
            )
        except pd.errors.ParserError as e:
            raise UnsupportedSourceError(
                f"CSV parsing error in {source}: {str(e)}",
                source=source,
                adapter=self.adapter_name
            )

    def score_frame(self, df: pd.DataFrame) -> Tuple[pd.DataFrame, List]:
        """Normalize and score one frame of patients.

        Parameters:
            df: Frame with the required columns (already lower-case names)

        Returns:
            Tuple of the scored rows (original index kept, sex/race/flags
            normalized, risk columns added) and the index labels of rows that
            could not be scored
        """
        frame = df.copy()
        frame["sex"] = self._normalize_labels(frame["sex"], _SEX_ALIASES)
        frame["race"] = self._normalize_labels(frame["race"], _RACE_ALIASES)
        for column in NUMERIC_COLUMNS:
            frame[column] = pd.to_numeric(frame[column], errors="coerce")
        for column in FLAG_COLUMNS:
            frame[column] = self._parse_flags(frame[column])

        valid = frame["sex"].notna() & frame["race"].notna() & frame[FLAG_COLUMNS].notna().all(axis=1)
        if self.validate_inputs:
            valid &= plausible_mask(*(frame[column] for column in NUMERIC_COLUMNS))

        failed_indices = frame.index[~valid].tolist()
        scored = frame[valid].copy()
        for column in FLAG_COLUMNS:
            scored[column] = scored[column].astype(int)

        scored[PATIENT_RISK_COLUMN] = np.nan
        scored[HEALTHY_RISK_COLUMN] = np.nan
        for (sex, race), group in scored.groupby(["sex", "race"]):
            sex_value = AdministrativeGender(sex)
            race_value = Race(race)
            scored.loc[group.index, PATIENT_RISK_COLUMN] = pooled_cohort_risk(
                sex_value,
                race_value,
                group["age"].to_numpy(),
                group["total_cholesterol"].to_numpy(),
                group["hdl_cholesterol"].to_numpy(),
                group["systolic_bp"].to_numpy(),
                smoker=group["smoker"].to_numpy(),
                diabetes=group["diabetes"].to_numpy(),
                treated_hypertension=group["treated_hypertension"].to_numpy(),
            )
            scored.loc[group.index, HEALTHY_RISK_COLUMN] = healthy_reference_risk(
                sex_value, race_value, group["age"].to_numpy()
            )

        return scored, failed_indices

    def _delimiter_for(self, source_path: Path) -> str:
        return '\t' if source_path.suffix.lower() == '.tsv' else self.delimiter

    @staticmethod
    def _normalize_headers(columns) -> List[str]:
        return [str(column).strip().lower() for column in columns]

    def _check_columns(self, columns: List[str], source: str) -> None:
        missing = [column for column in REQUIRED_COLUMNS if column not in columns]
        if missing:
            raise UnsupportedSourceError(
                f"CSV file {source} is missing required columns: {', '.join(missing)}",
                source=source,
                adapter=self.adapter_name
            )

    @staticmethod
    def _normalize_labels(series: pd.Series, aliases: dict) -> pd.Series:
        """Map free-text labels onto canonical values; unknown labels become NaN."""
        return series.astype(str).str.strip().str.lower().map(aliases)

    @staticmethod
    def _parse_flags(series: pd.Series) -> pd.Series:
        """Parse 0/1, true/false, yes/no flags; anything else becomes NaN."""
        return series.astype(str).str.strip().str.lower().map(_FLAG_VALUES)

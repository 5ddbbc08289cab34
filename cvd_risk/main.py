"""Application services for the CVD Risk Engine.

This module wires the configured domain flow to the ingestion adapters and
card sinks. The CLI (``cvd_risk.cli``) is a thin presentation layer over the
functions here.

Architecture:
    - Follows Hexagonal Architecture principles
    - Adapters are selected automatically based on source format
    - Flow options (validation, advisory policy) come from the settings
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union

import pandas as pd

from cvd_risk.adapters.ingesters import get_adapter
from cvd_risk.adapters.ingesters.csv_ingester import CSVIngester
from cvd_risk.adapters.ingesters.json_ingester import JSONIngester
from cvd_risk.adapters.sinks import InMemoryCardSink, JSONLinesCardSink
from cvd_risk.domain.ports import CardSinkPort, Result, UnsupportedSourceError
from cvd_risk.domain.risk_models import Card
from cvd_risk.domain.services.accaha_flow import ACCAHAFlow
from cvd_risk.domain.services.extractor import InputExtractor
from cvd_risk.infrastructure.settings import settings

logger = logging.getLogger(__name__)


@dataclass
class PatientOutcome:
    """Flow outcome for one prefetch document.

    Attributes:
        patient_id: Patient resource id (None when the document was rejected)
        result: Score result, or the extraction/ingestion failure
        cards: Cards the flow emitted for this patient
    """

    patient_id: Optional[str]
    result: Result
    cards: List[Card] = field(default_factory=list)


def create_flow(
    validate_inputs: Optional[bool] = None,
    advisories_require_score: Optional[bool] = None,
) -> ACCAHAFlow:
    """Create the ACC/AHA flow from settings.

    Parameters:
        validate_inputs: Overrides ``CVD_VALIDATE_INPUTS``
        advisories_require_score: Overrides ``CVD_ADVISORIES_REQUIRE_SCORE``

    Returns:
        ACCAHAFlow: Configured flow
    """
    if validate_inputs is None:
        validate_inputs = settings.validate_inputs
    if advisories_require_score is None:
        advisories_require_score = settings.advisories_require_score

    logger.debug(
        f"Creating ACC/AHA flow (validate_inputs={validate_inputs}, "
        f"advisories_require_score={advisories_require_score})"
    )
    return ACCAHAFlow(
        extractor=InputExtractor(validate_inputs=validate_inputs),
        advisories_require_score=advisories_require_score,
    )


def create_card_sink(output: Optional[Union[str, Path]] = None) -> CardSinkPort:
    """Create a JSON Lines sink for ``output``, or an in-memory sink when no output is given."""
    if output is None:
        return InMemoryCardSink()
    logger.info(f"Cards will be written to {output}")
    return JSONLinesCardSink(output)


def process_prefetch_source(
    source: str,
    sink: Optional[CardSinkPort] = None,
    flow: Optional[ACCAHAFlow] = None,
) -> List[PatientOutcome]:
    """Run the ACC/AHA flow for every prefetch document in a JSON source.

    Parameters:
        source: JSON file with one prefetch object or an array of them
        sink: Receives every emitted card in addition to the returned outcomes
        flow: Flow to run (defaults to ``create_flow()``)

    Returns:
        List[PatientOutcome]: one per document, in file order

    Raises:
        SourceNotFoundError: If the file does not exist
        UnsupportedSourceError: If the file is not a JSON prefetch source
    """
    adapter = get_adapter(source)
    if not isinstance(adapter, JSONIngester):
        raise UnsupportedSourceError(
            f"Prefetch scoring expects a JSON source, got {Path(source).suffix or 'no extension'}",
            source=source,
            adapter=adapter.__class__.__name__
        )
    logger.info(f"Selected adapter: {adapter.__class__.__name__}")

    flow = flow or create_flow()
    outcomes: List[PatientOutcome] = []

    for ingested in adapter.ingest(source):
        if ingested.is_failure():
            outcomes.append(PatientOutcome(patient_id=None, result=ingested))
            continue

        prefetch = ingested.value
        collected = InMemoryCardSink()
        result = flow.execute(prefetch, collected)

        if sink is not None:
            sink.begin_patient(prefetch.patient.id)
            for card in collected.cards:
                sink.emit(card.card_id, card.parameters)

        outcomes.append(PatientOutcome(patient_id=prefetch.patient.id, result=result, cards=list(collected.cards)))

    scored = sum(1 for outcome in outcomes if outcome.result.is_success())
    logger.info(f"Prefetch scoring complete: {source} - {scored} scored, {len(outcomes) - scored} without result")
    return outcomes


def process_batch_source(
    source: str,
    chunk_size: Optional[int] = None,
    validate_inputs: Optional[bool] = None,
) -> Tuple[pd.DataFrame, int]:
    """Score a CSV cohort.

    Parameters:
        source: CSV/TSV file
        chunk_size: Overrides ``CVD_CSV_CHUNK_SIZE``
        validate_inputs: Overrides ``CVD_VALIDATE_INPUTS``

    Returns:
        tuple[pd.DataFrame, int]: (scored rows, number of rows that could not be scored)

    Raises:
        SourceNotFoundError: If the file does not exist
        UnsupportedSourceError: If the file is not a usable CSV cohort
    """
    adapter = get_adapter(
        source,
        chunk_size=chunk_size or settings.csv_chunk_size,
        validate_inputs=settings.validate_inputs if validate_inputs is None else validate_inputs,
    )
    if not isinstance(adapter, CSVIngester):
        raise UnsupportedSourceError(
            f"Batch scoring expects a CSV source, got {Path(source).suffix or 'no extension'}",
            source=source,
            adapter=adapter.__class__.__name__
        )

    frames = []
    failure_count = 0
    for result in adapter.ingest(source):
        if result.is_success():
            frames.append(result.value)
        else:
            failure_count += result.error_details.get("failed_count", 0)

    scored = pd.concat(frames) if frames else pd.DataFrame()
    return scored, failure_count

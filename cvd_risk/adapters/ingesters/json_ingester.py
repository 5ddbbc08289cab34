"""JSON Prefetch Ingestion Adapter.

This adapter implements the IngestionPort contract for JSON prefetch
documents: one object, or an array of objects, each holding a ``patient``
resource and the prefetched observation/condition/medication sequences
(``totalCholesterol``, ``hdlCholesterol``, ``systolicBP``, ``smokingStatus``,
``type1Diabetes``, ``type2Diabetes``, ``hypertensiveTreatment``,
``ethnicity``). A sequence may be a list of resources or a FHIR Bundle.

Architecture:
    - Implements IngestionPort (Hexagonal Architecture)
    - Isolated from domain core - only depends on ports and models
    - Fail-safe design: a bad document becomes a failure Result, the run continues
"""

import json
import logging
import hashlib
from pathlib import Path
from typing import Any, Iterator, Optional

from pydantic import ValidationError as PydanticValidationError

from cvd_risk.domain.clinical_records import PatientPrefetch
from cvd_risk.domain.ports import (
    IngestionPort,
    Result,
    SourceNotFoundError,
    TransformationError,
    UnsupportedSourceError,
)

logger = logging.getLogger(__name__)


class JSONIngester(IngestionPort):
    """JSON prefetch adapter with triage and fail-safe error handling.

    Key Features:
        - Triage: structurally invalid documents are rejected without crashing
        - Fail-safe: each document is validated in isolation
        - Rejections are logged with a truncated preview of the document
    """

    def __init__(self, max_record_size: int = 10 * 1024 * 1024):
        """Initialize JSON ingester.

        Parameters:
            max_record_size: Maximum size of a source file in bytes (default: 10MB)
        """
        self.max_record_size = max_record_size
        self.adapter_name = "json_ingester"

    def can_ingest(self, source: str) -> bool:
        """Check if this adapter can handle the given source.

        Parameters:
            source: Source identifier (file path)

        Returns:
            bool: True if source is a JSON file, False otherwise
        """
        if not source:
            return False
        return Path(source).suffix.lower() == ".json"

    def get_source_info(self, source: str) -> Optional[dict]:
        """Get metadata about the JSON source.

        Parameters:
            source: Source identifier

        Returns:
            Optional[dict]: Metadata dictionary or None if unavailable
        """
        try:
            source_path = Path(source)
            if source_path.exists():
                stat = source_path.stat()
                return {
                    'format': 'json',
                    'size': stat.st_size,
                    'encoding': 'utf-8',
                    'exists': True,
                }
        except (OSError, ValueError):
            pass

        return None

    def ingest(self, source: str) -> Iterator[Result[PatientPrefetch]]:
        """Ingest a JSON prefetch file and yield one Result per document.

        Parameters:
            source: Path to the JSON file

        Yields:
            Result[PatientPrefetch]: validated prefetch, or failure with the
            document index in ``error_details``

        Raises:
            SourceNotFoundError: If the file does not exist
            UnsupportedSourceError: If the file is too large, not valid JSON,
                or neither an object nor an array
        """
        source_path = Path(source)
        if not source_path.exists():
            raise SourceNotFoundError(f"JSON source not found: {source}", source=source)

        size = source_path.stat().st_size
        if size > self.max_record_size:
            raise UnsupportedSourceError(
                f"JSON source exceeds maximum size ({size} > {self.max_record_size} bytes)",
                source=source,
                adapter=self.adapter_name
            )

        try:
            with open(source_path, "r", encoding="utf-8") as f:
                raw_data = json.load(f)
        except json.JSONDecodeError as e:
            raise UnsupportedSourceError(
                f"Invalid JSON in {source}: {str(e)}",
                source=source,
                adapter=self.adapter_name
            )

        documents = self._extract_documents(raw_data, source)
        logger.info(f"Ingesting {len(documents)} prefetch document(s) from {source}")

        for index, document in enumerate(documents):
            try:
                prefetch = self._triage_and_transform(document, source, index)
                yield Result.success_result(prefetch)
            except TransformationError as e:
                self._log_rejection(source, index, e, document)
                yield Result.failure_result(
                    e,
                    error_details={
                        "source": source,
                        "record_index": index,
                        "document_hash": self._generate_hash(document),
                    }
                )

    def _extract_documents(self, raw_data: Any, source: str) -> list:
        """Extract prefetch documents from an object or array."""
        if isinstance(raw_data, list):
            return raw_data
        elif isinstance(raw_data, dict):
            return [raw_data]
        else:
            raise UnsupportedSourceError(
                f"Unsupported JSON structure: expected array or object, got {type(raw_data).__name__}",
                source=source,
                adapter=self.adapter_name
            )

    def _triage_and_transform(self, document: Any, source: str, index: int) -> PatientPrefetch:
        """Triage and transform a raw prefetch document.

        Raises:
            TransformationError: If the document is not an object, has no
                patient, or fails schema validation
        """
        if not isinstance(document, dict):
            raise TransformationError(
                f"Document {index} is not an object",
                source=source,
                raw_data={"record_index": index, "type": type(document).__name__}
            )

        if 'patient' not in document:
            raise TransformationError(
                f"Document {index} missing required 'patient' field",
                source=source,
                raw_data={"record_index": index, "keys": list(document.keys())}
            )

        try:
            return PatientPrefetch.model_validate(document)
        except PydanticValidationError as e:
            raise TransformationError(
                f"Document {index} failed validation: {e.error_count()} error(s): {str(e)}",
                source=source,
                raw_data={"record_index": index}
            )

    def _generate_hash(self, document: Any) -> str:
        """SHA-256 of the document, for correlating rejections with inputs."""
        document_str = json.dumps(document, sort_keys=True, default=str)
        return hashlib.sha256(document_str.encode('utf-8')).hexdigest()

    def _log_rejection(self, source: str, index: int, error: Exception, document: Any) -> None:
        logger.warning(
            f"REJECTED: Document {index} from {source}: {str(error)}",
            extra={
                'source': source,
                'record_index': index,
                'error_type': type(error).__name__,
                'document_preview': self._truncate_for_logging(document),
            }
        )

    def _truncate_for_logging(self, data: Any, max_size: int = 500) -> str:
        """Truncate a document for safe logging."""
        data_str = json.dumps(data, default=str)
        if len(data_str) <= max_size:
            return data_str
        return data_str[:max_size] + f"... [truncated, {len(data_str)} chars]"

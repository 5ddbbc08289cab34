"""Domain Ports - Abstract Contracts for Inputs and Outputs.

This module defines the Result type, the exception hierarchy, and the Port
interfaces (abstract contracts) that adapters implement. Following Hexagonal
Architecture, the domain core defines what it needs, not how it's provided.

Architecture:
    - Pure abstract interfaces with zero infrastructure dependencies
    - Ingestion adapters (JSON prefetch, CSV batch) implement IngestionPort
    - Output adapters (in-memory, JSON lines) implement CardSinkPort
    - Expected failures travel as Result objects, not exceptions
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, Iterator, Optional, TypeVar, Union

import pandas as pd

from cvd_risk.domain.clinical_records import PatientPrefetch

# Type variable for Result generic
T = TypeVar('T')


# ============================================================================
# Result Type for Success/Failure Communication
# ============================================================================

@dataclass(frozen=True)
class Result(Generic[T]):
    """Result type for communicating success or failure without exceptions.

    A risk calculation that cannot be performed (missing chart data, invalid
    sex) is an expected outcome, so it is reported as a failure Result rather
    than raised.

    Attributes:
        success: True if the operation succeeded, False otherwise
        value: The successful result value (only present if success=True)
        error: Error message (only present if success=False)
        error_type: Type of error (MissingDataError, InvalidSexError, ...)
        error_details: Additional error context (missing fields, record index, ...)

    Example:
        ```python
        result = flow.calculate(prefetch)
        if result.is_success():
            patient_score, healthy_score = result.value.as_tuple()
        else:
            logger.info(f"No score: {result.error_type}: {result.error}")
        ```
    """

    success: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    error_details: Optional[dict] = None

    @classmethod
    def success_result(cls, value: T) -> 'Result[T]':
        """Create a successful result.

        Parameters:
            value: The successful result value

        Returns:
            Result: Success result with the value
        """
        return cls(
            success=True,
            value=value,
            error=None,
            error_type=None,
            error_details=None
        )

    @classmethod
    def failure_result(
        cls,
        error: Union[str, Exception],
        error_type: Optional[str] = None,
        error_details: Optional[dict] = None
    ) -> 'Result[T]':
        """Create a failure result.

        Parameters:
            error: Error message or exception
            error_type: Type of error; defaults to the exception class name
            error_details: Additional context; defaults to the exception's
                ``details`` attribute when it has one

        Returns:
            Result: Failure result with error information
        """
        error_message = str(error) if isinstance(error, Exception) else error
        error_type_name = error_type or (type(error).__name__ if isinstance(error, Exception) else "UnknownError")
        if error_details is None:
            error_details = getattr(error, "details", None)

        return cls(
            success=False,
            value=None,
            error=error_message,
            error_type=error_type_name,
            error_details=error_details or {}
        )

    def is_success(self) -> bool:
        """Check if result is successful."""
        return self.success

    def is_failure(self) -> bool:
        """Check if result is a failure."""
        return not self.success


# ============================================================================
# Risk Calculation Errors
# ============================================================================

class RiskCalculationError(Exception):
    """Base exception for reasons a risk score cannot be produced.

    Attributes:
        details: Additional context (missing fields, offending values)
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.details = details or {}


class MissingDataError(RiskCalculationError):
    """A required clinical value (cholesterol, HDL, SBP, smoking or ethnicity code, birth date) is absent."""

    def __init__(self, missing: list[str]):
        super().__init__(
            "Missing required data for ACC/AHA risk score calculation: " + ", ".join(missing),
            details={"missing": list(missing)},
        )
        self.missing = list(missing)


class InvalidSexError(RiskCalculationError):
    """Patient sex is neither male nor female."""

    def __init__(self, sex: Any):
        value = getattr(sex, "value", sex)
        super().__init__(f"Sex not specified or invalid: {value}", details={"sex": value})
        self.sex = value


class ImplausibleValueError(RiskCalculationError):
    """A numeric input cannot be log-transformed (non-positive or non-finite)."""

    def __init__(self, values: dict[str, Any]):
        listed = ", ".join(f"{name}={value}" for name, value in values.items())
        super().__init__(f"Implausible values for ACC/AHA risk score calculation: {listed}", details={"values": dict(values)})
        self.values = dict(values)


# ============================================================================
# Ingestion Errors
# ============================================================================

class IngestionError(Exception):
    """Base exception for all ingestion-related errors.

    This exception should be raised when ingestion fails due to
    adapter-specific issues (file format, missing file, ...).
    """
    pass


class TransformationError(IngestionError):
    """Raised when raw data cannot be transformed into domain models.

    Attributes:
        source: The source identifier that failed transformation
        raw_data: The raw data that failed transformation (may be truncated)
    """

    def __init__(self, message: str, source: Optional[str] = None, raw_data: Optional[dict] = None):
        super().__init__(message)
        self.source = source
        self.raw_data = raw_data


class SourceNotFoundError(IngestionError):
    """Raised when the source file cannot be found or accessed.

    Attributes:
        source: The source identifier that was not found
    """

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.source = source


class UnsupportedSourceError(IngestionError):
    """Raised when the source format is not supported by the adapter.

    Attributes:
        source: The source identifier that is unsupported
        adapter: The adapter that cannot handle the source
    """

    def __init__(self, message: str, source: Optional[str] = None, adapter: Optional[str] = None):
        super().__init__(message)
        self.source = source
        self.adapter = adapter


# ============================================================================
# Ports
# ============================================================================

class IngestionPort(ABC):
    """Abstract contract for clinical input adapters.

    Key Principles:
        - Streaming: yields results one-by-one (per document or per chunk)
        - Validated: successful values are PatientPrefetch models or scored DataFrames
        - Fail-safe: a bad record becomes a failure Result, it never stops the run
    """

    @abstractmethod
    def ingest(self, source: str) -> Iterator[Result[Union[PatientPrefetch, 'pd.DataFrame']]]:
        """Ingest data from a source and yield Result objects.

        Parameters:
            source: Source identifier (file path)

        Yields:
            Result[Union[PatientPrefetch, pd.DataFrame]]: one per prefetch
            document (JSON) or per chunk (CSV)

        Raises:
            SourceNotFoundError: If the source doesn't exist
            UnsupportedSourceError: If the source cannot be parsed at all
        """
        pass

    @abstractmethod
    def can_ingest(self, source: str) -> bool:
        """Check if this adapter can handle the given source.

        Parameters:
            source: Source identifier to check

        Returns:
            bool: True if this adapter can handle the source, False otherwise
        """
        pass

    def get_source_info(self, source: str) -> Optional[dict]:
        """Get metadata about the source (optional, adapter-specific).

        Returns None by default; adapters override to describe the source.
        """
        return None


class CardSinkPort(ABC):
    """Abstract contract for the collaborator that receives output cards.

    The flow hands over ``(card_id, parameters)`` pairs; rendering,
    translation and delivery are the sink's concern.
    """

    @abstractmethod
    def emit(self, card_id: str, parameters: dict[str, Any]) -> None:
        """Receive one card.

        Parameters:
            card_id: Card template identifier (e.g. ``card-score``)
            parameters: Template parameters (``effectiveDate``, scores, ...)
        """
        pass

    def begin_patient(self, patient_id: Optional[str]) -> None:
        """Mark the start of a new patient's cards.

        Sinks that keep cards from several patients apart override this; the
        default ignores it.
        """
        return None

    def close(self) -> None:
        """Release any resources held by the sink."""
        return None

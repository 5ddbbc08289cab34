"""Ingestion adapters for the CVD Risk Engine.

This module contains ingestion adapters that implement the IngestionPort
interface: JSON prefetch documents for the per-patient flow, and CSV
cohorts for batch scoring.
"""

from pathlib import Path

from cvd_risk.adapters.ingesters.csv_ingester import CSVIngester
from cvd_risk.adapters.ingesters.json_ingester import JSONIngester
from cvd_risk.domain.ports import IngestionPort, UnsupportedSourceError

__all__ = ["CSVIngester", "JSONIngester", "get_adapter"]


def get_adapter(source: str, **kwargs) -> IngestionPort:
    """Factory function to get the appropriate ingestion adapter for a source.

    Parameters:
        source: Source identifier (file path)
        **kwargs: Additional arguments passed to the adapter constructor
            - For CSV: chunk_size, validate_inputs, delimiter
            - For JSON: max_record_size

    Returns:
        IngestionPort: Appropriate adapter instance

    Raises:
        UnsupportedSourceError: If no adapter can handle the source

    Example Usage:
        ```python
        adapter = get_adapter("cohort.csv", chunk_size=5000)
        for result in adapter.ingest("cohort.csv"):
            ...
        ```
    """
    extension = Path(source).suffix.lower()

    adapters = [
        ((".csv", ".tsv"), CSVIngester),
        ((".json",), JSONIngester),
    ]

    for extensions, adapter_class in adapters:
        if extension in extensions:
            try:
                return adapter_class(**kwargs)
            except (TypeError, ValueError) as e:
                raise UnsupportedSourceError(
                    f"Failed to create {adapter_class.__name__}: {str(e)}",
                    source=source,
                    adapter=adapter_class.__name__
                )

    raise UnsupportedSourceError(
        f"No adapter found for source: {source}. Supported formats: CSV, TSV, JSON",
        source=source
    )

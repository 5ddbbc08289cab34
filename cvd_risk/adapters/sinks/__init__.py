"""Card sinks for the CVD Risk Engine.

This module contains output adapters that implement the CardSinkPort
interface for collecting the cards emitted by the ACC/AHA flow.
"""

from cvd_risk.adapters.sinks.jsonl_sink import JSONLinesCardSink
from cvd_risk.adapters.sinks.memory_sink import InMemoryCardSink

__all__ = ["InMemoryCardSink", "JSONLinesCardSink"]

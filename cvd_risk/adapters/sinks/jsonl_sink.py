"""JSON Lines card sink.

Appends one JSON object per emitted card to a file:

    {"card_id": "card-score", "parameters": {"effectiveDate": "...", ...}}

After ``begin_patient`` the patient id is added to every line so cards
from a multi-patient run can be told apart.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

from cvd_risk.domain.ports import CardSinkPort
from cvd_risk.domain.risk_models import Card

logger = logging.getLogger(__name__)


class JSONLinesCardSink(CardSinkPort):
    """CardSinkPort writing cards to a JSON Lines file.

    Parameters:
        path: Output file; parent directories are created
        append: Append to an existing file instead of truncating it

    Example Usage:
        ```python
        with JSONLinesCardSink("cards.jsonl") as sink:
            sink.begin_patient(prefetch.patient.id)
            flow.execute(prefetch, sink)
        ```
    """

    def __init__(self, path: Union[str, Path], append: bool = False):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.patient_id: Optional[str] = None
        self.count = 0
        self._file = open(self.path, "a" if append else "w", encoding="utf-8")
        logger.debug(f"Writing cards to {self.path}")

    def emit(self, card_id: str, parameters: dict[str, Any]) -> None:
        if self._file is None:
            raise ValueError(f"Card sink for {self.path} is closed")
        card = Card(card_id=card_id, parameters=dict(parameters))
        line = card.model_dump(mode="json")
        if self.patient_id is not None:
            line["patient_id"] = self.patient_id
        self._file.write(json.dumps(line) + "\n")
        self.count += 1

    def begin_patient(self, patient_id: Optional[str]) -> None:
        """Tag the following lines with ``patient_id``."""
        self.patient_id = patient_id

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
            logger.info(f"Wrote {self.count} card(s) to {self.path}")

    def __enter__(self) -> "JSONLinesCardSink":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

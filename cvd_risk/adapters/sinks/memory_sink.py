"""In-memory card sink.

Collects emitted cards in a list. Used by the CLI to render a patient's
cards and by tests to assert on what the flow emitted.
"""

import logging
from typing import Any, List, Optional

from cvd_risk.domain.ports import CardSinkPort
from cvd_risk.domain.risk_models import Card

logger = logging.getLogger(__name__)


class InMemoryCardSink(CardSinkPort):
    """CardSinkPort that keeps every card in emission order.

    Example Usage:
        ```python
        sink = InMemoryCardSink()
        flow.execute(prefetch, sink)
        score = sink.get("card-score")
        ```
    """

    def __init__(self):
        self.cards: List[Card] = []

    def emit(self, card_id: str, parameters: dict[str, Any]) -> None:
        logger.debug(f"Card emitted: {card_id}")
        self.cards.append(Card(card_id=card_id, parameters=dict(parameters)))

    @property
    def card_ids(self) -> List[str]:
        return [card.card_id for card in self.cards]

    def get(self, card_id: str) -> Optional[Card]:
        """First card with the given id, or None."""
        for card in self.cards:
            if card.card_id == card_id:
                return card
        return None

    def clear(self) -> None:
        self.cards.clear()

"""
Display ordering.

Merges the score-based order with the latest tournament ranking. A ranking
only applies to quadrant 1; ranked items always come before unranked ones,
and unranked items fall back to priority score order.
"""

import time
from collections.abc import Callable, Sequence

from .classifier import priority_score
from .logging_config import get_logger
from .models import Item
from .storage.ranking_store import RankingStore

# Module-level logger
logger = get_logger("ordering")

TOURNAMENT_QUADRANT = 1


class OrderingService:
    """Orders items for display, preferring tournament order where it applies."""

    def __init__(
        self,
        ranking_store: RankingStore | None,
        clock: Callable[[], float] = time.time,
    ):
        self.ranking_store: RankingStore | None = ranking_store
        self.clock: Callable[[], float] = clock

    def order_by_score(self, items: Sequence[Item]) -> list[Item]:
        """Descending priority score; equal scores keep input order."""
        now = self.clock()
        return sorted(items, key=lambda item: -priority_score(item, now))

    def order_for_display(
        self, items: Sequence[Item], quadrant_context: int | None = None
    ) -> list[Item]:
        """
        Return items in display order without modifying the input.

        Args:
            items: Items to order
            quadrant_context: Quadrant being displayed, or None for a mixed list

        Returns:
            New list: tournament-ranked items by rank position, then the rest
            by descending priority score. Outside quadrant 1, or without a
            valid ranking, plain score order.
        """
        if quadrant_context != TOURNAMENT_QUADRANT or self.ranking_store is None:
            return self.order_by_score(items)

        record = self.ranking_store.load()
        if record is None:
            return self.order_by_score(items)

        positions = record.positions()
        now = self.clock()

        def sort_key(item: Item) -> tuple[int, float]:
            position = positions.get(item.item_id)
            if position is not None:
                return (0, position)
            return (1, -priority_score(item, now))

        ordered = sorted(items, key=sort_key)
        logger.debug(
            f"Ordered {len(ordered)} items using tournament ranking ({sum(1 for i in items if i.item_id in positions)} ranked)"
        )
        return ordered

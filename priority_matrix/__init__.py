"""
Priority Matrix - Eisenhower prioritization with pairwise battles

Classifies work items into four quadrants by importance and urgency, scores
them, and lets a round-robin tournament settle the order of the items that
matter most.
"""

from .classifier import classify, is_overdue, priority_score
from .interfaces import DurableStore, Judge
from .matrix import Matrix
from .migration import migrate_legacy_item
from .models import Item, Pair, RankingEntry, RankingRecord
from .ordering import OrderingService
from .storage import InMemoryStore, JSONFileStore, RankingStore
from .tournament import Tournament

__version__ = "0.1.0"
__all__ = [
    "classify",
    "priority_score",
    "is_overdue",
    "DurableStore",
    "Judge",
    "Item",
    "Pair",
    "RankingEntry",
    "RankingRecord",
    "Tournament",
    "RankingStore",
    "OrderingService",
    "Matrix",
    "InMemoryStore",
    "JSONFileStore",
    "migrate_legacy_item",
]

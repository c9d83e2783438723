"""
Abstract base classes and payload types for the priority matrix system.

All interfaces are synchronous; the core never suspends.
"""

from abc import ABC, abstractmethod

from typing_extensions import NotRequired, TypedDict

from .models import Pair


class RankingEntryPayload(TypedDict):
    """One persisted ranking row."""
    itemId: str
    score: int
    wins: int
    losses: int


class RankingRecordPayload(TypedDict):
    """Persisted ranking record as stored in the durable slot."""
    rankings: list[RankingEntryPayload]
    createdAt: int  # epoch millis
    itemIds: list[str]


class TaskPayload(TypedDict):
    """Serialized item, as written by Item.to_dict()."""
    id: NotRequired[str]
    name: str
    description: NotRequired[str]
    importance: bool
    urgency: bool
    quadrant: NotRequired[int]
    created: NotRequired[str | float]  # ISO 8601 or legacy epoch millis
    updated: NotRequired[str | float]
    completed: NotRequired[bool]
    battleScore: NotRequired[int]


class MatrixData(TypedDict):
    """Export / storage document for a whole matrix."""
    tasks: list[TaskPayload]
    exportDate: str
    version: str


class MatrixStatistics(TypedDict):
    """Summary figures for a matrix."""
    total: int
    completed: int
    pending: int
    overdue: int
    completion_rate: float  # percentage 0-100
    quadrant_counts: dict[int, int]
    average_importance: float
    average_urgency: float


class TournamentStatistics(TypedDict):
    """Summary figures for a tournament."""
    total_items: int
    total_pairs: int
    completed_comparisons: int
    remaining_comparisons: int
    is_complete: bool
    percentage: int


class TournamentState(TypedDict):
    """Full JSON-serializable dump of a tournament."""
    tasks: list[TaskPayload]
    comparisons: list[dict[str, str | float]]
    scores: dict[str, dict[str, int]]
    isComplete: bool
    currentPairIndex: int
    timestamp: str


class DurableStore(ABC):
    """Interface for the key-value persistence collaborator."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored string, or None if the key is absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a string under key, replacing any previous value."""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete key; absent keys are ignored."""
        pass


class Judge(ABC):
    """Interface for deciding tournament match-ups."""

    @abstractmethod
    def pick_winner(self, pair: Pair) -> str:
        """
        Decide which item of the pair wins.

        May block waiting on a human.

        Args:
            pair: The current match-up

        Returns:
            item_id of the winner; must be one of pair.ids
        """
        pass

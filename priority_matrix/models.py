"""
Core dataclasses for the priority matrix system.

Defines Item, the tournament value types and RankingRecord with validation.
"""

import time
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any

from .classifier import classify
from .exceptions import ValidationError

MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500

QUADRANT_NAMES = {
    1: "Do First",
    2: "Schedule",
    3: "Delegate",
    4: "Eliminate",
}

# Fields a caller may change through Item.update(); item_id and created are fixed.
UPDATABLE_FIELDS = frozenset(
    {"name", "description", "important", "urgent", "completed", "tournament_score"}
)


def _new_item_id() -> str:
    return uuid.uuid4().hex


def _to_iso(ts: float) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


def _parse_timestamp(value: str | float) -> float:
    """ISO 8601 string, or epoch milliseconds as older exports stored them."""
    if isinstance(value, (int, float)):
        return value / 1000
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


@dataclass
class Item:
    """A work item classified by importance and urgency."""

    name: str
    description: str = ""
    important: bool = False
    urgent: bool = False
    completed: bool = False
    tournament_score: int = 0
    item_id: str = field(default_factory=_new_item_id)
    created: float = field(default_factory=time.time)
    updated: float = 0.0

    def __post_init__(self) -> None:
        """Validate item data."""
        if not self.updated:
            self.updated = self.created
        errors = self.validate()
        if errors:
            raise ValidationError(f"Invalid item: {', '.join(errors)}", errors)

    @property
    def quadrant(self) -> int:
        """Quadrant derived from the current traits."""
        return classify(self.important, self.urgent)

    @property
    def quadrant_name(self) -> str:
        return QUADRANT_NAMES[self.quadrant]

    def validate(self) -> list[str]:
        """Return a list of validation errors, empty when the item is valid."""
        errors: list[str] = []

        if not self.item_id:
            errors.append("item_id cannot be empty")

        if not isinstance(self.name, str) or not self.name.strip():
            errors.append("Item name is required")
        elif len(self.name) > MAX_NAME_LENGTH:
            errors.append(f"Item name must be {MAX_NAME_LENGTH} characters or less")

        if not isinstance(self.description, str):
            errors.append("Description must be a string")
        elif len(self.description) > MAX_DESCRIPTION_LENGTH:
            errors.append(
                f"Description must be {MAX_DESCRIPTION_LENGTH} characters or less"
            )

        for flag in ("important", "urgent", "completed"):
            if not isinstance(getattr(self, flag), bool):
                errors.append(f"{flag} must be a boolean value")

        if isinstance(self.tournament_score, bool) or not isinstance(
            self.tournament_score, int
        ):
            errors.append("tournament_score must be an integer")

        return errors

    def update(self, now: float | None = None, **changes: Any) -> None:
        """
        Apply changes atomically.

        The full candidate state is validated before anything is written, so
        a rejected update leaves the item untouched.

        Args:
            now: Modification timestamp (defaults to time.time())
            **changes: New values for any of UPDATABLE_FIELDS

        Raises:
            ValidationError: If a field is unknown/immutable or a value is invalid
        """
        illegal = sorted(set(changes) - UPDATABLE_FIELDS)
        if illegal:
            raise ValidationError(
                f"Cannot update fields: {', '.join(illegal)}",
                [f"{name} cannot be updated" for name in illegal],
            )

        stamp = time.time() if now is None else now
        # replace() re-runs __post_init__ and raises before we commit
        candidate = replace(self, updated=stamp, **changes)

        for name in changes:
            setattr(self, name, getattr(candidate, name))
        self.updated = candidate.updated

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict for storage and export."""
        return {
            "id": self.item_id,
            "name": self.name,
            "description": self.description,
            "importance": self.important,
            "urgency": self.urgent,
            "quadrant": self.quadrant,
            "created": _to_iso(self.created),
            "updated": _to_iso(self.updated),
            "completed": self.completed,
            "battleScore": self.tournament_score,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Item":
        """Build an item from a dict produced by to_dict()."""
        kwargs: dict[str, Any] = {
            "name": data.get("name", ""),
            "description": data.get("description", ""),
            "important": data.get("importance", False),
            "urgent": data.get("urgency", False),
            "completed": data.get("completed", False),
            "tournament_score": data.get("battleScore", 0),
        }
        if data.get("id"):
            kwargs["item_id"] = data["id"]
        if data.get("created"):
            kwargs["created"] = _parse_timestamp(data["created"])
        if data.get("updated"):
            kwargs["updated"] = _parse_timestamp(data["updated"])
        return cls(**kwargs)


@dataclass(frozen=True)
class Pair:
    """An unordered match-up of two items."""

    item_a: Item
    item_b: Item

    @property
    def ids(self) -> tuple[str, str]:
        return (self.item_a.item_id, self.item_b.item_id)

    @property
    def key(self) -> frozenset[str]:
        return frozenset(self.ids)

    def contains(self, item_id: str) -> bool:
        return item_id in self.ids


@dataclass(frozen=True)
class Outcome:
    """A recorded comparison result."""

    winner_id: str
    loser_id: str
    timestamp: float = field(default_factory=time.time)


@dataclass
class Tally:
    """Running win/loss counts for one tournament participant."""

    wins: int = 0
    losses: int = 0
    comparisons: int = 0
    score: int = 0

    @property
    def win_rate(self) -> int:
        """Win rate as a whole percentage."""
        if self.comparisons == 0:
            return 0
        return round_half_up(100 * self.wins / self.comparisons)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up."""
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


@dataclass(frozen=True)
class RankingEntry:
    """One row of a tournament ranking."""

    item_id: str
    score: int
    wins: int
    losses: int

    @property
    def win_rate(self) -> int:
        total = self.wins + self.losses
        if total == 0:
            return 0
        return round_half_up(100 * self.wins / total)


@dataclass
class RankingRecord:
    """Persisted result of a completed tournament."""

    rankings: list[RankingEntry]
    created_at: int  # epoch millis
    item_ids: list[str]

    def __post_init__(self) -> None:
        """Validate ranking record data."""
        scores = [entry.score for entry in self.rankings]
        if any(a < b for a, b in zip(scores, scores[1:])):
            raise ValidationError("rankings must be sorted by descending score")
        unknown = sorted({entry.item_id for entry in self.rankings} - set(self.item_ids))
        if unknown:
            raise ValidationError(
                f"ranked items missing from item_ids: {', '.join(unknown)}"
            )

    def positions(self) -> dict[str, int]:
        """Map item id to its 0-based rank position."""
        return {entry.item_id: index for index, entry in enumerate(self.rankings)}


@dataclass(frozen=True)
class Progress:
    """How far a tournament has advanced."""

    current: int
    total: int

    @property
    def remaining(self) -> int:
        return self.total - self.current

    @property
    def percentage(self) -> int:
        if self.total == 0:
            return 0
        return round_half_up(100 * self.current / self.total)


@dataclass(frozen=True)
class OutcomeResult:
    """Returned by Tournament.record_outcome()."""

    is_complete: bool
    progress: Progress
    current_pair: Pair | None



"""
Single-slot ranking store.

Keeps the ranking of the most recently completed tournament in a DurableStore
under one fixed key. Records expire after a fixed number of days. Storage
problems never reach the caller; they degrade to "no ranking available".
"""

import json
import time
from collections.abc import Callable

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from ..exceptions import ValidationError
from ..interfaces import DurableStore, RankingRecordPayload
from ..logging_config import get_logger
from ..models import RankingEntry, RankingRecord

# Module-level logger
logger = get_logger("ranking_store")

RANKING_KEY = "priority-matrix-battle-results"
DEFAULT_TTL_DAYS = 7
MILLIS_PER_DAY = 24 * 60 * 60 * 1000

_record_adapter = TypeAdapter(RankingRecordPayload)


def record_to_payload(record: RankingRecord) -> RankingRecordPayload:
    """Convert a RankingRecord to its persisted JSON shape."""
    return {
        "rankings": [
            {
                "itemId": entry.item_id,
                "score": entry.score,
                "wins": entry.wins,
                "losses": entry.losses,
            }
            for entry in record.rankings
        ],
        "createdAt": record.created_at,
        "itemIds": list(record.item_ids),
    }


def payload_to_record(payload: RankingRecordPayload) -> RankingRecord:
    """Build a RankingRecord from a validated payload."""
    return RankingRecord(
        rankings=[
            RankingEntry(
                item_id=row["itemId"],
                score=row["score"],
                wins=row["wins"],
                losses=row["losses"],
            )
            for row in payload["rankings"]
        ],
        created_at=payload["createdAt"],
        item_ids=list(payload["itemIds"]),
    )


class RankingStore:
    """Persists and expires the latest tournament ranking."""

    def __init__(
        self,
        store: DurableStore,
        key: str = RANKING_KEY,
        ttl_days: int = DEFAULT_TTL_DAYS,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize ranking store.

        Args:
            store: Durable key-value store holding the slot
            key: Slot key
            ttl_days: Records older than this are discarded on load
            clock: Returns the current time in epoch seconds
        """
        if ttl_days <= 0:
            raise ValueError(f"ttl_days must be positive, got {ttl_days}")
        self.store: DurableStore = store
        self.key: str = key
        self.ttl_millis: int = ttl_days * MILLIS_PER_DAY
        self.clock: Callable[[], float] = clock

    def now_millis(self) -> int:
        return int(self.clock() * 1000)

    def save(self, record: RankingRecord) -> None:
        """Overwrite the slot with record. Failures are logged, never raised."""
        try:
            raw = json.dumps(record_to_payload(record), ensure_ascii=False)
            self.store.set(self.key, raw)
        except Exception as e:
            logger.error(f"Failed to save ranking under {self.key}: {e}")
            return

        logger.info(
            f"Saved ranking of {len(record.rankings)} items under {self.key}"
        )

    def load(self) -> RankingRecord | None:
        """
        Read the slot.

        Returns:
            The stored record, or None if the slot is empty, unreadable,
            malformed or expired. Malformed and expired slots are cleared.
        """
        try:
            raw = self.store.get(self.key)
        except Exception as e:
            logger.error(f"Failed to read ranking under {self.key}: {e}")
            return None

        if raw is None:
            logger.debug(f"No ranking stored under {self.key}")
            return None

        try:
            payload = _record_adapter.validate_python(json.loads(raw))
            record = payload_to_record(payload)
        except (json.JSONDecodeError, PydanticValidationError, ValidationError) as e:
            logger.warning(f"Discarding malformed ranking under {self.key}: {e}")
            self.clear()
            return None

        age_millis = self.now_millis() - record.created_at
        if age_millis > self.ttl_millis:
            logger.info(
                f"Discarding expired ranking under {self.key} (age {age_millis / MILLIS_PER_DAY:.1f} days)"
            )
            self.clear()
            return None

        return record

    def clear(self) -> None:
        """Empty the slot. Failures are logged, never raised."""
        try:
            self.store.remove(self.key)
        except Exception as e:
            logger.error(f"Failed to clear ranking under {self.key}: {e}")
            return
        logger.debug(f"Cleared ranking under {self.key}")

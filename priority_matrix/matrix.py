"""
Priority matrix: the item collection.

Owns the items, persists them in a DurableStore, notifies registered
callbacks about changes and hands quadrant snapshots to the tournament engine.
"""

import json
import random
import time
import typing
from collections.abc import Callable
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

if TYPE_CHECKING:
    from loguru import Logger

from .classifier import is_overdue
from .exceptions import ImportFormatError, ItemNotFoundError, ValidationError
from .interfaces import DurableStore, MatrixData, MatrixStatistics, TaskPayload
from .logging_config import get_logger
from .migration import migrate_legacy_item
from .models import Item
from .ordering import TOURNAMENT_QUADRANT, OrderingService
from .storage.ranking_store import RankingStore
from .tournament import Tournament

DATA_KEY = "priority-matrix-data"
EXPORT_VERSION = "1.0.0"

EVENTS = frozenset(
    {"item_added", "item_updated", "item_deleted", "data_imported", "items_cleared"}
)

# Traits that place an item in each quadrant
QUADRANT_TRAITS = {
    1: {"important": True, "urgent": True},
    2: {"important": True, "urgent": False},
    3: {"important": False, "urgent": True},
    4: {"important": False, "urgent": False},
}

Handler = Callable[[Any], None]

_task_adapter = TypeAdapter(TaskPayload)


class Matrix:
    """
    Collection of items organized into the four quadrants.

    Every mutation is written back to the store. Storage failures are logged
    and never interrupt the caller.
    """

    def __init__(
        self,
        store: DurableStore,
        ranking_store: RankingStore | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize matrix and load any items already in the store.

        Args:
            store: Durable store holding the item collection
            ranking_store: Latest tournament ranking (defaults to one on the same store)
            clock: Returns the current time in epoch seconds
        """
        self.store: DurableStore = store
        self.ranking_store: RankingStore = (
            ranking_store if ranking_store is not None else RankingStore(store, clock=clock)
        )
        self.clock: Callable[[], float] = clock
        self.ordering: OrderingService = OrderingService(self.ranking_store, clock=clock)
        self.items: dict[str, Item] = {}
        self._handlers: dict[str, list[Handler]] = {}
        self.logger: Logger = get_logger("matrix")

        self.load()

    # Item CRUD

    def add_item(
        self,
        name: str,
        description: str = "",
        important: bool = False,
        urgent: bool = False,
    ) -> Item:
        """Create, store and announce a new item."""
        now = self.clock()
        item = Item(
            name=name,
            description=description,
            important=important,
            urgent=urgent,
            created=now,
            updated=now,
        )
        return self.insert_item(item)

    def insert_item(self, item: Item) -> Item:
        """Add an existing Item instance."""
        if item.item_id in self.items:
            raise ValidationError(f"Duplicate item id: {item.item_id}")
        self.items[item.item_id] = item
        self.save()
        self.logger.info(f"Added item {item.item_id} to quadrant {item.quadrant}")
        self.emit("item_added", item)
        return item

    def update_item(self, item_id: str, **changes: Any) -> Item:
        """
        Update an item atomically.

        Raises:
            ItemNotFoundError: Unknown id
            ValidationError: Invalid change; the item is left unchanged
        """
        item = self._require(item_id)
        old_quadrant = item.quadrant
        item.update(now=self.clock(), **changes)
        self.save()
        self.logger.info(f"Updated item {item_id}: {sorted(changes)}")
        self.emit("item_updated", {"item": item, "old_quadrant": old_quadrant})
        return item

    def complete_item(self, item_id: str, completed: bool = True) -> Item:
        return self.update_item(item_id, completed=completed)

    def delete_item(self, item_id: str) -> Item:
        """Remove an item by id and return it."""
        item = self._require(item_id)
        del self.items[item_id]
        self.save()
        self.logger.info(f"Deleted item {item_id}")
        self.emit("item_deleted", item)
        return item

    def move_to_quadrant(self, item_id: str, quadrant: int) -> Item:
        """Set the traits so the item lands in quadrant."""
        if quadrant not in QUADRANT_TRAITS:
            raise ValidationError(f"quadrant must be 1-4, got {quadrant}")
        return self.update_item(item_id, **QUADRANT_TRAITS[quadrant])

    def get_item(self, item_id: str) -> Item | None:
        return self.items.get(item_id)

    def _require(self, item_id: str) -> Item:
        item = self.items.get(item_id)
        if item is None:
            raise ItemNotFoundError(f"Item not found: {item_id}")
        return item

    # Queries

    def all_items(self) -> list[Item]:
        return list(self.items.values())

    def items_in_quadrant(self, quadrant: int) -> list[Item]:
        return [item for item in self.items.values() if item.quadrant == quadrant]

    def items_by_quadrant(self) -> dict[int, list[Item]]:
        return {quadrant: self.items_in_quadrant(quadrant) for quadrant in QUADRANT_TRAITS}

    def completed_items(self) -> list[Item]:
        return [item for item in self.items.values() if item.completed]

    def pending_items(self) -> list[Item]:
        return [item for item in self.items.values() if not item.completed]

    def overdue_items(self) -> list[Item]:
        now = self.clock()
        return [item for item in self.items.values() if is_overdue(item, now)]

    def sorted_items(self, quadrant: int | None = None) -> list[Item]:
        """Items in display order, optionally restricted to one quadrant."""
        items = self.all_items() if quadrant is None else self.items_in_quadrant(quadrant)
        return self.ordering.order_for_display(items, quadrant)

    def statistics(self) -> MatrixStatistics:
        items = self.all_items()
        total = len(items)
        completed = len(self.completed_items())
        by_quadrant = self.items_by_quadrant()

        def average(flag: str) -> float:
            if total == 0:
                return 0.0
            return round(sum(int(getattr(item, flag)) for item in items) / total, 2)

        return {
            "total": total,
            "completed": completed,
            "pending": total - completed,
            "overdue": len(self.overdue_items()),
            "completion_rate": (completed / total) * 100 if total else 0.0,
            "quadrant_counts": {q: len(group) for q, group in by_quadrant.items()},
            "average_importance": average("important"),
            "average_urgency": average("urgent"),
        }

    # Tournament

    def start_tournament(self, rng: random.Random | None = None) -> Tournament:
        """
        Tournament over the pending quadrant 1 items, in display order.

        The ranking store holds a single ranking that only ever orders
        quadrant 1, so tournaments are never run over other quadrants.
        """
        candidates = [
            item
            for item in self.sorted_items(TOURNAMENT_QUADRANT)
            if not item.completed
        ]
        self.logger.info(f"Starting tournament over {len(candidates)} pending items")
        return Tournament(
            candidates, ranking_store=self.ranking_store, rng=rng, clock=self.clock
        )

    # Import / export

    def export_data(self) -> MatrixData:
        return {
            "tasks": [item.to_dict() for item in self.items.values()],  # type: ignore[misc]
            "exportDate": datetime.fromtimestamp(self.clock(), tz=timezone.utc).isoformat(),
            "version": EXPORT_VERSION,
        }

    @staticmethod
    def parse_items(data: object) -> dict[str, Item]:
        """
        Build items from an export document, migrating legacy records.

        Raises:
            ImportFormatError: Malformed document, invalid item or duplicate id
        """
        if not isinstance(data, dict) or not isinstance(data.get("tasks"), list):
            raise ImportFormatError("Invalid data format: expected an object with a 'tasks' list")

        items: dict[str, Item] = {}
        errors: list[str] = []
        raw_tasks = typing.cast(list[object], data["tasks"])
        for index, raw in enumerate(raw_tasks):
            if not isinstance(raw, dict):
                errors.append(f"task {index}: not an object")
                continue
            try:
                task = _task_adapter.validate_python(
                    migrate_legacy_item(typing.cast(dict[str, Any], raw))
                )
                item = Item.from_dict(dict(task))
            except (PydanticValidationError, ValidationError, ValueError, TypeError) as e:
                errors.append(f"task {index}: {e}")
                continue
            if item.item_id in items:
                errors.append(f"task {index}: duplicate id {item.item_id}")
                continue
            items[item.item_id] = item

        if errors:
            raise ImportFormatError(f"Invalid import data: {'; '.join(errors)}", errors)
        return items

    def import_data(self, data: object) -> int:
        """Replace every item with those in data; nothing changes on error."""
        items = self.parse_items(data)
        self.items = items
        self.save()
        self.logger.info(f"Imported {len(items)} items")
        self.emit("data_imported", {"item_count": len(items)})
        return len(items)

    def clear(self) -> int:
        count = len(self.items)
        self.items.clear()
        self.save()
        self.logger.info(f"Cleared {count} items")
        self.emit("items_cleared", {"item_count": count})
        return count

    # Persistence

    def save(self) -> None:
        try:
            self.store.set(DATA_KEY, json.dumps(self.export_data(), ensure_ascii=False))
        except Exception as e:
            self.logger.error(f"Failed to save matrix: {e}")

    def load(self) -> None:
        """Replace the in-memory items with the stored ones, if readable."""
        try:
            raw = self.store.get(DATA_KEY)
        except Exception as e:
            self.logger.error(f"Failed to read matrix: {e}")
            return

        if raw is None:
            self.logger.debug("No stored matrix data")
            return

        try:
            self.items = self.parse_items(json.loads(raw))
        except (json.JSONDecodeError, ImportFormatError) as e:
            self.logger.error(f"Failed to load matrix: {e}")
            return

        self.logger.info(f"Loaded {len(self.items)} items")

    # Callbacks

    def subscribe(self, event: str, handler: Handler) -> None:
        if event not in EVENTS:
            raise ValueError(f"Unknown event: {event}")
        self._handlers.setdefault(event, []).append(handler)

    def unsubscribe(self, event: str, handler: Handler) -> None:
        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: str, payload: Any) -> None:
        for handler in list(self._handlers.get(event, [])):
            try:
                handler(payload)
            except Exception as e:
                self.logger.error(f"Error in handler for {event}: {e}")

"""
Tests for Matrix.

Focus on CRUD, persistence, callbacks, import/export and tournaments.
"""

import json
import random
from typing import Any

import pytest

from priority_matrix.classifier import SECONDS_PER_DAY
from priority_matrix.exceptions import (
    ImportFormatError,
    InsufficientItemsError,
    ItemNotFoundError,
    ValidationError,
)
from priority_matrix.matrix import DATA_KEY, Matrix
from priority_matrix.storage.memory_store import InMemoryStore

NOW = 1_700_000_000.0


class Clock:
    """Manually advanced clock."""

    def __init__(self, now: float = NOW):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestMatrixItems:
    """Test item CRUD through public interface."""

    def test_add_item_classifies_and_persists(self) -> None:
        # Arrange
        store = InMemoryStore()
        matrix = Matrix(store, clock=Clock())

        # Act
        item = matrix.add_item("Fix outage", important=True, urgent=True)

        # Assert
        assert item.quadrant == 1
        assert matrix.get_item(item.item_id) is item
        stored = json.loads(store.get(DATA_KEY) or "{}")
        assert [t["id"] for t in stored["tasks"]] == [item.item_id]

    def test_items_reload_from_store(self) -> None:
        store = InMemoryStore()
        first = Matrix(store, clock=Clock())
        item = first.add_item("Plan roadmap", important=True)

        second = Matrix(store, clock=Clock())

        reloaded = second.get_item(item.item_id)
        assert reloaded is not None
        assert reloaded.name == "Plan roadmap"
        assert reloaded.quadrant == 2

    def test_invalid_add_is_rejected(self) -> None:
        matrix = Matrix(InMemoryStore(), clock=Clock())
        with pytest.raises(ValidationError):
            _ = matrix.add_item("")
        assert matrix.all_items() == []

    def test_update_moves_between_quadrants(self) -> None:
        # Arrange
        clock = Clock()
        matrix = Matrix(InMemoryStore(), clock=clock)
        item = matrix.add_item("Answer email", urgent=True)
        events: list[dict[str, Any]] = []
        matrix.subscribe("item_updated", events.append)
        clock.now += 60

        # Act
        _ = matrix.update_item(item.item_id, important=True)

        # Assert
        assert item.quadrant == 1
        assert item.updated == NOW + 60
        assert events == [{"item": item, "old_quadrant": 3}]

    def test_invalid_update_is_atomic(self) -> None:
        matrix = Matrix(InMemoryStore(), clock=Clock())
        item = matrix.add_item("Task", important=True)

        with pytest.raises(ValidationError):
            _ = matrix.update_item(item.item_id, urgent=True, description="x" * 501)

        assert item.urgent is False
        assert item.description == ""

    def test_unknown_ids_raise(self) -> None:
        matrix = Matrix(InMemoryStore(), clock=Clock())
        with pytest.raises(ItemNotFoundError):
            _ = matrix.update_item("missing", name="x")
        with pytest.raises(ItemNotFoundError):
            _ = matrix.delete_item("missing")

    def test_delete_item(self) -> None:
        matrix = Matrix(InMemoryStore(), clock=Clock())
        item = matrix.add_item("Task")
        deleted: list[Any] = []
        matrix.subscribe("item_deleted", deleted.append)

        _ = matrix.delete_item(item.item_id)

        assert matrix.get_item(item.item_id) is None
        assert deleted == [item]

    @pytest.mark.parametrize("quadrant", [1, 2, 3, 4])
    def test_move_to_quadrant(self, quadrant: int) -> None:
        matrix = Matrix(InMemoryStore(), clock=Clock())
        item = matrix.add_item("Task")

        _ = matrix.move_to_quadrant(item.item_id, quadrant)

        assert item.quadrant == quadrant

    def test_move_to_invalid_quadrant(self) -> None:
        matrix = Matrix(InMemoryStore(), clock=Clock())
        item = matrix.add_item("Task")
        with pytest.raises(ValidationError):
            _ = matrix.move_to_quadrant(item.item_id, 5)

    def test_failing_handler_does_not_break_mutation(self) -> None:
        matrix = Matrix(InMemoryStore(), clock=Clock())

        def broken(_: Any) -> None:
            raise RuntimeError("handler bug")

        matrix.subscribe("item_added", broken)
        item = matrix.add_item("Task")

        assert matrix.get_item(item.item_id) is item

    def test_unsubscribe(self) -> None:
        matrix = Matrix(InMemoryStore(), clock=Clock())
        seen: list[Any] = []
        matrix.subscribe("item_added", seen.append)
        matrix.unsubscribe("item_added", seen.append)

        _ = matrix.add_item("Task")

        assert seen == []

    def test_unknown_event_is_rejected(self) -> None:
        matrix = Matrix(InMemoryStore(), clock=Clock())
        with pytest.raises(ValueError):
            matrix.subscribe("taskAdded", print)


class TestMatrixQueries:
    """Test filtering and statistics."""

    def test_statistics(self) -> None:
        # Arrange
        clock = Clock()
        matrix = Matrix(InMemoryStore(), clock=clock)
        old = matrix.add_item("Old fire", important=True, urgent=True)
        _ = matrix.add_item("Plan", important=True)
        done = matrix.add_item("Chores")
        _ = matrix.complete_item(done.item_id)
        clock.now += 10 * SECONDS_PER_DAY

        # Act
        stats = matrix.statistics()

        # Assert
        assert stats["total"] == 3
        assert stats["completed"] == 1
        assert stats["pending"] == 2
        assert stats["overdue"] == 1
        assert matrix.overdue_items() == [old]
        assert stats["completion_rate"] == pytest.approx(100 / 3)
        assert stats["quadrant_counts"] == {1: 1, 2: 1, 3: 0, 4: 1}
        assert stats["average_importance"] == 0.67
        assert stats["average_urgency"] == 0.33

    def test_empty_statistics(self) -> None:
        stats = Matrix(InMemoryStore(), clock=Clock()).statistics()
        assert stats["total"] == 0
        assert stats["completion_rate"] == 0.0
        assert stats["average_importance"] == 0.0


class TestMatrixImportExport:
    """Test import/export and legacy data."""

    def test_export_import_round_trip(self) -> None:
        # Arrange
        source = Matrix(InMemoryStore(), clock=Clock())
        _ = source.add_item("A", important=True, urgent=True)
        _ = source.add_item("B", description="later")
        exported = json.loads(json.dumps(source.export_data()))
        target = Matrix(InMemoryStore(), clock=Clock())
        imported: list[Any] = []
        target.subscribe("data_imported", imported.append)

        # Act
        count = target.import_data(exported)

        # Assert
        assert count == 2
        assert sorted(i.name for i in target.all_items()) == ["A", "B"]
        assert imported == [{"item_count": 2}]
        assert exported["version"] == "1.0.0"

    def test_import_migrates_legacy_traits(self) -> None:
        matrix = Matrix(InMemoryStore(), clock=Clock())
        data = {
            "tasks": [
                {"id": "old", "name": "Legacy", "importance": 5, "urgency": 4, "quadrant": 4},
            ]
        }

        _ = matrix.import_data(data)

        item = matrix.get_item("old")
        assert item is not None
        assert item.important and item.urgent
        assert item.quadrant == 1

    def test_bad_import_keeps_existing_items(self) -> None:
        # Arrange
        matrix = Matrix(InMemoryStore(), clock=Clock())
        existing = matrix.add_item("Keep me")
        data = {"tasks": [{"id": "ok", "name": "Fine"}, {"id": "bad", "name": ""}]}

        # Act
        with pytest.raises(ImportFormatError):
            _ = matrix.import_data(data)

        # Assert
        assert matrix.all_items() == [existing]

    @pytest.mark.parametrize("data", [None, [], {"tasks": "x"}, {"items": []}])
    def test_malformed_import_document(self, data: object) -> None:
        matrix = Matrix(InMemoryStore(), clock=Clock())
        with pytest.raises(ImportFormatError):
            _ = matrix.import_data(data)

    def test_duplicate_ids_in_import(self) -> None:
        matrix = Matrix(InMemoryStore(), clock=Clock())
        data = {"tasks": [{"id": "x", "name": "One"}, {"id": "x", "name": "Two"}]}
        with pytest.raises(ImportFormatError):
            _ = matrix.import_data(data)

    def test_import_accepts_epoch_millis_timestamps(self) -> None:
        matrix = Matrix(InMemoryStore(), clock=Clock())
        data = {
            "tasks": [
                {
                    "id": "old",
                    "name": "Legacy",
                    "importance": True,
                    "urgency": False,
                    "created": 1_700_000_000_000,
                    "updated": 1_700_000_500_000,
                },
            ]
        }

        _ = matrix.import_data(data)

        item = matrix.get_item("old")
        assert item is not None
        assert item.created == 1_700_000_000.0
        assert item.updated == 1_700_000_500.0

    @pytest.mark.parametrize(
        "task",
        [
            {"id": "x", "name": "Bad date", "created": ["2024"]},
            {"id": "x", "name": "Bad date", "updated": {"at": 1}},
            {"id": "x", "name": 42},
            {"id": "x", "name": "Bad score", "battleScore": "lots"},
        ],
    )
    def test_wrongly_typed_fields_raise_import_format_error(self, task: dict[str, Any]) -> None:
        matrix = Matrix(InMemoryStore(), clock=Clock())
        existing = matrix.add_item("Keep me")

        with pytest.raises(ImportFormatError):
            _ = matrix.import_data({"tasks": [task]})

        assert matrix.all_items() == [existing]

    def test_corrupt_store_starts_empty(self) -> None:
        matrix = Matrix(InMemoryStore({DATA_KEY: "garbage"}), clock=Clock())
        assert matrix.all_items() == []

    def test_clear(self) -> None:
        matrix = Matrix(InMemoryStore(), clock=Clock())
        _ = matrix.add_item("A")
        _ = matrix.add_item("B")

        assert matrix.clear() == 2
        assert matrix.all_items() == []


class TestMatrixTournament:
    """Test tournaments started from the matrix."""

    def test_tournament_uses_pending_quadrant_items(self) -> None:
        # Arrange
        matrix = Matrix(InMemoryStore(), clock=Clock())
        a = matrix.add_item("A", important=True, urgent=True)
        b = matrix.add_item("B", important=True, urgent=True)
        done = matrix.add_item("Done", important=True, urgent=True)
        _ = matrix.complete_item(done.item_id)
        _ = matrix.add_item("Elsewhere", important=True)

        # Act
        tournament = matrix.start_tournament(rng=random.Random(0))

        # Assert
        assert {i.item_id for i in tournament.items} == {a.item_id, b.item_id}

    def test_tournament_needs_two_items(self) -> None:
        matrix = Matrix(InMemoryStore(), clock=Clock())
        _ = matrix.add_item("Alone", important=True, urgent=True)
        with pytest.raises(InsufficientItemsError):
            _ = matrix.start_tournament()

    def test_completed_tournament_reorders_quadrant_one(self) -> None:
        # Arrange
        matrix = Matrix(InMemoryStore(), clock=Clock())
        a = matrix.add_item("A", important=True, urgent=True)
        b = matrix.add_item("B", important=True, urgent=True)
        c = matrix.add_item("C", important=True, urgent=True)
        tournament = matrix.start_tournament(rng=random.Random(0))
        preference = [c.item_id, a.item_id, b.item_id]

        # Act
        while (pair := tournament.current_pair()) is not None:
            x, y = pair.ids
            if preference.index(x) < preference.index(y):
                _ = tournament.record_outcome(x, y)
            else:
                _ = tournament.record_outcome(y, x)
        late = matrix.add_item("Late arrival", important=True, urgent=True)

        # Assert
        assert [i.item_id for i in matrix.sorted_items(1)] == preference + [late.item_id]

    def test_other_quadrants_never_replace_the_ranking(self) -> None:
        # Arrange
        matrix = Matrix(InMemoryStore(), clock=Clock())
        a = matrix.add_item("A", important=True, urgent=True)
        b = matrix.add_item("B", important=True, urgent=True)
        first = matrix.start_tournament(rng=random.Random(0))
        _ = first.record_outcome(b.item_id, a.item_id)
        planned = [matrix.add_item(n, important=True) for n in ("Plan", "Study")]

        # Act
        second = matrix.start_tournament(rng=random.Random(0))

        # Assert
        assert {i.item_id for i in second.items} == {a.item_id, b.item_id}
        record = matrix.ranking_store.load()
        assert record is not None
        ranked = {entry.item_id for entry in record.rankings}
        assert ranked == {a.item_id, b.item_id}
        assert not ranked & {item.item_id for item in planned}
        assert [i.item_id for i in matrix.sorted_items(1)] == [b.item_id, a.item_id]

"""
Integration tests for priority matrix.

End-to-end tests with file-backed storage and the CLI.
"""

import io
import json
import random
import sys
import tempfile
from collections.abc import Iterator
from pathlib import Path

import pytest
from loguru import logger

from priority_matrix.__main__ import main
from priority_matrix.battle import run_battle
from priority_matrix.judges.sim_judge import SimulatedJudge
from priority_matrix.matrix import Matrix
from priority_matrix.storage.json_file_store import JSONFileStore
from priority_matrix.storage.ranking_store import RankingStore


@pytest.fixture(autouse=True)
def restore_logging() -> Iterator[None]:
    """The CLI reconfigures loguru; put the default sink back afterwards."""
    yield
    logger.remove()
    _ = logger.add(sys.stderr)


class TestIntegration:
    """Integration tests using all real components."""

    def test_battle_ranking_survives_restart(self) -> None:
        """Ranking saved by a battle should order quadrant 1 in a fresh session."""
        with tempfile.TemporaryDirectory() as temp_dir:
            # Arrange
            path = Path(temp_dir) / "store.json"
            matrix = Matrix(JSONFileStore(path))
            names = ["Outage", "Deadline", "Audit", "Hiring"]
            items = [matrix.add_item(n, important=True, urgent=True) for n in names]
            _ = matrix.add_item("Someday", important=False, urgent=False)
            truth = {item.item_id: float(i) for i, item in enumerate(items)}

            # Act
            tournament = matrix.start_tournament(rng=random.Random(12))
            ranking = run_battle(tournament, SimulatedJudge(truth))
            matrix.save()
            restarted = Matrix(JSONFileStore(path))

            # Assert
            expected = [item.item_id for item in reversed(items)]
            assert [e.item_id for e in ranking] == expected
            assert [i.item_id for i in restarted.sorted_items(1)] == expected
            assert restarted.get_item(expected[0]).tournament_score == 106  # type: ignore[union-attr]
            record = RankingStore(JSONFileStore(path)).load()
            assert record is not None
            assert sorted(record.item_ids) == sorted(truth)

    def test_cli_add_list_battle_export(self, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            data_dir = ["--data-dir", temp_dir]

            # Arrange
            main(data_dir + ["add", "First", "--important", "--urgent"])
            main(data_dir + ["add", "Second", "--important", "--urgent"])
            main(data_dir + ["add", "Later", "--important"])
            _ = capsys.readouterr()

            # Act: always prefer the first option shown
            monkeypatch.setattr("sys.stdin", io.StringIO("1\n"))
            main(data_dir + ["battle"])
            battle_output = capsys.readouterr().out

            main(data_dir + ["list", "--quadrant", "1"])
            list_output = capsys.readouterr().out

            export_path = Path(temp_dir) / "export.json"
            main(data_dir + ["export", str(export_path)])

            # Assert
            assert "The One:" in battle_output
            assert "First" in list_output and "Second" in list_output
            assert "Later" not in list_output
            exported = json.loads(export_path.read_text(encoding="utf-8"))
            assert sorted(t["name"] for t in exported["tasks"]) == ["First", "Later", "Second"]
            assert sorted(t["battleScore"] for t in exported["tasks"]) == [0, 0, 102]

    def test_cli_reports_errors(self, capsys: pytest.CaptureFixture[str]) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            with pytest.raises(SystemExit) as exc_info:
                main(["--data-dir", temp_dir, "battle"])

            assert exc_info.value.code == 1
            assert "At least 2 items" in capsys.readouterr().out

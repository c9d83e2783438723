"""
CLI entry point for priority matrix.

Parses arguments, validates config, and wires components.
"""

import argparse
import json
import sys
from argparse import Namespace
from pathlib import Path

from prettytable import PrettyTable

from .battle import run_battle
from .classifier import is_overdue, priority_score
from .config import LOG_LEVELS, AppConfig
from .exceptions import (
    BattleAborted,
    ItemNotFoundError,
    TournamentError,
    ValidationError,
)
from .judges.interactive_judge import InteractiveJudge
from .logging_config import get_logger, setup_logging
from .matrix import Matrix
from .models import QUADRANT_NAMES
from .storage.json_file_store import JSONFileStore
from .storage.ranking_store import RankingStore


def parse_args(argv: list[str] | None = None) -> Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="priority-matrix",
        description="Priority Matrix - Eisenhower prioritization with pairwise battles",
    )
    _ = parser.add_argument(
        "--data-dir",
        default=str(Path.home() / ".priority_matrix"),
        help="Directory for stored items and rankings (default: ~/.priority_matrix)",
    )
    _ = parser.add_argument(
        "--ttl-days",
        type=int,
        default=7,
        help="Days a battle ranking stays valid (default: 7)",
    )
    _ = parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    _ = parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default="WARNING",
        help="Set logging level (default: WARNING)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    add = commands.add_parser("add", help="Add an item")
    _ = add.add_argument("name")
    _ = add.add_argument("--description", default="")
    _ = add.add_argument("--important", action="store_true")
    _ = add.add_argument("--urgent", action="store_true")

    update = commands.add_parser("update", help="Change an item")
    _ = update.add_argument("item_id")
    _ = update.add_argument("--name")
    _ = update.add_argument("--description")
    _ = update.add_argument("--important", action=argparse.BooleanOptionalAction, default=None)
    _ = update.add_argument("--urgent", action=argparse.BooleanOptionalAction, default=None)

    complete = commands.add_parser("complete", help="Mark an item done")
    _ = complete.add_argument("item_id")

    delete = commands.add_parser("delete", help="Delete an item")
    _ = delete.add_argument("item_id")

    move = commands.add_parser("move", help="Move an item to another quadrant")
    _ = move.add_argument("item_id")
    _ = move.add_argument("quadrant", type=int, choices=sorted(QUADRANT_NAMES))

    listing = commands.add_parser("list", help="List items in display order")
    _ = listing.add_argument("--quadrant", type=int, choices=sorted(QUADRANT_NAMES))

    _ = commands.add_parser("stats", help="Show matrix statistics")

    battle = commands.add_parser("battle", help="Rank the pending Do First items pairwise")
    _ = battle.add_argument(
        "--runners-up", type=int, default=3, help="How many runners-up to show (default: 3)"
    )

    export = commands.add_parser("export", help="Write all items to a JSON file")
    _ = export.add_argument("path")

    import_ = commands.add_parser("import", help="Replace all items from a JSON file")
    _ = import_.add_argument("path")

    _ = commands.add_parser("clear-ranking", help="Forget the last battle ranking")

    return parser.parse_args(argv)


def build_config(ns: Namespace) -> AppConfig:
    """Convert argparse Namespace to AppConfig."""
    return AppConfig(
        data_dir=Path(ns.data_dir),
        ttl_days=ns.ttl_days,
        log_level=ns.log_level,
        debug=ns.debug,
    )


def wire_components(config: AppConfig) -> Matrix:
    """Wire dependency injection components."""
    logger = get_logger("wire_components")
    logger.info(f"Using data directory {config.data_dir}")
    store = JSONFileStore(config.store_path)
    ranking_store = RankingStore(store, ttl_days=config.ttl_days)
    return Matrix(store, ranking_store=ranking_store)


def print_items(matrix: Matrix, quadrant: int | None) -> None:
    table = PrettyTable()
    table.field_names = ["#", "ID", "Name", "Quadrant", "Score", "Battle", "Done", "Overdue"]
    table.align["Name"] = "l"
    table.align["Score"] = "r"
    table.align["Battle"] = "r"

    now = matrix.clock()
    for position, item in enumerate(matrix.sorted_items(quadrant), 1):
        table.add_row([
            position,
            item.item_id[:8],
            item.name,
            f"Q{item.quadrant} {item.quadrant_name}",
            f"{priority_score(item, now):.1f}",
            item.tournament_score,
            "x" if item.completed else "",
            "!" if is_overdue(item, now) else "",
        ])
    print(table)


def print_statistics(matrix: Matrix) -> None:
    stats = matrix.statistics()
    table = PrettyTable()
    table.field_names = ["Metric", "Value"]
    table.align["Metric"] = "l"
    table.align["Value"] = "r"
    table.add_row(["Total", stats["total"]])
    table.add_row(["Completed", stats["completed"]])
    table.add_row(["Pending", stats["pending"]])
    table.add_row(["Overdue", stats["overdue"]])
    table.add_row(["Completion rate", f"{stats['completion_rate']:.1f}%"])
    for quadrant, count in stats["quadrant_counts"].items():
        table.add_row([f"Q{quadrant} {QUADRANT_NAMES[quadrant]}", count])
    table.add_row(["Average importance", f"{stats['average_importance']:.2f}"])
    table.add_row(["Average urgency", f"{stats['average_urgency']:.2f}"])
    print(table)


def battle(matrix: Matrix, runners_up: int) -> None:
    """Run an interactive battle and print the outcome."""
    tournament = matrix.start_tournament()
    stats = tournament.statistics()
    print(f"Battle over {stats['total_items']} items: {stats['total_pairs']} comparisons")

    _ = run_battle(tournament, InteractiveJudge())
    # Completed battles overwrite tournament scores on the items
    matrix.save()

    best, rest = tournament.top_and_runners_up(runners_up)
    if best is None:
        return

    table = PrettyTable()
    table.field_names = ["Rank", "Name", "Score", "Wins", "Losses", "Win%"]
    table.align["Name"] = "l"
    for rank, entry in enumerate([best, *rest], 1):
        table.add_row([
            rank,
            tournament.item(entry.item_id).name,
            entry.score,
            entry.wins,
            entry.losses,
            f"{entry.win_rate}%",
        ])
    print(f"\nThe One: {tournament.item(best.item_id).name}")
    print(table)


def run_command(ns: Namespace, matrix: Matrix) -> None:
    """Dispatch a parsed subcommand."""
    if ns.command == "add":
        item = matrix.add_item(
            ns.name, description=ns.description, important=ns.important, urgent=ns.urgent
        )
        print(f"Added {item.item_id} to Q{item.quadrant} {item.quadrant_name}")
    elif ns.command == "update":
        changes = {
            key: getattr(ns, key)
            for key in ("name", "description", "important", "urgent")
            if getattr(ns, key) is not None
        }
        item = matrix.update_item(resolve_id(matrix, ns.item_id), **changes)
        print(f"Updated {item.item_id}")
    elif ns.command == "complete":
        item = matrix.complete_item(resolve_id(matrix, ns.item_id))
        print(f"Completed {item.name}")
    elif ns.command == "delete":
        item = matrix.delete_item(resolve_id(matrix, ns.item_id))
        print(f"Deleted {item.name}")
    elif ns.command == "move":
        item = matrix.move_to_quadrant(resolve_id(matrix, ns.item_id), ns.quadrant)
        print(f"Moved {item.name} to Q{item.quadrant} {item.quadrant_name}")
    elif ns.command == "list":
        print_items(matrix, ns.quadrant)
    elif ns.command == "stats":
        print_statistics(matrix)
    elif ns.command == "battle":
        battle(matrix, ns.runners_up)
    elif ns.command == "export":
        with open(ns.path, "w", encoding="utf-8") as f:
            json.dump(matrix.export_data(), f, indent=2, ensure_ascii=False)
        print(f"Exported {len(matrix.items)} items to {ns.path}")
    elif ns.command == "import":
        with open(ns.path, "r", encoding="utf-8") as f:
            count = matrix.import_data(json.load(f))
        print(f"Imported {count} items from {ns.path}")
    elif ns.command == "clear-ranking":
        matrix.ranking_store.clear()
        print("Battle ranking cleared")
    else:
        raise ValueError(f"Unknown command: {ns.command}")


def resolve_id(matrix: Matrix, prefix: str) -> str:
    """Expand an id prefix as shown by `list` to a full item id."""
    if prefix in matrix.items:
        return prefix
    matches = [item_id for item_id in matrix.items if item_id.startswith(prefix)]
    if len(matches) != 1:
        raise ItemNotFoundError(f"Item not found or ambiguous: {prefix}")
    return matches[0]


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    ns = parse_args(argv)
    try:
        config = build_config(ns)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(2)

    config.data_dir.mkdir(parents=True, exist_ok=True)
    setup_logging(level=config.log_level, debug=config.debug, log_file=config.log_path)
    logger = get_logger("main")
    logger.info(f"Running command: {ns.command}")

    matrix = wire_components(config)
    try:
        run_command(ns, matrix)
    except (ValidationError, TournamentError, json.JSONDecodeError, OSError) as e:
        logger.error(f"{ns.command} failed: {e}")
        print(f"Error: {e}")
        sys.exit(1)
    except ItemNotFoundError as e:
        print(f"Error: {e.args[0]}")
        sys.exit(1)
    except (BattleAborted, KeyboardInterrupt):
        logger.warning("Battle interrupted by user")
        print("\nBattle abandoned; no ranking saved")
        sys.exit(1)


if __name__ == "__main__":
    main()

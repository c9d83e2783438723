"""
Round-robin tournament engine ("Battle Mode").

Generates every unordered pair of a fixed item snapshot, presents them in a
shuffled order, accumulates win/loss tallies and computes a win-rate based
ranking once every pair has been decided.
"""

import random
import time
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from loguru import Logger

from .exceptions import (
    DuplicateItemError,
    InsufficientItemsError,
    InvalidComparisonError,
    NoActiveComparisonError,
    TooManyItemsError,
)
from .interfaces import TournamentState, TournamentStatistics
from .logging_config import get_logger
from .models import (
    Item,
    Outcome,
    OutcomeResult,
    Pair,
    Progress,
    RankingEntry,
    RankingRecord,
    Tally,
    round_half_up,
)
from .storage.ranking_store import RankingStore

MIN_ITEMS = 2
MAX_ITEMS = 20  # 190 pairs
WIN_RATE_WEIGHT = 100
WIN_BONUS = 2
DEFAULT_RUNNERS_UP = 3


def final_score(tally: Tally) -> int:
    """round(100 * wins / comparisons) + 2 * wins; 0 without comparisons."""
    if tally.comparisons == 0:
        return 0
    win_rate = round_half_up(WIN_RATE_WEIGHT * tally.wins / tally.comparisons)
    return win_rate + WIN_BONUS * tally.wins


class Tournament:
    """
    Stateful round robin over 2-20 items.

    Outcomes are committed atomically: a rejected call leaves every tally,
    the cursor and the outcome map untouched. The transition into the
    complete state happens exactly once per run and is the only point where
    item scores are written and the ranking is pushed to the store.
    """

    def __init__(
        self,
        items: Sequence[Item],
        ranking_store: RankingStore | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize tournament.

        Args:
            items: Snapshot of participants (2-20 items, unique ids)
            ranking_store: Receives the ranking on completion (optional)
            rng: Source of the pair shuffle; pass a seeded Random for
                reproducible order
            clock: Returns the current time in epoch seconds

        Raises:
            InsufficientItemsError: Fewer than 2 items
            TooManyItemsError: More than 20 items
            DuplicateItemError: The same id appears twice
        """
        self.validate_items(items)

        self.items: list[Item] = list(items)
        self.ranking_store: RankingStore | None = ranking_store
        self.rng: random.Random = rng if rng is not None else random.Random()
        self.clock: Callable[[], float] = clock
        self.logger: Logger = get_logger("tournament")

        self._by_id: dict[str, Item] = {item.item_id: item for item in self.items}
        self.pairs: list[Pair] = []
        self.cursor: int = 0
        self.tallies: dict[str, Tally] = {}
        self.outcomes: dict[frozenset[str], Outcome] = {}
        self.is_complete: bool = False

        self._initialize()
        self.logger.info(
            f"Tournament created: {len(self.items)} items, {len(self.pairs)} pairs"
        )

    @staticmethod
    def validate_items(items: Sequence[Item]) -> None:
        """Raise if items cannot form a tournament."""
        if len(items) < MIN_ITEMS:
            raise InsufficientItemsError(
                f"At least {MIN_ITEMS} items are required for a tournament, got {len(items)}"
            )
        if len(items) > MAX_ITEMS:
            raise TooManyItemsError(
                f"Maximum {MAX_ITEMS} items allowed in a tournament, got {len(items)}"
            )

        seen: set[str] = set()
        for item in items:
            if item.item_id in seen:
                raise DuplicateItemError(f"Duplicate item id: {item.item_id}")
            seen.add(item.item_id)

    @staticmethod
    def can_start(items: Sequence[Item]) -> bool:
        return MIN_ITEMS <= len(items) <= MAX_ITEMS

    def _initialize(self) -> None:
        self.tallies = {item.item_id: Tally() for item in self.items}
        self.outcomes = {}
        self.cursor = 0
        self.is_complete = False
        self.pairs = [
            Pair(self.items[i], self.items[j])
            for i in range(len(self.items))
            for j in range(i + 1, len(self.items))
        ]
        # Fisher-Yates
        self.rng.shuffle(self.pairs)

    def reset(self) -> None:
        """Discard all outcomes and start over with a fresh pair order."""
        self._initialize()
        self.logger.info("Tournament reset")

    def item(self, item_id: str) -> Item:
        """Look up a participant by id."""
        return self._by_id[item_id]

    def current_pair(self) -> Pair | None:
        """The pair awaiting a decision, or None once complete."""
        if self.cursor >= len(self.pairs):
            return None
        return self.pairs[self.cursor]

    def record_outcome(self, winner_id: str, loser_id: str) -> OutcomeResult:
        """
        Record the decision for the current pair and advance.

        Raises:
            NoActiveComparisonError: The tournament is already complete
            InvalidComparisonError: Ids do not match the current pair or are equal
        """
        pair = self.current_pair()
        if pair is None:
            raise NoActiveComparisonError("No active comparison")

        if (
            winner_id == loser_id
            or not pair.contains(winner_id)
            or not pair.contains(loser_id)
        ):
            raise InvalidComparisonError(
                f"Invalid comparison result: winner={winner_id}, loser={loser_id}, pair={pair.ids}"
            )

        self.outcomes[pair.key] = Outcome(
            winner_id=winner_id, loser_id=loser_id, timestamp=self.clock()
        )

        winner = self.tallies[winner_id]
        winner.wins += 1
        winner.comparisons += 1
        loser = self.tallies[loser_id]
        loser.losses += 1
        loser.comparisons += 1

        self.cursor += 1
        self.logger.debug(
            f"Comparison {self.cursor}/{len(self.pairs)}: {winner_id} beat {loser_id}"
        )

        if self.cursor == len(self.pairs):
            self._complete()

        return OutcomeResult(
            is_complete=self.is_complete,
            progress=self.progress(),
            current_pair=self.current_pair(),
        )

    def _complete(self) -> None:
        self.is_complete = True

        for item in self.items:
            tally = self.tallies[item.item_id]
            tally.score = final_score(tally)
            item.tournament_score = tally.score

        self.logger.info(f"Tournament complete after {len(self.pairs)} comparisons")

        if self.ranking_store is not None:
            self.ranking_store.save(self.to_record())

    def ranking(self) -> list[RankingEntry]:
        """
        Participants sorted by descending score.

        Ties keep snapshot order. Before completion the scores are interim
        values computed from the comparisons so far.
        """
        entries = []
        for item in self.items:
            tally = self.tallies[item.item_id]
            score = tally.score if self.is_complete else final_score(tally)
            entries.append(
                RankingEntry(
                    item_id=item.item_id,
                    score=score,
                    wins=tally.wins,
                    losses=tally.losses,
                )
            )
        # sorted() is stable
        return sorted(entries, key=lambda entry: entry.score, reverse=True)

    def top_and_runners_up(
        self, k: int = DEFAULT_RUNNERS_UP
    ) -> tuple[RankingEntry | None, list[RankingEntry]]:
        """The winner plus the next k entries; (None, []) until complete."""
        if not self.is_complete:
            return None, []
        ranking = self.ranking()
        return ranking[0], ranking[1 : k + 1]

    def to_record(self) -> RankingRecord:
        """Build the persisted form of the current ranking."""
        return RankingRecord(
            rankings=self.ranking(),
            created_at=int(self.clock() * 1000),
            item_ids=[item.item_id for item in self.items],
        )

    def progress(self) -> Progress:
        return Progress(current=self.cursor, total=len(self.pairs))

    def get_outcome(self, item_id_a: str, item_id_b: str) -> Outcome | None:
        """Outcome for a pair, in either argument order."""
        return self.outcomes.get(frozenset((item_id_a, item_id_b)))

    def has_outcome(self, item_id_a: str, item_id_b: str) -> bool:
        return frozenset((item_id_a, item_id_b)) in self.outcomes

    def statistics(self) -> TournamentStatistics:
        progress = self.progress()
        return {
            "total_items": len(self.items),
            "total_pairs": progress.total,
            "completed_comparisons": progress.current,
            "remaining_comparisons": progress.remaining,
            "is_complete": self.is_complete,
            "percentage": progress.percentage,
        }

    def export_state(self) -> TournamentState:
        """Dump the whole tournament as JSON-serializable data."""
        return {
            "tasks": [item.to_dict() for item in self.items],  # type: ignore[misc]
            "comparisons": [
                {
                    "winner": outcome.winner_id,
                    "loser": outcome.loser_id,
                    "timestamp": outcome.timestamp,
                }
                for outcome in self.outcomes.values()
            ],
            "scores": {
                item_id: {
                    "wins": tally.wins,
                    "losses": tally.losses,
                    "comparisons": tally.comparisons,
                    "score": tally.score,
                }
                for item_id, tally in self.tallies.items()
            },
            "isComplete": self.is_complete,
            "currentPairIndex": self.cursor,
            "timestamp": datetime.fromtimestamp(self.clock(), tz=timezone.utc).isoformat(),
        }

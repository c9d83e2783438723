"""
Battle driver.

Feeds a tournament's pairs to a judge until every pair is decided.
"""

from .interfaces import Judge
from .logging_config import get_logger
from .models import RankingEntry
from .tournament import Tournament

# Module-level logger
logger = get_logger("battle")


def run_battle(tournament: Tournament, judge: Judge) -> list[RankingEntry]:
    """
    Run a tournament to completion.

    Args:
        tournament: Fresh or partially played tournament
        judge: Decides each pair

    Returns:
        Final ranking, best first

    Raises:
        InvalidComparisonError: The judge named an item outside the pair
        BattleAborted: The judge gave up; the tournament keeps its progress
    """
    pair = tournament.current_pair()
    while pair is not None:
        winner_id = judge.pick_winner(pair)
        loser_id = pair.ids[1] if winner_id == pair.ids[0] else pair.ids[0]
        result = tournament.record_outcome(winner_id, loser_id)
        logger.info(
            f"Battle progress {result.progress.current}/{result.progress.total} ({result.progress.percentage}%)"
        )
        pair = result.current_pair

    ranking = tournament.ranking()
    if ranking:
        logger.info(f"Battle winner: {ranking[0].item_id} (score {ranking[0].score})")
    return ranking

"""
Interactive judge implementation.

Shows each match-up on a text stream and reads the user's choice.
"""

import sys
from typing import TextIO

from typing_extensions import override

from ..exceptions import BattleAborted
from ..interfaces import Judge
from ..logging_config import get_logger
from ..models import Pair

# Module-level logger
logger = get_logger("interactive_judge")

QUIT_ANSWERS = frozenset({"q", "quit", "exit"})


class InteractiveJudge(Judge):
    """Asks a human which of two items matters more."""

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None):
        self.stdin: TextIO = stdin if stdin is not None else sys.stdin
        self.stdout: TextIO = stdout if stdout is not None else sys.stdout

    def _prompt(self, text: str) -> str:
        _ = self.stdout.write(text)
        self.stdout.flush()
        line = self.stdin.readline()
        if not line:
            raise BattleAborted("Input closed")
        return line.strip().lower()

    @override
    def pick_winner(self, pair: Pair) -> str:
        _ = self.stdout.write("\nWhich is more important to do first?\n")
        _ = self.stdout.write(f"  [1] {pair.item_a.name}\n")
        _ = self.stdout.write(f"  [2] {pair.item_b.name}\n")

        while True:
            answer = self._prompt("Choose 1 or 2 (q to quit): ")
            if answer == "1":
                return pair.item_a.item_id
            if answer == "2":
                return pair.item_b.item_id
            if answer in QUIT_ANSWERS:
                logger.info("Battle aborted by user")
                raise BattleAborted("Battle aborted by user")
            _ = self.stdout.write(f"Unrecognized answer: {answer!r}\n")

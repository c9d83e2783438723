"""
Simulated judge implementation.

Decides match-ups from latent scores with a noise parameter, for testing and
demos.
"""

import random

from typing_extensions import override

from ..interfaces import Judge
from ..models import Pair


class SimulatedJudge(Judge):
    """
    Simulated judge for testing purposes.

    The item with the higher (noisy) ground-truth score wins; ties go to the
    first item of the pair.
    """

    def __init__(
        self,
        ground_truth: dict[str, float],
        noise: float = 0.0,
        rng: random.Random | None = None,
    ):
        """
        Initialize simulated judge.

        Args:
            ground_truth: Dict mapping item_id to true priority
            noise: Amount of noise to add (0-1, where 1 = full noise)
            rng: Random source for the noise
        """
        self.ground_truth = ground_truth
        self.noise = max(0.0, min(1.0, noise))  # Clamp to [0, 1]
        self.rng = rng if rng is not None else random.Random()
        self.decisions = 0

    def _noisy(self, score: float) -> float:
        if self.noise == 0:
            return score
        return score + self.rng.gauss(0, abs(score) * self.noise)

    @override
    def pick_winner(self, pair: Pair) -> str:
        id_a, id_b = pair.ids
        score_a = self._noisy(self.ground_truth.get(id_a, 0.0))
        score_b = self._noisy(self.ground_truth.get(id_b, 0.0))
        self.decisions += 1
        return id_a if score_a >= score_b else id_b

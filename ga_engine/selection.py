import bisect
import itertools
import random
from abc import ABC, abstractmethod
from typing import List, Sequence

from loguru import logger

from .errors import ConfigurationError
from .evaluation import FitnessRecord, fitness_weights
from .representations.base import Candidate


class SelectionStrategy(ABC):
    """Picks ``count`` candidates, with replacement, from a ranked population."""

    name: str = "base"

    def select(
        self, records: Sequence[FitnessRecord], count: int, natural: bool, rng: random.Random
    ) -> List[Candidate]:
        if not records:
            raise ConfigurationError("cannot select from an empty population")
        if count < 0:
            raise ConfigurationError(f"count must be non-negative, got {count}")
        return [records[i].candidate for i in self.select_indices(records, count, natural, rng)]

    @abstractmethod
    def select_indices(
        self, records: Sequence[FitnessRecord], count: int, natural: bool, rng: random.Random
    ) -> List[int]:
        """Positions into ``records`` of the chosen candidates."""
        raise NotImplementedError


class RouletteWheelSelection(SelectionStrategy):
    name = "roulette"

    def select_indices(self, records, count, natural, rng):
        weights = fitness_weights(records, natural)
        total = sum(weights)
        if total <= 0:
            logger.debug("[RouletteWheelSelection] all weights are zero, selecting uniformly")
            return [rng.randrange(len(records)) for _ in range(count)]
        cumulative = list(itertools.accumulate(w / total for w in weights))
        last = len(records) - 1
        # min() guards against rounding leaving the final cumulative value below 1.
        return [min(bisect.bisect_right(cumulative, rng.random()), last) for _ in range(count)]


class TournamentSelection(SelectionStrategy):
    name = "tournament"

    def __init__(self, tournament_size: int = 2):
        if tournament_size < 1:
            raise ConfigurationError(f"tournament_size must be at least 1, got {tournament_size}")
        self.tournament_size = tournament_size

    def select_indices(self, records, count, natural, rng):
        n = len(records)
        chosen = []
        for _ in range(count):
            entrants = [rng.randrange(n) for _ in range(self.tournament_size)]
            # Records are ranked best first, so the smallest rank wins.
            chosen.append(min(entrants, key=lambda i: records[i].rank))
        return chosen

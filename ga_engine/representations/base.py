import random
from abc import ABC, abstractmethod
from typing import Hashable, List, Tuple

from ..errors import ConfigurationError


Vector = Tuple[float, ...]
Route = Tuple[Hashable, ...]
Candidate = Tuple


def check_probability(name: str, value: float) -> float:
    if not 0.0 <= value <= 1.0:
        raise ConfigurationError(f"{name} must be within [0, 1], got {value}")
    return float(value)


class Representation(ABC):
    """
    Capability set for one candidate encoding: how to draw random candidates,
    recombine two parents and mutate a child. The engine only talks to this
    interface, so it never branches on the encoding.
    """

    name: str = "base"

    def generate(self, count: int, rng: random.Random) -> List[Candidate]:
        if count <= 0:
            raise ConfigurationError(f"count must be positive, got {count}")
        return [self.random_candidate(rng) for _ in range(count)]

    @abstractmethod
    def random_candidate(self, rng: random.Random) -> Candidate:
        raise NotImplementedError

    @abstractmethod
    def crossover(
        self, parent1: Candidate, parent2: Candidate, rng: random.Random
    ) -> Tuple[Candidate, Candidate]:
        raise NotImplementedError

    @abstractmethod
    def mutate(self, candidate: Candidate, rng: random.Random) -> Candidate:
        raise NotImplementedError

    @abstractmethod
    def validate(self, candidate: Candidate) -> Candidate:
        """Return ``candidate`` as a tuple or raise RepresentationMismatchError."""
        raise NotImplementedError

    def to_state(self, candidate: Candidate) -> list:
        return list(candidate)

    def from_state(self, data: list) -> Candidate:
        return self.validate(tuple(data))

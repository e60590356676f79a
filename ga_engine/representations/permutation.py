import random
from typing import Hashable, Iterable, Sequence, Tuple

from ..errors import ConfigurationError, RepresentationMismatchError
from .base import Representation, Route, check_probability


def ordered_crossover(parent_a: Sequence, parent_b: Sequence, start: int, end: int) -> Route:
    """
    Copy ``parent_a[start:end]`` into the child at the same positions and fill
    the remaining slots with the other elements in the order they appear in
    ``parent_b``. The child is always a permutation of the same elements.
    """
    segment = list(parent_a[start:end])
    taken = set(segment)
    rest = [x for x in parent_b if x not in taken]
    return tuple(rest[:start] + segment + rest[start:])


def reverse_segment(route: Sequence, start: int, end: int) -> Route:
    tour = list(route)
    tour[start:end] = reversed(tour[start:end])
    return tuple(tour)


class PermutationRepresentation(Representation):
    """Orderings of a fixed element set, e.g. the cities of a route."""

    name = "permutation"

    def __init__(self, elements: Iterable[Hashable], reversal_probability: float = 0.2):
        self.elements = tuple(elements)
        if not self.elements:
            raise ConfigurationError("element set must not be empty")
        self.element_set = frozenset(self.elements)
        if len(self.element_set) != len(self.elements):
            raise ConfigurationError("element set contains duplicates")
        self.reversal_probability = check_probability("reversal_probability", reversal_probability)

    @property
    def size(self) -> int:
        return len(self.elements)

    def random_candidate(self, rng: random.Random) -> Route:
        route = list(self.elements)
        rng.shuffle(route)
        return tuple(route)

    def crossover(self, parent1: Route, parent2: Route, rng: random.Random) -> Tuple[Route, Route]:
        self.validate(parent1)
        self.validate(parent2)
        n = self.size
        a, b = rng.randrange(n + 1), rng.randrange(n + 1)
        start, end = min(a, b), max(a, b)
        return (
            ordered_crossover(parent1, parent2, start, end),
            ordered_crossover(parent2, parent1, start, end),
        )

    def mutate(self, candidate: Route, rng: random.Random) -> Route:
        self.validate(candidate)
        if rng.random() >= self.reversal_probability:
            return tuple(candidate)
        # Two distinct cut positions, so the segment is never empty.
        start, end = sorted(rng.sample(range(self.size + 1), 2))
        return reverse_segment(candidate, start, end)

    def validate(self, candidate) -> Route:
        if len(candidate) != self.size or set(candidate) != self.element_set:
            raise RepresentationMismatchError(
                f"candidate is not a permutation of the {self.size} configured elements"
            )
        return tuple(candidate)

import random
from typing import Sequence, Tuple

from ..errors import ConfigurationError, RepresentationMismatchError
from .base import Representation, Vector, check_probability


def swap_crossover(
    parent1: Sequence[float], parent2: Sequence[float], swap_probability: float, rng: random.Random
) -> Tuple[Vector, Vector]:
    # Uniform crossover: every gene position is an independent Bernoulli trial.
    c1 = []
    c2 = []
    for g1, g2 in zip(parent1, parent2):
        if rng.random() < swap_probability:
            c1.append(g2)
            c2.append(g1)
        else:
            c1.append(g1)
            c2.append(g2)
    return tuple(c1), tuple(c2)


def gaussian_mutation(
    vector: Sequence[float],
    individual_probability: float,
    gene_probability: float,
    rng: random.Random,
    bounds: Tuple[float, float] = None,
) -> Vector:
    if rng.random() >= individual_probability:
        return tuple(vector)
    genes = list(vector)
    for i in range(len(genes)):
        if rng.random() < gene_probability:
            genes[i] += rng.gauss(0.0, 1.0)
            if bounds is not None:
                genes[i] = min(max(genes[i], bounds[0]), bounds[1])
    return tuple(genes)


class RealVectorRepresentation(Representation):
    """
    Fixed-length vectors of floats sampled uniformly from [minimum, maximum].

    Mutation does not clamp perturbed genes back into range unless ``clamp``
    is set, so genes may drift outside the initial bounds.
    """

    name = "real_vector"

    def __init__(
        self,
        dimension: int,
        minimum: float,
        maximum: float,
        swap_probability: float = 0.2,
        individual_probability: float = 0.01,
        gene_probability: float = 0.5,
        clamp: bool = False,
    ):
        if dimension < 1:
            raise ConfigurationError(f"dimension must be at least 1, got {dimension}")
        if minimum > maximum:
            raise ConfigurationError(f"minimum {minimum} is greater than maximum {maximum}")
        self.dimension = int(dimension)
        self.minimum = float(minimum)
        self.maximum = float(maximum)
        self.swap_probability = check_probability("swap_probability", swap_probability)
        self.individual_probability = check_probability("individual_probability", individual_probability)
        self.gene_probability = check_probability("gene_probability", gene_probability)
        self.clamp = clamp

    def random_candidate(self, rng: random.Random) -> Vector:
        return tuple(rng.uniform(self.minimum, self.maximum) for _ in range(self.dimension))

    def crossover(self, parent1: Vector, parent2: Vector, rng: random.Random) -> Tuple[Vector, Vector]:
        self.validate(parent1)
        self.validate(parent2)
        return swap_crossover(parent1, parent2, self.swap_probability, rng)

    def mutate(self, candidate: Vector, rng: random.Random) -> Vector:
        self.validate(candidate)
        bounds = (self.minimum, self.maximum) if self.clamp else None
        return gaussian_mutation(
            candidate, self.individual_probability, self.gene_probability, rng, bounds=bounds
        )

    def validate(self, candidate) -> Vector:
        if len(candidate) != self.dimension:
            raise RepresentationMismatchError(
                f"expected a vector of length {self.dimension}, got {len(candidate)}"
            )
        return tuple(float(g) for g in candidate)

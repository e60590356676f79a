"""
Shared fixtures for ga_engine tests.
"""

import random

import pytest

from ga_engine.data import coordinate_graph
from ga_engine.evolutionary import GenerationObservation
from ga_engine.representations import PermutationRepresentation, RealVectorRepresentation


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def real_rep():
    return RealVectorRepresentation(8, -5.0, 5.0)


@pytest.fixture
def perm_rep():
    return PermutationRepresentation(range(10))


@pytest.fixture
def square_graph():
    # Unit square: the optimal closed route has length 4.
    return coordinate_graph([(0, 0), (0, 1), (1, 1), (1, 0)])


@pytest.fixture
def make_observation():
    def make(generation=0, best_fitness=0.0, elapsed=0.0):
        return GenerationObservation(
            generation=generation,
            best_fitness=best_fitness,
            best_candidate=(0.0,),
            population_size=1,
            mean_fitness=best_fitness,
            fitness_std=0.0,
            elite_count=0,
            elapsed=elapsed,
        )

    return make

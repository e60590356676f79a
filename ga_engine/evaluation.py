import concurrent.futures
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence

import numpy as np

from .errors import ConfigurationError, EvaluatorError
from .representations.base import Candidate


class FitnessEvaluator(ABC):
    """
    Maps a candidate to a score. ``natural`` declares the ordering sense:
    True when higher scores are better, False when lower scores are better.

    Implementations must be pure functions of the candidate's genes; any
    auxiliary parameters are fixed when the evaluator is built.
    """

    natural: bool = True

    @abstractmethod
    def evaluate(self, candidate: Candidate) -> float:
        raise NotImplementedError


class FunctionEvaluator(FitnessEvaluator):
    def __init__(self, fn: Callable[[Candidate], float], natural: bool = True):
        self.fn = fn
        self.natural = natural

    def evaluate(self, candidate: Candidate) -> float:
        return self.fn(candidate)


@dataclass(frozen=True)
class FitnessRecord:
    candidate: Candidate
    score: float
    rank: int
    index: int


def _checked_score(evaluator: FitnessEvaluator, candidate: Candidate) -> float:
    score = float(evaluator.evaluate(candidate))
    if math.isnan(score):
        raise EvaluatorError(f"{type(evaluator).__name__} returned NaN")
    return score


def evaluate_population(
    evaluator: FitnessEvaluator, population: Sequence[Candidate], workers: int = 1
) -> List[float]:
    if workers > 1 and len(population) > 1:
        with concurrent.futures.ThreadPoolExecutor(max_workers=min(workers, len(population))) as ex:
            return list(ex.map(lambda c: _checked_score(evaluator, c), population))
    return [_checked_score(evaluator, c) for c in population]


def rank_population(
    population: Sequence[Candidate], scores: Sequence[float], natural: bool
) -> List[FitnessRecord]:
    """Best first. The sort is stable, so ties keep population order."""
    if len(population) != len(scores):
        raise ValueError(f"{len(population)} candidates but {len(scores)} scores")
    order = sorted(range(len(scores)), key=lambda i: scores[i], reverse=natural)
    return [
        FitnessRecord(candidate=population[i], score=scores[i], rank=rank, index=i)
        for rank, i in enumerate(order)
    ]


def fitness_weights(records: Sequence[FitnessRecord], natural: bool) -> List[float]:
    """
    Non-negative, higher-is-better weights for fitness-proportional sampling.

    Lower-is-better scores are inverted. A score of exactly zero is a perfect
    score under that ordering, so zero-scored records take all of the weight;
    likewise ``+inf`` under higher-is-better ordering.
    """
    scores = [r.score for r in records]
    if natural and any(s == math.inf for s in scores):
        weights = [1.0 if s == math.inf else 0.0 for s in scores]
    elif natural:
        weights = scores
    elif any(s == 0 for s in scores):
        weights = [1.0 if s == 0 else 0.0 for s in scores]
    else:
        weights = [1.0 / s for s in scores]
    if any(w < 0 for w in weights):
        raise ConfigurationError("fitness-proportional selection requires non-negative scores")
    return weights


def aggregate_fitness(records: Sequence[FitnessRecord]) -> Dict[str, float]:
    if not records:
        return {"mean": float("nan"), "std": float("nan")}
    scores = np.array([r.score for r in records], dtype=float)
    return {
        "mean": float(scores.mean()),
        "std": float(scores.std()),
    }

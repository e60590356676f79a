from abc import ABC, abstractmethod
from typing import Optional

from .errors import ConfigurationError


class TerminationCondition(ABC):
    """Checked by the engine after every generation has been evaluated."""

    @abstractmethod
    def should_terminate(self, observation) -> bool:
        raise NotImplementedError


class GenerationCount(TerminationCondition):
    """Stop once generation ``generations`` has been evaluated."""

    def __init__(self, generations: int):
        if generations < 0:
            raise ConfigurationError(f"generations must be non-negative, got {generations}")
        self.generations = generations

    def should_terminate(self, observation) -> bool:
        return observation.generation >= self.generations

    def __repr__(self) -> str:
        return f"GenerationCount({self.generations})"


class TargetFitness(TerminationCondition):
    def __init__(self, target: float, natural: bool = True):
        self.target = target
        self.natural = natural

    def should_terminate(self, observation) -> bool:
        if self.natural:
            return observation.best_fitness >= self.target
        return observation.best_fitness <= self.target

    def __repr__(self) -> str:
        return f"TargetFitness({self.target}, natural={self.natural})"


class Stagnation(TerminationCondition):
    """
    Stop when the best fitness has not improved for ``generations``
    consecutive generations.
    """

    def __init__(self, generations: int, natural: bool = True):
        if generations < 1:
            raise ConfigurationError(f"generations must be at least 1, got {generations}")
        self.generations = generations
        self.natural = natural
        self._best: Optional[float] = None
        self._best_generation = 0

    def should_terminate(self, observation) -> bool:
        score = observation.best_fitness
        if self._best is None or observation.generation == 0:
            # First observation, or the condition is being reused for a new run.
            self._best = score
            self._best_generation = observation.generation
            return False
        improved = score > self._best if self.natural else score < self._best
        if improved:
            self._best = score
            self._best_generation = observation.generation
        return observation.generation - self._best_generation >= self.generations

    def __repr__(self) -> str:
        return f"Stagnation({self.generations}, natural={self.natural})"


class ElapsedTime(TerminationCondition):
    def __init__(self, seconds: float):
        if seconds <= 0:
            raise ConfigurationError(f"seconds must be positive, got {seconds}")
        self.seconds = seconds

    def should_terminate(self, observation) -> bool:
        return observation.elapsed >= self.seconds

    def __repr__(self) -> str:
        return f"ElapsedTime({self.seconds})"


class UserAbort(TerminationCondition):
    """Lets another thread or a signal handler stop a run between generations."""

    def __init__(self):
        self.aborted = False

    def abort(self) -> None:
        self.aborted = True

    def reset(self) -> None:
        self.aborted = False

    def should_terminate(self, observation) -> bool:
        return self.aborted

    def __repr__(self) -> str:
        return "UserAbort()"

import random
import time
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

from loguru import logger

from .errors import ConfigurationError
from .evaluation import FitnessEvaluator, FitnessRecord, aggregate_fitness, evaluate_population, rank_population
from .representations.base import Candidate, Representation, check_probability
from .selection import RouletteWheelSelection, SelectionStrategy
from .termination import TerminationCondition


@dataclass
class EvolutionConfig:
    population_size: int = 40
    elite_count: int = 1
    crossover_rate: float = 1.0
    random_seed: Optional[int] = None
    evaluation_workers: int = 1

    def __post_init__(self):
        if self.population_size < 1:
            raise ConfigurationError(f"population_size must be at least 1, got {self.population_size}")
        if not 0 <= self.elite_count <= self.population_size:
            raise ConfigurationError(
                f"elite_count must be within [0, {self.population_size}], got {self.elite_count}"
            )
        check_probability("crossover_rate", self.crossover_rate)
        if self.evaluation_workers < 1:
            raise ConfigurationError(f"evaluation_workers must be at least 1, got {self.evaluation_workers}")


@dataclass(frozen=True)
class GenerationObservation:
    generation: int
    best_fitness: float
    best_candidate: Candidate
    population_size: int
    mean_fitness: float
    fitness_std: float
    elite_count: int
    # Wall-clock time differs between otherwise identical runs.
    elapsed: float = field(default=0.0, compare=False)


class EngineState(Enum):
    INITIALIZING = "initializing"
    EVALUATING = "evaluating"
    SELECTING = "selecting"
    RECOMBINING = "recombining"
    MUTATING = "mutating"
    APPLYING_ELITISM = "applying_elitism"
    TERMINATED = "terminated"


Observer = Callable[[GenerationObservation], None]


class EvolutionEngine:
    """
    Generational evolution: rank -> keep elites -> select -> crossover ->
    mutate -> evaluate, repeated until a termination condition holds.

    All randomness comes from ``rng``; two engines built with the same
    config, seed and collaborators produce identical observations.
    """

    def __init__(
        self,
        config: EvolutionConfig,
        representation: Representation,
        evaluator: FitnessEvaluator,
        selection: SelectionStrategy = None,
        rng: random.Random = None,
    ):
        self.cfg = config
        self.representation = representation
        self.evaluator = evaluator
        self.selection = selection or RouletteWheelSelection()
        self.rng = rng if rng is not None else random.Random(config.random_seed)
        self.state = EngineState.INITIALIZING
        self.generation = -1
        self.satisfied_conditions: List[TerminationCondition] = []
        self._population: List[Candidate] = []
        self._records: List[FitnessRecord] = []
        self._observers: List[Observer] = []
        self._started = time.perf_counter()
        # Random state and engine state as of the last completed generation.
        self._rng_state = self.rng.getstate()
        self._settled_state = self.state

    @property
    def population(self) -> tuple:
        return tuple(self._population)

    @property
    def records(self) -> tuple:
        return tuple(self._records)

    def add_observer(self, observer: Observer) -> None:
        self._observers.append(observer)

    def remove_observer(self, observer: Observer) -> None:
        self._observers.remove(observer)

    def initialize(self, seed_candidates: Sequence[Candidate] = None) -> GenerationObservation:
        """Build and evaluate generation 0, starting with any seed candidates."""
        size = self.cfg.population_size
        seeds = [self.representation.validate(c) for c in (seed_candidates or [])]
        if len(seeds) > size:
            raise ConfigurationError(f"{len(seeds)} seed candidates exceed population_size {size}")
        self.state = EngineState.INITIALIZING
        self._started = time.perf_counter()
        try:
            population = seeds
            if len(seeds) < size:
                population = seeds + self.representation.generate(size - len(seeds), self.rng)
            return self._replace(population, generation=0)
        except BaseException:
            self._rollback()
            raise

    def step(self) -> GenerationObservation:
        """
        Advance one generation. Initializes the population on first use.

        If the generation does not complete (evaluator error, Ctrl+C), the
        random state and engine state are rolled back to the last completed
        generation, so stepping again replays it exactly.
        """
        if not self._records:
            return self.initialize()
        try:
            return self._next_generation()
        except BaseException:
            self._rollback()
            raise

    def _next_generation(self) -> GenerationObservation:
        natural = self.evaluator.natural
        elite_count = self.cfg.elite_count
        elites = [r.candidate for r in self._records[:elite_count]]

        self.state = EngineState.SELECTING
        parents = self.selection.select(
            self._records, self.cfg.population_size - elite_count, natural, self.rng
        )
        self.state = EngineState.RECOMBINING
        offspring = self._recombine(parents)
        self.state = EngineState.MUTATING
        offspring = [self.representation.mutate(c, self.rng) for c in offspring]
        self.state = EngineState.APPLYING_ELITISM
        return self._replace(elites + offspring, generation=self.generation + 1)

    def _rollback(self) -> None:
        self.rng.setstate(self._rng_state)
        self.state = self._settled_state

    def evolve(self, *conditions: TerminationCondition, seed_candidates: Sequence[Candidate] = None) -> Candidate:
        if not conditions:
            raise ConfigurationError("at least one termination condition is required")
        logger.info(
            "[EvolutionEngine] starting: representation={} population={} elites={} selection={}",
            self.representation.name,
            self.cfg.population_size,
            self.cfg.elite_count,
            self.selection.name,
        )
        observation = self.initialize(seed_candidates)
        return self._run(conditions, observation)

    def resume(self, *conditions: TerminationCondition) -> Candidate:
        """Continue from the current population, e.g. after ``from_state``."""
        if not conditions:
            raise ConfigurationError("at least one termination condition is required")
        if not self._records:
            return self.evolve(*conditions)
        logger.info("[EvolutionEngine] resuming at generation {}", self.generation)
        self._started = time.perf_counter()
        return self._run(conditions, self._observe())

    def best(self) -> FitnessRecord:
        if not self._records:
            raise ConfigurationError("population has not been initialized")
        return self._records[0]

    def _run(self, conditions, observation: GenerationObservation) -> Candidate:
        while True:
            # Every condition sees every observation; some keep history.
            self.satisfied_conditions = [c for c in conditions if c.should_terminate(observation)]
            if self.satisfied_conditions:
                break
            observation = self.step()
        self.state = EngineState.TERMINATED
        logger.info(
            "[EvolutionEngine] finished at generation {} best={} ({})",
            observation.generation,
            observation.best_fitness,
            ", ".join(repr(c) for c in self.satisfied_conditions),
        )
        return self.best().candidate

    def _recombine(self, parents: List[Candidate]) -> List[Candidate]:
        needed = len(parents)
        children: List[Candidate] = []
        for i in range(0, needed, 2):
            p1 = parents[i]
            # An odd pool pairs its last member with the first.
            p2 = parents[i + 1] if i + 1 < needed else parents[0]
            if self.rng.random() < self.cfg.crossover_rate:
                children.extend(self.representation.crossover(p1, p2, self.rng))
            else:
                children.extend((p1, p2))
        return children[:needed]

    def _evaluate(self, population: List[Candidate]) -> List[FitnessRecord]:
        self.state = EngineState.EVALUATING
        scores = evaluate_population(self.evaluator, population, workers=self.cfg.evaluation_workers)
        return rank_population(population, scores, self.evaluator.natural)

    def _replace(self, population: List[Candidate], generation: int) -> GenerationObservation:
        if len(population) != self.cfg.population_size:
            raise ConfigurationError(
                f"population has {len(population)} candidates, expected {self.cfg.population_size}"
            )
        records = self._evaluate(population)
        # Swap only once evaluation succeeded, so a failed generation leaves the last one intact.
        self._population = population
        self._records = records
        self.generation = generation
        self._rng_state = self.rng.getstate()
        self._settled_state = self.state
        observation = self._observe()
        self._emit(observation)
        return observation

    def _observe(self) -> GenerationObservation:
        stats = aggregate_fitness(self._records)
        best = self._records[0]
        return GenerationObservation(
            generation=self.generation,
            best_fitness=best.score,
            best_candidate=best.candidate,
            population_size=len(self._population),
            mean_fitness=stats["mean"],
            fitness_std=stats["std"],
            elite_count=self.cfg.elite_count,
            elapsed=time.perf_counter() - self._started,
        )

    def _emit(self, observation: GenerationObservation) -> None:
        logger.debug(
            "[EvolutionEngine] generation {} best={:.6g} mean={:.6g} std={:.6g}",
            observation.generation,
            observation.best_fitness,
            observation.mean_fitness,
            observation.fitness_std,
        )
        for observer in list(self._observers):
            try:
                observer(observation)
            except Exception:
                logger.exception("[EvolutionEngine] observer {!r} failed", observer)

    def to_state(self) -> Dict:
        # The random state of the last completed generation pairs with the saved population.
        version, internal, gauss_next = self._rng_state
        return {
            "cfg": asdict(self.cfg),
            "generation": self.generation,
            "population": [self.representation.to_state(c) for c in self._population],
            "rng": [version, list(internal), gauss_next],
        }

    @classmethod
    def from_state(
        cls,
        state: Dict,
        representation: Representation,
        evaluator: FitnessEvaluator,
        selection: SelectionStrategy = None,
    ) -> "EvolutionEngine":
        cfg = EvolutionConfig(**state["cfg"])
        engine = cls(cfg, representation, evaluator, selection=selection)
        if state.get("rng"):
            version, internal, gauss_next = state["rng"]
            engine.rng.setstate((version, tuple(internal), gauss_next))
        population = [representation.from_state(c) for c in state.get("population", [])]
        if population:
            if len(population) != cfg.population_size:
                raise ConfigurationError(
                    f"checkpoint holds {len(population)} candidates, expected {cfg.population_size}"
                )
            engine._records = engine._evaluate(population)
            engine._population = population
            engine.generation = state.get("generation", 0)
            engine._settled_state = engine.state
        engine._rng_state = engine.rng.getstate()
        return engine

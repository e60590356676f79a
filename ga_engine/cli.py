import argparse
import json
import random
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

from ga_engine.data import Instance, coordinate_graph, load_coordinates, load_instance, random_cities
from ga_engine.errors import GAEngineError
from ga_engine.evolutionary import EvolutionConfig, EvolutionEngine, GenerationObservation
from ga_engine.problems import AckleyEvaluator, RouteLengthEvaluator, tour_length
from ga_engine.representations import PermutationRepresentation, RealVectorRepresentation
from ga_engine.selection import RouletteWheelSelection, SelectionStrategy, TournamentSelection
from ga_engine.termination import GenerationCount, Stagnation, TargetFitness, TerminationCondition


def log(msg: str) -> None:
    logger.opt(depth=1).info(msg)


def configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "INFO",
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | {message}",
    )


def save_checkpoint(engine: EvolutionEngine, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(engine.to_state(), indent=2))
    log(f"checkpoint saved to {path}")


def build_selection(args) -> SelectionStrategy:
    if args.tournament:
        return TournamentSelection(args.tournament)
    return RouletteWheelSelection()


def build_conditions(args, natural: bool) -> List[TerminationCondition]:
    conditions: List[TerminationCondition] = [GenerationCount(args.generations)]
    if args.target is not None:
        conditions.append(TargetFitness(args.target, natural=natural))
    if args.stagnation:
        conditions.append(Stagnation(args.stagnation, natural=natural))
    return conditions


def progress_observer(every: int):
    def observe(obs: GenerationObservation) -> None:
        if obs.generation % every == 0:
            log(
                f"gen {obs.generation}: best={obs.best_fitness:.6f} "
                f"mean={obs.mean_fitness:.6f} pop={obs.population_size}"
            )

    return observe


def _run_engine(args, representation, evaluator) -> EvolutionEngine:
    cfg = EvolutionConfig(
        population_size=args.population,
        elite_count=args.elites,
        crossover_rate=args.crossover_rate,
        random_seed=args.seed,
        evaluation_workers=args.workers,
    )
    selection = build_selection(args)
    checkpoint = Path(args.checkpoint) if args.checkpoint else None
    if args.resume and checkpoint and checkpoint.exists():
        log(f"resuming from {checkpoint}")
        state = json.loads(checkpoint.read_text())
        engine = EvolutionEngine.from_state(state, representation, evaluator, selection=selection)
    else:
        engine = EvolutionEngine(cfg, representation, evaluator, selection=selection)
    engine.add_observer(progress_observer(args.log_every))
    conditions = build_conditions(args, evaluator.natural)
    try:
        if engine.records:
            engine.resume(*conditions)
        else:
            engine.evolve(*conditions)
    except KeyboardInterrupt:
        log(f"interrupted at generation {engine.generation}")
    if checkpoint:
        save_checkpoint(engine, checkpoint)
    return engine


def run_real(args) -> None:
    representation = RealVectorRepresentation(
        args.dimension,
        args.minimum,
        args.maximum,
        swap_probability=args.swap_probability,
        individual_probability=args.individual_probability,
        gene_probability=args.gene_probability,
        clamp=args.clamp,
    )
    evaluator = AckleyEvaluator(args.dimension)
    engine = _run_engine(args, representation, evaluator)
    best = engine.best()
    log(f"best fitness={best.score:.6f} at generation {engine.generation}")
    print(json.dumps({"fitness": best.score, "candidate": list(best.candidate)}))


def _load_route_instance(args) -> Instance:
    if args.tsplib:
        return load_instance(Path(args.tsplib))
    if args.coordinates:
        return load_coordinates(Path(args.coordinates))
    rng = random.Random(args.seed)
    graph = coordinate_graph(random_cities(args.random_cities, rng))
    return Instance(name=f"random{args.random_cities}", path=None, graph=graph, optimum=None)


def run_route(args) -> None:
    instance = _load_route_instance(args)
    log(f"loaded {instance.name} with {instance.graph.number_of_nodes()} nodes")
    representation = PermutationRepresentation(
        sorted(instance.graph.nodes()), reversal_probability=args.reversal_probability
    )
    evaluator = RouteLengthEvaluator(instance.graph, device=args.device)
    engine = _run_engine(args, representation, evaluator)
    best = engine.best()
    length = tour_length(instance.graph, best.candidate)
    if instance.optimum:
        gap = (length - instance.optimum) / instance.optimum
        log(f"best length={length:.2f} optimum={instance.optimum:.2f} gap={gap:.2%}")
    else:
        log(f"best length={length:.2f}")
    print(json.dumps({"length": length, "route": list(best.candidate)}))


def _add_common(parser: argparse.ArgumentParser, population: int, generations: int) -> None:
    parser.add_argument("--population", type=int, default=population)
    parser.add_argument("--generations", type=int, default=generations)
    parser.add_argument("--elites", type=int, default=1)
    parser.add_argument("--crossover-rate", type=float, default=1.0)
    parser.add_argument("--tournament", type=int, default=0, help="Tournament size (default: roulette wheel)")
    parser.add_argument("--target", type=float, default=None, help="Stop once this fitness is reached")
    parser.add_argument("--stagnation", type=int, default=0, help="Stop after N generations without improvement")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--workers", type=int, default=1, help="Threads for fitness evaluation")
    parser.add_argument("--log-every", type=int, default=10)
    parser.add_argument("--checkpoint", default=None, help="JSON file written when the run ends")
    parser.add_argument("--resume", action="store_true", help="Continue from --checkpoint if it exists")
    parser.add_argument("--verbose", action="store_true")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generational genetic algorithm engine")
    subparsers = parser.add_subparsers(dest="command", required=True)

    real_parser = subparsers.add_parser("real", help="Evolve a real vector against the shifted Ackley benchmark")
    _add_common(real_parser, population=20, generations=200)
    real_parser.add_argument("--dimension", type=int, default=100)
    real_parser.add_argument("--minimum", type=float, default=-5.0)
    real_parser.add_argument("--maximum", type=float, default=5.0)
    real_parser.add_argument("--swap-probability", type=float, default=0.2)
    real_parser.add_argument("--individual-probability", type=float, default=0.01)
    real_parser.add_argument("--gene-probability", type=float, default=0.5)
    real_parser.add_argument("--clamp", action="store_true", help="Clamp mutated genes to [minimum, maximum]")
    real_parser.set_defaults(func=run_real)

    route_parser = subparsers.add_parser("route", help="Evolve a shortest closed route")
    _add_common(route_parser, population=50, generations=500)
    source = route_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--tsplib", help="TSPLIB .tsp file")
    source.add_argument("--coordinates", help="Text file with one 'x y' pair per line")
    source.add_argument("--random-cities", type=int, help="Generate N random cities")
    route_parser.add_argument("--reversal-probability", type=float, default=0.2)
    route_parser.add_argument("--device", default=None, help="torch device for route lengths, e.g. cpu or cuda:0")
    route_parser.set_defaults(func=run_route)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    try:
        args.func(args)
    except GAEngineError as e:
        logger.error(str(e))
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())

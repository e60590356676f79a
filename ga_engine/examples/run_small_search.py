import random

from ga_engine.data import coordinate_graph, random_cities
from ga_engine.evolutionary import EvolutionConfig, EvolutionEngine
from ga_engine.problems import AckleyEvaluator, RouteLengthEvaluator
from ga_engine.representations import PermutationRepresentation, RealVectorRepresentation
from ga_engine.selection import TournamentSelection
from ga_engine.termination import GenerationCount, Stagnation


def main():
    cfg = EvolutionConfig(population_size=20, elite_count=2, random_seed=123)

    dimension = 10
    engine = EvolutionEngine(
        cfg,
        RealVectorRepresentation(dimension, -5, 5, individual_probability=0.2),
        AckleyEvaluator(dimension),
    )
    engine.add_observer(
        lambda obs: print(f"gen {obs.generation}: best={obs.best_fitness:.4f}")
        if obs.generation % 10 == 0
        else None
    )
    engine.evolve(GenerationCount(50))

    graph = coordinate_graph(random_cities(15, random.Random(7)))
    evaluator = RouteLengthEvaluator(graph)
    engine = EvolutionEngine(
        cfg,
        PermutationRepresentation(graph.nodes()),
        evaluator,
        selection=TournamentSelection(3),
    )
    best = engine.evolve(GenerationCount(200), Stagnation(50, natural=evaluator.natural))
    print(f"route after gen {engine.generation}: length={evaluator.evaluate(best):.2f} order={best}")


if __name__ == "__main__":
    main()

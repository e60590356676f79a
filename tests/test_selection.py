"""
Tests for fitness bookkeeping and selection strategies.
"""
import math
import random
from collections import Counter

import pytest

from ga_engine.errors import ConfigurationError, EvaluatorError
from ga_engine.evaluation import (
    FunctionEvaluator,
    aggregate_fitness,
    evaluate_population,
    fitness_weights,
    rank_population,
)
from ga_engine.selection import RouletteWheelSelection, TournamentSelection


def ranked(scores, natural=True):
    population = [(i,) for i in range(len(scores))]
    return rank_population(population, scores, natural)


class TestRanking:

    def test_higher_is_better_is_stable(self):
        records = ranked([1.0, 3.0, 3.0, 2.0], natural=True)
        assert [r.index for r in records] == [1, 2, 3, 0]
        assert [r.rank for r in records] == [0, 1, 2, 3]

    def test_lower_is_better_is_stable(self):
        records = ranked([1.0, 3.0, 3.0, 2.0], natural=False)
        assert [r.index for r in records] == [0, 3, 1, 2]

    def test_records_pair_candidates_with_scores(self):
        records = ranked([5.0, 7.0])
        assert records[0].candidate == (1,)
        assert records[0].score == 7.0

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            rank_population([(0,)], [1.0, 2.0], True)

    def test_aggregate(self):
        stats = aggregate_fitness(ranked([1.0, 2.0, 3.0]))
        assert stats["mean"] == pytest.approx(2.0)
        assert stats["std"] == pytest.approx(math.sqrt(2.0 / 3.0))


class TestEvaluatePopulation:

    def test_parallel_matches_serial(self):
        evaluator = FunctionEvaluator(lambda c: sum(c))
        population = [(i, i * 2) for i in range(25)]
        assert evaluate_population(evaluator, population, workers=4) == evaluate_population(
            evaluator, population
        )

    def test_evaluator_errors_propagate(self):
        def broken(candidate):
            raise ZeroDivisionError("boom")

        with pytest.raises(ZeroDivisionError):
            evaluate_population(FunctionEvaluator(broken), [(1,)])

    def test_nan_is_rejected(self):
        with pytest.raises(EvaluatorError):
            evaluate_population(FunctionEvaluator(lambda c: float("nan")), [(1,)])


class TestFitnessWeights:

    def test_natural_uses_scores(self):
        assert fitness_weights(ranked([1.0, 4.0]), True) == [4.0, 1.0]

    def test_lower_is_better_inverts(self):
        assert fitness_weights(ranked([2.0, 4.0], natural=False), False) == [0.5, 0.25]

    def test_zero_scores_take_all_weight(self):
        assert fitness_weights(ranked([0.0, 4.0, 0.0], natural=False), False) == [1.0, 1.0, 0.0]

    def test_negative_scores_rejected(self):
        with pytest.raises(ConfigurationError):
            fitness_weights(ranked([-1.0, 4.0]), True)

    def test_infinite_scores_take_all_weight(self):
        assert fitness_weights(ranked([1.0, math.inf, 2.0]), True) == [1.0, 0.0, 0.0]


class TestRouletteWheelSelection:

    def test_count_may_exceed_population(self, rng):
        selected = RouletteWheelSelection().select(ranked([1.0, 2.0]), 10, True, rng)
        assert len(selected) == 10

    def test_zero_weight_never_selected(self, rng):
        records = ranked([0.0, 5.0, 5.0])
        selected = RouletteWheelSelection().select(records, 500, True, rng)
        assert (0,) not in selected
        assert set(selected) == {(1,), (2,)}

    def test_all_zero_falls_back_to_uniform(self, rng):
        selected = RouletteWheelSelection().select(ranked([0.0, 0.0, 0.0]), 300, True, rng)
        assert set(selected) == {(0,), (1,), (2,)}

    def test_proportional_to_fitness(self, rng):
        selected = RouletteWheelSelection().select(ranked([1.0, 3.0]), 4000, True, rng)
        counts = Counter(selected)
        assert counts[(1,)] / 4000 == pytest.approx(0.75, abs=0.05)

    def test_lower_is_better_prefers_small_scores(self, rng):
        selected = RouletteWheelSelection().select(ranked([1.0, 100.0], natural=False), 1000, False, rng)
        assert Counter(selected)[(0,)] > 900

    def test_infinite_score_wins_every_draw(self, rng):
        selected = RouletteWheelSelection().select(ranked([1.0, math.inf, 2.0]), 200, True, rng)
        assert selected == [(1,)] * 200

    def test_empty_population(self, rng):
        with pytest.raises(ConfigurationError):
            RouletteWheelSelection().select([], 3, True, rng)

    def test_deterministic_for_a_seed(self):
        records = ranked([1.0, 2.0, 3.0, 4.0])
        first = RouletteWheelSelection().select(records, 20, True, random.Random(9))
        second = RouletteWheelSelection().select(records, 20, True, random.Random(9))
        assert first == second


class TestTournamentSelection:

    def test_large_tournament_picks_best(self, rng):
        records = ranked([1.0, 2.0, 9.0, 4.0, 3.0])
        selected = TournamentSelection(100).select(records, 20, True, rng)
        assert selected == [(2,)] * 20

    def test_lower_is_better(self, rng):
        records = ranked([5.0, 0.5, 9.0], natural=False)
        selected = TournamentSelection(100).select(records, 10, False, rng)
        assert selected == [(1,)] * 10

    def test_size_one_is_uniform(self, rng):
        selected = TournamentSelection(1).select(ranked([1.0, 2.0, 3.0]), 300, True, rng)
        assert set(selected) == {(0,), (1,), (2,)}

    def test_count_may_exceed_population(self, rng):
        assert len(TournamentSelection(2).select(ranked([1.0]), 7, True, rng)) == 7

    def test_invalid_size(self):
        with pytest.raises(ConfigurationError):
            TournamentSelection(0)

    def test_works_with_negative_scores(self, rng):
        records = ranked([-3.0, -1.0, -2.0])
        assert TournamentSelection(100).select(records, 5, True, rng) == [(1,)] * 5

"""
Tests for diversity and progress measurement and parameter adaptation.
"""

import random

import pytest

from archipelago_pkg.symbolic_regression import AdaptiveParameterController
from archipelago_pkg.symbolic_regression import ExpressionNode
from archipelago_pkg.symbolic_regression import GeneticOperators
from archipelago_pkg.symbolic_regression import Individual
from archipelago_pkg.symbolic_regression import NodeType
from archipelago_pkg.symbolic_regression.adaptive import tree_distance


def test_tree_distance():
    x = ExpressionNode.variable
    assert tree_distance(x(), x()) == 0.0
    assert tree_distance(x(), ExpressionNode.constant(1.0)) == 1.0
    assert tree_distance(
        ExpressionNode.constant(1.0), ExpressionNode.constant(3.0)
    ) == pytest.approx(0.2)
    # tag mismatch plus two missing children
    assert tree_distance(ExpressionNode.binary(NodeType.ADD, x(), x()), x()) == 3.0
    assert tree_distance(None, None) == 0.0


def test_diversity_of_identical_population_is_zero():
    controller = AdaptiveParameterController(rng=random.Random(0))
    population = [Individual(ExpressionNode.variable()) for _ in range(10)]
    assert controller.measure_diversity(population) == 0.0


def test_diversity_needs_two_individuals():
    controller = AdaptiveParameterController(rng=random.Random(0))
    assert controller.measure_diversity([]) == 0.0
    assert controller.measure_diversity([Individual(ExpressionNode.variable())]) == 0.0


def test_diversity_of_varied_population_is_positive():
    ops = GeneticOperators(seed=3)
    controller = AdaptiveParameterController(rng=random.Random(0))
    population = [Individual(ops.generate_random_tree(4)) for _ in range(40)]
    assert controller.measure_diversity(population) > 0.0


@pytest.mark.parametrize(
    "history, expected",
    [
        ([], 1.0),
        ([-5.0], 1.0),
        ([-3.0, -2.0, -1.0], 1.0),
        ([-1.0, -1.0, -1.0], 0.0),
        ([-1.0, -2.0], -1.0),
    ],
)
def test_measure_progress(history, expected):
    assert AdaptiveParameterController.measure_progress(history) == pytest.approx(expected)


@pytest.mark.parametrize(
    "rate, diversity, progress, expected",
    [
        (0.5, 0.05, 0.0, 0.55),
        (0.9, 0.0, 0.0, 0.95),
        (0.5, 0.6, 0.1, 0.475),
        (0.31, 1.0, 1.0, 0.3),
        (0.5, 0.3, 0.03, 0.5),
    ],
)
def test_adapt_mutation_rate(rate, diversity, progress, expected):
    controller = AdaptiveParameterController()
    assert controller.adapt_mutation_rate(rate, diversity, progress) == pytest.approx(expected)


@pytest.mark.parametrize(
    "weight, avg, target, expected",
    [
        (1.0, 20.0, 8.0, 1.05),
        (4.9, 20.0, 8.0, 5.0),
        (1.0, 3.0, 8.0, 0.95),
        (0.51, 3.0, 8.0, 0.5),
        (1.0, 8.0, 8.0, 1.0),
    ],
)
def test_adapt_complexity_weight(weight, avg, target, expected):
    controller = AdaptiveParameterController()
    assert controller.adapt_complexity_weight(weight, avg, target) == pytest.approx(expected)

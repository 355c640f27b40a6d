"""
Tests for Individual scoring, subtree replacement and cloning.
"""

import math

import numpy as np
import pytest

from archipelago_pkg.config import MAX_MSE
from archipelago_pkg.symbolic_regression import ExpressionNode
from archipelago_pkg.symbolic_regression import Individual
from archipelago_pkg.symbolic_regression import NodeType


def test_exact_fit_has_zero_mse():
    ind = Individual(ExpressionNode.variable())
    x = np.array([1.0, 2.0, 3.0])
    fitness = ind.calculate_fitness(x, x.copy(), complexity_weight=2.0)
    assert ind.mse == 0.0
    assert ind.complexity == 1
    assert fitness == pytest.approx(-2.0)
    assert ind.fitness == fitness


def test_fitness_combines_mse_and_complexity():
    tree = ExpressionNode.binary(
        NodeType.ADD, ExpressionNode.variable(), ExpressionNode.constant(1.0)
    )
    ind = Individual(tree)
    ind.calculate_fitness(np.array([0.0, 1.0]), np.array([0.0, 1.0]), complexity_weight=0.5)
    assert ind.mse == pytest.approx(1.0)
    assert ind.fitness == pytest.approx(-(1.0 + 0.5 * 3))


def test_non_finite_predictions_are_excluded():
    # x * 1e308 overflows only at the second sample
    tree = ExpressionNode.binary(
        NodeType.MULTIPLY, ExpressionNode.variable(), ExpressionNode.constant(1e308)
    )
    ind = Individual(tree)
    ind.calculate_fitness(np.array([1.0, 10.0]), np.array([1e308, 0.0]), 1.0)
    assert ind.mse == 0.0


def test_all_predictions_non_finite_gives_sentinel():
    tree = ExpressionNode.binary(
        NodeType.MULTIPLY, ExpressionNode.constant(1e308), ExpressionNode.constant(10.0)
    )
    ind = Individual(tree)
    ind.calculate_fitness(np.array([1.0, 2.0]), np.array([1.0, 2.0]), 1.0)
    assert ind.mse == MAX_MSE


def test_empty_dataset_gives_sentinel():
    ind = Individual(ExpressionNode.variable())
    ind.calculate_fitness(np.array([]), np.array([]), 1.0)
    assert ind.mse == MAX_MSE
    assert math.isfinite(ind.fitness)


def test_unevaluated_individual_defaults():
    ind = Individual(ExpressionNode.variable())
    assert ind.fitness == float("-inf")
    assert ind.mse == MAX_MSE
    assert ind.complexity == 1


def test_replace_subtree_in_child_slot():
    left = ExpressionNode.variable()
    right = ExpressionNode.constant(1.0)
    ind = Individual(ExpressionNode.binary(NodeType.ADD, left, right))

    replacement = ExpressionNode.constant(7.0)
    ind.replace_subtree(right, replacement)

    assert ind.root.children[1] is replacement
    assert replacement.parent is ind.root
    assert right.parent is None
    assert ind.expression == "(x + 7.00)"


def test_replace_subtree_at_root():
    ind = Individual(ExpressionNode.variable())
    replacement = ExpressionNode.unary(NodeType.SIN, ExpressionNode.variable())
    ind.replace_subtree(ind.root, replacement)
    assert ind.root is replacement
    assert ind.root.parent is None


def test_clone_drops_scores_but_copies_tree():
    ind = Individual(ExpressionNode.variable())
    ind.calculate_fitness(np.array([1.0]), np.array([2.0]), 1.0)

    clone = ind.clone()
    assert clone.root is not ind.root
    assert clone.root.structurally_equal(ind.root)
    assert clone.fitness == float("-inf")

    scored = ind.clone_with_scores()
    assert scored.root is not ind.root
    assert scored.fitness == ind.fitness
    assert scored.mse == ind.mse


def test_to_dict():
    ind = Individual(
        ExpressionNode.binary(NodeType.ADD, ExpressionNode.variable(), ExpressionNode.variable())
    )
    ind.calculate_fitness(np.array([1.0, 2.0]), np.array([2.0, 4.0]), 1.0)
    data = ind.to_dict()
    assert data["expression"] == "(x + x)"
    assert data["simplified"] == "2*x"
    assert data["mse"] == 0.0
    assert data["complexity"] == 3

"""
Tests for expression trees: protected evaluation, structure, and rendering.
"""

import math

import numpy as np
import pytest
import sympy as sp

from archipelago_pkg.symbolic_regression.expression_tree import BINARY_NODE_TYPES
from archipelago_pkg.symbolic_regression.expression_tree import UNARY_NODE_TYPES
from archipelago_pkg.symbolic_regression.expression_tree import ExpressionNode
from archipelago_pkg.symbolic_regression.expression_tree import NodeType

X = ExpressionNode.variable
C = ExpressionNode.constant


def _binary(node_type, left, right):
    return ExpressionNode.binary(node_type, left, right)


def _unary(node_type, child):
    return ExpressionNode.unary(node_type, child)


def test_node_type_ordinals_are_stable():
    assert [t.value for t in NodeType] == list(range(12))
    assert NodeType.VARIABLE.value == 10
    assert NodeType.CONSTANT.value == 11


def test_arithmetic_evaluation():
    tree = _binary(NodeType.ADD, _binary(NodeType.MULTIPLY, X(), X()), C(1.0))
    assert tree.evaluate(3.0) == pytest.approx(10.0)
    np.testing.assert_allclose(tree.evaluate(np.array([0.0, 1.0, 2.0])), [1.0, 2.0, 5.0])


def test_scalar_input_returns_float():
    result = _unary(NodeType.SIN, X()).evaluate(0.5)
    assert isinstance(result, float)
    assert result == pytest.approx(math.sin(0.5))


def test_constant_tree_broadcasts_to_input_shape():
    result = C(3.0).evaluate(np.zeros(5))
    assert result.shape == (5,)
    assert np.all(result == 3.0)


@pytest.mark.parametrize(
    "tree, expected",
    [
        (_binary(NodeType.DIVIDE, X(), C(0.0)), 1.0),
        (_binary(NodeType.DIVIDE, C(1.0), C(5e-5)), 1.0),
        (_binary(NodeType.DIVIDE, C(6.0), C(3.0)), 2.0),
        (_unary(NodeType.LOG, C(-1.0)), 0.0),
        (_unary(NodeType.LOG, C(0.0)), 0.0),
        (_unary(NodeType.LOG, C(math.e)), 1.0),
        (_unary(NodeType.EXP, C(100.0)), math.exp(10.0)),
        (_unary(NodeType.EXP, C(-100.0)), math.exp(-10.0)),
        (_unary(NodeType.SQRT, C(-4.0)), 0.0),
        (_unary(NodeType.SQRT, C(4.0)), 2.0),
        (_binary(NodeType.POWER, C(-2.0), C(2.0)), 4.0),
        (_binary(NodeType.POWER, C(2.0), C(10.0)), 32.0),
        (_binary(NodeType.POWER, C(2.0), C(-10.0)), 1.0 / 32.0),
        (_binary(NodeType.POWER, C(0.0), C(-1.0)), 1.0),
        (_binary(NodeType.POWER, C(5e-5), C(-1.0)), 1.0 / 5e-5),
        (_binary(NodeType.POWER, C(-5e-5), C(-2.0)), 1.0 / 25e-10),
    ],
)
def test_protected_operator_fallbacks(tree, expected):
    assert tree.evaluate(0.0) == pytest.approx(expected)


@pytest.mark.parametrize("node_type", BINARY_NODE_TYPES)
def test_binary_operators_stay_finite(node_type):
    x = np.array([-1e3, -1.0, -1e-6, 0.0, 1e-6, 0.5, 1.0, 1e3])
    result = _binary(node_type, X(), X()).evaluate(x)
    assert np.all(np.isfinite(result))


@pytest.mark.parametrize("node_type", UNARY_NODE_TYPES)
def test_unary_operators_stay_finite(node_type):
    x = np.array([-1e6, -1.0, 0.0, 1e-9, 1.0, 1e6])
    result = _unary(node_type, X()).evaluate(x)
    assert np.all(np.isfinite(result))


def test_count_nodes_and_depth():
    leaf = X()
    assert leaf.count_nodes() == 1
    assert leaf.depth() == 1

    tree = _binary(NodeType.ADD, _unary(NodeType.SIN, X()), C(2.0))
    assert tree.count_nodes() == 4
    assert tree.depth() == 3
    assert tree.count_nodes() == 1 + sum(c.count_nodes() for c in tree.children)


def test_arity_matches_children():
    tree = _binary(NodeType.MULTIPLY, _unary(NodeType.COS, X()), C(1.0))
    for node in tree.get_all_nodes():
        assert len(node.children) == node.arity


def test_parent_pointers_are_set():
    tree = _binary(NodeType.SUBTRACT, _unary(NodeType.EXP, X()), C(1.0))
    assert tree.parent is None
    for node in tree.get_all_nodes():
        for child in node.children:
            assert child.parent is node


def test_get_all_nodes_is_preorder():
    left = _unary(NodeType.SIN, X())
    right = C(2.0)
    tree = _binary(NodeType.ADD, left, right)
    nodes = tree.get_all_nodes()
    assert nodes[0] is tree
    assert nodes[1] is left
    assert nodes[2] is left.children[0]
    assert nodes[3] is right


def test_copy_subtree_shares_no_nodes():
    original = _binary(NodeType.ADD, X(), C(2.0))
    copy = original.copy_subtree()

    assert copy.structurally_equal(original)
    assert copy.parent is None
    original_ids = {id(n) for n in original.get_all_nodes()}
    assert original_ids.isdisjoint(id(n) for n in copy.get_all_nodes())

    copy.children[1].value = 99.0
    assert original.children[1].value == 2.0
    assert not copy.structurally_equal(original)


def test_copy_of_subtree_is_detached():
    inner = _unary(NodeType.SIN, X())
    _binary(NodeType.ADD, inner, C(1.0))
    assert inner.parent is not None
    assert inner.copy_subtree().parent is None


def test_str_rendering():
    assert str(X()) == "x"
    assert str(C(-3.0)) == "-3.00"
    assert str(_binary(NodeType.ADD, X(), C(2.5))) == "(x + 2.50)"
    assert str(_binary(NodeType.POWER, X(), C(2.0))) == "(x ^ 2.00)"
    assert str(_unary(NodeType.SQRT, X())) == "sqrt(x)"


def test_to_sympy():
    x = sp.Symbol("x")
    assert _binary(NodeType.MULTIPLY, X(), X()).to_sympy() == x**2
    assert C(0.5).to_sympy() == sp.Rational(1, 2)
    assert _unary(NodeType.COS, X()).to_sympy() == sp.cos(x)


def test_to_pretty_string():
    tree = _binary(NodeType.ADD, X(), X())
    assert tree.to_pretty_string() == "2*x"

    big = X()
    for _ in range(15):
        big = _binary(NodeType.ADD, big, X())
    assert big.to_pretty_string() == str(big)


def test_get_constants_and_contains_variable():
    tree = _binary(NodeType.ADD, C(1.0), _binary(NodeType.MULTIPLY, C(2.0), X()))
    assert [c.value for c in tree.get_constants()] == [1.0, 2.0]
    assert tree.contains_variable()
    assert not tree.children[0].contains_variable()

"""Expression Tree data structure for Genetic Programming Symbolic Regression.

This module implements the core data structure for representing mathematical
expressions of a single input variable ``x`` as binary trees that can be
evolved through genetic programming.

Key Classes:
    - NodeType: Enum of the twelve node tags (operators and terminals)
    - ExpressionNode: Single node in the expression tree

Evaluation is total: every operator defines a deterministic fallback for
inputs outside its mathematical domain, so no tree ever raises or produces a
complex result.
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from typing import Callable

import numpy as np
import sympy as sp

# Domain-safety thresholds
DIVISION_EPSILON = 1e-4
EXP_CLAMP = 10.0
POWER_EXPONENT_CLAMP = 5.0


class NodeType(Enum):
    """Tags of nodes in an expression tree.

    Values are stable ordinals; the neural encoder uses them as feature slots.
    """

    ADD = 0
    SUBTRACT = 1
    MULTIPLY = 2
    DIVIDE = 3
    SIN = 4
    COS = 5
    LOG = 6
    EXP = 7
    POWER = 8
    SQRT = 9
    VARIABLE = 10
    CONSTANT = 11


BINARY_NODE_TYPES = (
    NodeType.ADD,
    NodeType.SUBTRACT,
    NodeType.MULTIPLY,
    NodeType.DIVIDE,
    NodeType.POWER,
)
UNARY_NODE_TYPES = (
    NodeType.SIN,
    NodeType.COS,
    NodeType.LOG,
    NodeType.EXP,
    NodeType.SQRT,
)
TERMINAL_NODE_TYPES = (NodeType.VARIABLE, NodeType.CONSTANT)


# Operator definitions with safe evaluation functions
def safe_div(a, b):
    # Near-zero denominators evaluate to a neutral 1
    small = np.abs(b) < DIVISION_EPSILON
    return np.where(small, 1.0, a / np.where(small, 1.0, b))


def safe_log(a):
    positive = a > 0
    return np.where(positive, np.log(np.where(positive, a, 1.0)), 0.0)


def safe_exp(a):
    return np.exp(np.clip(a, -EXP_CLAMP, EXP_CLAMP))


def safe_pow(a, b):
    base = np.abs(a)
    exponent = np.clip(b, -POWER_EXPONENT_CLAMP, POWER_EXPONENT_CLAMP)
    with np.errstate(divide="ignore", over="ignore", invalid="ignore"):
        result = np.power(base, exponent)
    # Only the pole at |0|^negative is replaced
    return np.where(np.isfinite(result), result, 1.0)


def safe_sqrt(a):
    non_negative = a >= 0
    return np.where(non_negative, np.sqrt(np.where(non_negative, a, 0.0)), 0.0)


UNARY_OPERATORS: dict[NodeType, Callable] = {
    NodeType.SIN: np.sin,
    NodeType.COS: np.cos,
    NodeType.LOG: safe_log,
    NodeType.EXP: safe_exp,
    NodeType.SQRT: safe_sqrt,
}

BINARY_OPERATORS: dict[NodeType, Callable] = {
    NodeType.ADD: lambda a, b: a + b,
    NodeType.SUBTRACT: lambda a, b: a - b,
    NodeType.MULTIPLY: lambda a, b: a * b,
    NodeType.DIVIDE: safe_div,
    NodeType.POWER: safe_pow,
}

# SymPy equivalents for symbolic conversion (protection dropped)
SYMPY_UNARY: dict[NodeType, Callable] = {
    NodeType.SIN: sp.sin,
    NodeType.COS: sp.cos,
    NodeType.LOG: sp.log,
    NodeType.EXP: sp.exp,
    NodeType.SQRT: sp.sqrt,
}

SYMPY_BINARY: dict[NodeType, Callable] = {
    NodeType.ADD: lambda a, b: a + b,
    NodeType.SUBTRACT: lambda a, b: a - b,
    NodeType.MULTIPLY: lambda a, b: a * b,
    NodeType.DIVIDE: lambda a, b: a / b,
    NodeType.POWER: lambda a, b: sp.Abs(a) ** b,
}

BINARY_SYMBOLS = {
    NodeType.ADD: "+",
    NodeType.SUBTRACT: "-",
    NodeType.MULTIPLY: "*",
    NodeType.DIVIDE: "/",
    NodeType.POWER: "^",
}

UNARY_NAMES = {
    NodeType.SIN: "sin",
    NodeType.COS: "cos",
    NodeType.LOG: "log",
    NodeType.EXP: "exp",
    NodeType.SQRT: "sqrt",
}


@dataclass(eq=False)
class ExpressionNode:
    """A node in an expression tree.

    Attributes:
        node_type: Tag of this node
        value: Numeric value for CONSTANT nodes (ignored otherwise)
        children: Child nodes (empty for terminals, 1 for unary, 2 for binary)
        parent: Reference to parent node (None for root)
    """

    node_type: NodeType
    value: float = 0.0
    children: list[ExpressionNode] = field(default_factory=list)
    parent: ExpressionNode | None = field(default=None, repr=False)

    def __post_init__(self):
        """Set parent references for children."""
        for child in self.children:
            child.parent = self

    @classmethod
    def constant(cls, value: float) -> ExpressionNode:
        return cls(NodeType.CONSTANT, float(value))

    @classmethod
    def variable(cls) -> ExpressionNode:
        return cls(NodeType.VARIABLE)

    @classmethod
    def unary(cls, node_type: NodeType, child: ExpressionNode) -> ExpressionNode:
        return cls(node_type, children=[child])

    @classmethod
    def binary(
        cls, node_type: NodeType, left: ExpressionNode, right: ExpressionNode
    ) -> ExpressionNode:
        return cls(node_type, children=[left, right])

    @property
    def arity(self) -> int:
        """Number of children this node should have."""
        if self.node_type in TERMINAL_NODE_TYPES:
            return 0
        if self.node_type in UNARY_NODE_TYPES:
            return 1
        return 2

    @property
    def is_terminal(self) -> bool:
        """Whether this is a terminal (leaf) node."""
        return self.node_type in TERMINAL_NODE_TYPES

    @property
    def left(self) -> ExpressionNode | None:
        return self.children[0] if self.children else None

    @property
    def right(self) -> ExpressionNode | None:
        return self.children[1] if len(self.children) > 1 else None

    def evaluate(self, x: float | np.ndarray) -> float | np.ndarray:
        """Evaluate this subtree at ``x``.

        Args:
            x: Scalar input or array of inputs

        Returns:
            A float for scalar input, otherwise an array shaped like ``x``
        """
        x_arr = np.asarray(x, dtype=float)
        with np.errstate(all="ignore"):
            result = self._evaluate(x_arr)
        if x_arr.ndim == 0:
            return float(result)
        return np.broadcast_to(result, x_arr.shape).astype(float)

    def _evaluate(self, x: np.ndarray) -> np.ndarray | float:
        if self.node_type == NodeType.VARIABLE:
            return x
        if self.node_type == NodeType.CONSTANT:
            return self.value
        if self.node_type in UNARY_OPERATORS:
            return UNARY_OPERATORS[self.node_type](self.children[0]._evaluate(x))
        return BINARY_OPERATORS[self.node_type](
            self.children[0]._evaluate(x), self.children[1]._evaluate(x)
        )

    def contains_variable(self) -> bool:
        """Whether any node of this subtree is the input variable."""
        if self.node_type == NodeType.VARIABLE:
            return True
        return any(child.contains_variable() for child in self.children)

    def to_sympy(self, symbol: sp.Symbol | None = None) -> sp.Expr:
        """Convert this subtree to a SymPy expression.

        Protected semantics (division guard, clamps) are not represented;
        the result is meant for display.
        """
        if symbol is None:
            symbol = sp.Symbol("x")

        if self.node_type == NodeType.CONSTANT:
            # Skip rationalization for very large or very small numbers
            if abs(self.value) > 1e6 or (abs(self.value) < 1e-6 and self.value != 0):
                return sp.Float(self.value)
            rational = sp.nsimplify(self.value, tolerance=1e-6, rational=True)
            if abs(float(rational) - self.value) < 1e-6:
                return rational
            return sp.Float(self.value)

        if self.node_type == NodeType.VARIABLE:
            return symbol

        if self.node_type in SYMPY_UNARY:
            return SYMPY_UNARY[self.node_type](self.children[0].to_sympy(symbol))

        return SYMPY_BINARY[self.node_type](
            self.children[0].to_sympy(symbol), self.children[1].to_sympy(symbol)
        )

    def to_pretty_string(self, max_complexity: int = 20) -> str:
        """Get a cleaned-up string representation via SymPy."""
        # Skip SymPy for large trees to avoid slow canonicalization
        if self.count_nodes() > max_complexity:
            return str(self)
        try:
            return str(self.to_sympy())
        except (TypeError, ValueError, ZeroDivisionError):
            return str(self)

    def copy_subtree(self) -> ExpressionNode:
        """Create a deep copy of this subtree (no shared nodes)."""
        return ExpressionNode(
            node_type=self.node_type,
            value=self.value,
            children=[child.copy_subtree() for child in self.children],
            parent=None,
        )

    clone = copy_subtree

    def count_nodes(self) -> int:
        """Count total nodes in this subtree."""
        return 1 + sum(child.count_nodes() for child in self.children)

    complexity = count_nodes

    def depth(self) -> int:
        """Calculate depth of this subtree (a lone leaf has depth 1)."""
        if not self.children:
            return 1
        return 1 + max(child.depth() for child in self.children)

    def get_all_nodes(self) -> list[ExpressionNode]:
        """Get a flat pre-order list of all nodes; index 0 is this node."""
        nodes = []
        stack = [self]
        while stack:
            node = stack.pop()
            nodes.append(node)
            stack.extend(reversed(node.children))
        return nodes

    def get_constants(self) -> list[ExpressionNode]:
        """Get all CONSTANT leaves in pre-order."""
        return [n for n in self.get_all_nodes() if n.node_type == NodeType.CONSTANT]

    def structurally_equal(self, other: ExpressionNode | None) -> bool:
        """Compare tags, constant values and shape recursively."""
        if other is None or self.node_type != other.node_type:
            return False
        if self.node_type == NodeType.CONSTANT and self.value != other.value:
            return False
        if len(self.children) != len(other.children):
            return False
        return all(
            a.structurally_equal(b) for a, b in zip(self.children, other.children)
        )

    def __str__(self) -> str:
        """Infix rendering with two-decimal constants."""
        if self.node_type == NodeType.VARIABLE:
            return "x"
        if self.node_type == NodeType.CONSTANT:
            return f"{self.value:.2f}"
        if self.node_type in UNARY_NAMES:
            return f"{UNARY_NAMES[self.node_type]}({self.children[0]})"
        symbol = BINARY_SYMBOLS[self.node_type]
        return f"({self.children[0]} {symbol} {self.children[1]})"

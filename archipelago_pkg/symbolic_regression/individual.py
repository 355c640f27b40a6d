"""Candidate solution wrapping one expression tree.

An Individual owns exactly one tree and caches the scores computed against a
dataset: ``mse`` (lower is better), ``complexity`` (node count), and the
scalar ``fitness = -(mse + complexity_weight * complexity)`` (higher is
better). ``crowding_distance`` and ``domination_count`` are scratch fields
used only by the multi-objective selector.
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from typing import Any

import numpy as np

from ..config import MAX_MSE
from .expression_tree import ExpressionNode


def mean_squared_error(root: ExpressionNode, x: np.ndarray, y: np.ndarray) -> float:
    """MSE of a tree over the samples, ignoring non-finite predictions.

    Returns ``MAX_MSE`` when no sample yields a finite prediction (including
    an empty dataset).
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if x.size == 0:
        return MAX_MSE

    predictions = root.evaluate(x)
    valid = np.isfinite(predictions)
    if not np.any(valid):
        return MAX_MSE

    with np.errstate(all="ignore"):
        errors = y[valid] - predictions[valid]
        mse = float(np.mean(errors * errors))
    if not np.isfinite(mse) or mse > MAX_MSE:
        return MAX_MSE
    return mse


@dataclass(eq=False)
class Individual:
    """One candidate expression plus its cached scores.

    Attributes:
        root: Root node of the owned expression tree
        fitness: Scalar fitness (higher is better)
        mse: Mean squared error on the dataset (lower is better)
        complexity: Node count of the tree
        crowding_distance: NSGA-II crowding distance within its front
        domination_count: Number of individuals dominating this one
    """

    root: ExpressionNode
    fitness: float = field(default=float("-inf"))
    mse: float = field(default=MAX_MSE)
    complexity: float = field(default=0)
    crowding_distance: float = field(default=0.0)
    domination_count: int = field(default=0)

    def __post_init__(self):
        self.root.parent = None
        if not self.complexity:
            self.complexity = self.root.count_nodes()

    def calculate_fitness(
        self, x: np.ndarray, y: np.ndarray, complexity_weight: float
    ) -> float:
        """Recompute mse, complexity and fitness against a dataset.

        Args:
            x: Input samples
            y: Target samples (same length as ``x``)
            complexity_weight: Penalty per node in the scalar fitness

        Returns:
            The new fitness value
        """
        self.mse = mean_squared_error(self.root, x, y)
        self.complexity = self.root.count_nodes()
        self.fitness = -(self.mse + complexity_weight * self.complexity)
        return self.fitness

    def evaluate(self, x: float | np.ndarray) -> float | np.ndarray:
        return self.root.evaluate(x)

    def replace_subtree(self, old_node: ExpressionNode, new_subtree: ExpressionNode):
        """Swap ``new_subtree`` into the child slot held by ``old_node``.

        Args:
            old_node: Node (of this individual's tree) to replace
            new_subtree: Detached subtree to insert
        """
        if old_node.parent is None:
            self.root = new_subtree
            new_subtree.parent = None
            return

        parent = old_node.parent
        # Find by identity, not equality
        for i, child in enumerate(parent.children):
            if child is old_node:
                parent.children[i] = new_subtree
                new_subtree.parent = parent
                old_node.parent = None
                return

    def clone(self) -> Individual:
        """Deep copy of the tree; cached scores are not carried over."""
        return Individual(root=self.root.copy_subtree())

    def clone_with_scores(self) -> Individual:
        """Deep copy of the tree that keeps the cached scores."""
        return Individual(
            root=self.root.copy_subtree(),
            fitness=self.fitness,
            mse=self.mse,
            complexity=self.complexity,
            crowding_distance=self.crowding_distance,
            domination_count=self.domination_count,
        )

    @property
    def expression(self) -> str:
        return str(self.root)

    def to_dict(self) -> dict[str, Any]:
        """Serializable snapshot of the scores and rendered expression."""
        return {
            "expression": self.expression,
            "simplified": self.root.to_pretty_string(),
            "mse": self.mse,
            "fitness": self.fitness,
            "complexity": self.complexity,
        }

    def __str__(self) -> str:
        return self.expression

    def __repr__(self) -> str:
        return (
            f"Individual({self.expression}, fitness={self.fitness:.6g}, "
            f"mse={self.mse:.6g}, complexity={self.complexity})"
        )

"""Adaptive control of an island's mutation rate and complexity weight."""

from __future__ import annotations

import random

import numpy as np

from ..config import DIVERSITY_SAMPLES
from ..config import MAX_COMPLEXITY_WEIGHT
from ..config import MAX_MUTATION_RATE
from ..config import MIN_COMPLEXITY_WEIGHT
from ..config import MIN_MUTATION_RATE
from .expression_tree import ExpressionNode
from .expression_tree import NodeType
from .individual import Individual


def tree_distance(tree1: ExpressionNode | None, tree2: ExpressionNode | None) -> float:
    """Structural distance between two trees aligned position by position.

    Each mismatched tag counts 1, aligned constants add ``|c1 - c2| / 10``,
    and a node missing on one side counts 1.
    """
    if tree1 is None and tree2 is None:
        return 0.0
    if tree1 is None or tree2 is None:
        return 1.0

    distance = 1.0 if tree1.node_type != tree2.node_type else 0.0
    if tree1.node_type == NodeType.CONSTANT and tree2.node_type == NodeType.CONSTANT:
        distance += abs(tree1.value - tree2.value) / 10.0

    distance += tree_distance(tree1.left, tree2.left)
    distance += tree_distance(tree1.right, tree2.right)
    return distance


class AdaptiveParameterController:
    """Measure diversity and progress, and adapt island parameters.

    Attributes:
        min_mutation_rate: Floor for the mutation rate
        max_mutation_rate: Ceiling for the mutation rate
        min_complexity_weight: Floor for the complexity weight
        max_complexity_weight: Ceiling for the complexity weight
    """

    def __init__(
        self,
        min_mutation_rate: float = MIN_MUTATION_RATE,
        max_mutation_rate: float = MAX_MUTATION_RATE,
        min_complexity_weight: float = MIN_COMPLEXITY_WEIGHT,
        max_complexity_weight: float = MAX_COMPLEXITY_WEIGHT,
        rng: random.Random | None = None,
    ):
        self.min_mutation_rate = min_mutation_rate
        self.max_mutation_rate = max_mutation_rate
        self.min_complexity_weight = min_complexity_weight
        self.max_complexity_weight = max_complexity_weight
        self.random = rng if rng is not None else random.Random()

    def measure_diversity(self, population: list[Individual]) -> float:
        """Average tree distance over randomly sampled pairs.

        Up to ``min(50, len(population) // 2)`` pairs are drawn; pairs that
        pick the same index twice are skipped.
        """
        if len(population) < 2:
            return 0.0

        total_distance = 0.0
        comparisons = 0
        samples = min(DIVERSITY_SAMPLES, len(population) // 2)
        for _ in range(samples):
            idx1 = self.random.randrange(len(population))
            idx2 = self.random.randrange(len(population))
            if idx1 == idx2:
                continue
            total_distance += tree_distance(population[idx1].root, population[idx2].root)
            comparisons += 1

        return total_distance / comparisons if comparisons > 0 else 0.0

    @staticmethod
    def measure_progress(recent_best_fitness: list[float]) -> float:
        """Mean successive change of the best fitness (positive = improving).

        Fewer than two samples count as full progress (1.0).
        """
        if len(recent_best_fitness) < 2:
            return 1.0
        deltas = np.diff(np.asarray(recent_best_fitness, dtype=float))
        with np.errstate(all="ignore"):
            progress = float(np.mean(deltas))
        return progress if np.isfinite(progress) else 0.0

    def adapt_mutation_rate(
        self, current_rate: float, diversity: float, progress: float
    ) -> float:
        """Raise the rate 10% when converged and stagnant, lower it 5% when
        diverse and improving."""
        if diversity < 0.1 and progress < 0.01:
            return min(current_rate * 1.1, self.max_mutation_rate)
        if diversity > 0.5 and progress > 0.05:
            return max(current_rate * 0.95, self.min_mutation_rate)
        return current_rate

    def adapt_complexity_weight(
        self, current_weight: float, avg_complexity: float, target_complexity: float
    ) -> float:
        """Penalize bloat above 1.5x the target, relax below 0.5x."""
        if avg_complexity > target_complexity * 1.5:
            return min(current_weight * 1.05, self.max_complexity_weight)
        if avg_complexity < target_complexity * 0.5:
            return max(current_weight * 0.95, self.min_complexity_weight)
        return current_weight

"""Genetic operators for evolving expression trees.

This module implements tree generation, mutation and crossover for genetic
programming:
- Random tree generation: probabilistic grow grammar
- Constant mutation: Perturb one constant value
- Subtree mutation: Replace a non-root subtree with a random new one
- Delete mutation: Promote a child over its parent, collapsing one level
- Simplify mutation: Fold variable-free subtrees into constants
- Crossover: Splice a subtree of one parent into a copy of another

Every operator draws from the ``random.Random`` owned by its
``GeneticOperators`` instance, so an island that owns one instance gets a
reproducible stream no matter how islands are scheduled across threads.
"""

from __future__ import annotations

import random

from ..config import CONSTANT_RANGE
from ..config import MUTATION_STRENGTH
from ..config import SUBTREE_MUTATION_DEPTH
from ..config import TOURNAMENT_SIZE
from .expression_tree import BINARY_NODE_TYPES
from .expression_tree import UNARY_NODE_TYPES
from .expression_tree import ExpressionNode
from .expression_tree import NodeType
from .individual import Individual

LEAF_PROBABILITY = 0.3
VARIABLE_PROBABILITY = 0.5
BINARY_PROBABILITY = 0.7


class GeneticOperators:
    """Generator of random trees and mutation/crossover operators.

    Args:
        seed: Seed for the private random stream (None for OS entropy)
    """

    def __init__(self, seed: int | None = None):
        self.random = random.Random(seed)

    def generate_random_tree(
        self, max_depth: int, constant_range: float = CONSTANT_RANGE
    ) -> ExpressionNode:
        """Generate a random expression tree.

        At depth 0, or with 30% probability, a leaf is emitted (variable or
        constant in ``[-constant_range, constant_range]`` with equal odds).
        Otherwise a binary operator is chosen with 70% probability, a unary
        operator with 30%, and the children are grown at ``max_depth - 1``.

        Args:
            max_depth: Remaining depth budget
            constant_range: Half-width of the uniform constant range

        Returns:
            Root of the new tree
        """
        rng = self.random
        if max_depth <= 0 or rng.random() < LEAF_PROBABILITY:
            if rng.random() < VARIABLE_PROBABILITY:
                return ExpressionNode.variable()
            return ExpressionNode.constant(
                rng.random() * constant_range * 2 - constant_range
            )

        if rng.random() < BINARY_PROBABILITY:
            op = rng.choice(BINARY_NODE_TYPES)
            left = self.generate_random_tree(max_depth - 1, constant_range)
            right = self.generate_random_tree(max_depth - 1, constant_range)
            return ExpressionNode.binary(op, left, right)

        op = rng.choice(UNARY_NODE_TYPES)
        return ExpressionNode.unary(
            op, self.generate_random_tree(max_depth - 1, constant_range)
        )

    def mutate_constant(
        self, individual: Individual, strength: float = MUTATION_STRENGTH
    ) -> None:
        """Add uniform noise in ``[-strength, strength]`` to one constant."""
        constants = individual.root.get_constants()
        if not constants:
            return
        target = constants[self.random.randrange(len(constants))]
        target.value += (self.random.random() * 2 - 1) * strength

    def mutate_subtree(
        self, individual: Individual, max_depth: int = SUBTREE_MUTATION_DEPTH
    ) -> None:
        """Replace one non-root node with a freshly grown subtree."""
        nodes = individual.root.get_all_nodes()
        if len(nodes) <= 1:
            return
        target = nodes[self.random.randrange(1, len(nodes))]
        individual.replace_subtree(target, self.generate_random_tree(max_depth))

    def mutate_delete(self, individual: Individual) -> None:
        """Promote a child of one non-root node into that node's slot.

        Leaves are picked but left untouched; a lone-leaf tree is never
        changed.
        """
        nodes = individual.root.get_all_nodes()
        if len(nodes) <= 1:
            return
        target = nodes[self.random.randrange(1, len(nodes))]

        if len(target.children) == 1:
            child = target.children[0]
        elif len(target.children) == 2:
            child = target.children[0] if self.random.random() < 0.5 else target.children[1]
        else:
            return

        child.parent = None
        individual.replace_subtree(target, child)

    def mutate_simplify(self, individual: Individual) -> None:
        """Fold every variable-free operator subtree into one constant."""
        individual.root = self._fold_recursive(individual.root)
        individual.root.parent = None

    def _fold_recursive(self, node: ExpressionNode) -> ExpressionNode:
        # Fold children first (bottom-up)
        for i, child in enumerate(node.children):
            node.children[i] = self._fold_recursive(child)
            node.children[i].parent = node

        if node.node_type != NodeType.CONSTANT and not node.contains_variable():
            return ExpressionNode.constant(node.evaluate(0.0))
        return node

    def apply_random_mutation(self, individual: Individual) -> None:
        """Apply exactly one mutation, each kind with 25% probability."""
        roll = self.random.random()
        if roll < 0.25:
            self.mutate_constant(individual, MUTATION_STRENGTH)
        elif roll < 0.5:
            self.mutate_subtree(individual, SUBTREE_MUTATION_DEPTH)
        elif roll < 0.75:
            self.mutate_delete(individual)
        else:
            self.mutate_simplify(individual)

    def crossover(self, parent1: Individual, parent2: Individual) -> Individual:
        """Splice a random subtree of ``parent2`` into a copy of ``parent1``.

        Neither parent is modified.

        Returns:
            New, unevaluated child individual
        """
        child = parent1.clone()
        child_nodes = child.root.get_all_nodes()
        donor_nodes = parent2.root.get_all_nodes()

        point = child_nodes[self.random.randrange(len(child_nodes))]
        donor = donor_nodes[self.random.randrange(len(donor_nodes))].copy_subtree()
        child.replace_subtree(point, donor)
        return child

    def tournament_selection(
        self, population: list[Individual], tournament_size: int = TOURNAMENT_SIZE
    ) -> Individual:
        """Best of ``tournament_size`` draws with replacement (not a copy)."""
        best = None
        for _ in range(tournament_size):
            candidate = population[self.random.randrange(len(population))]
            if best is None or candidate.fitness > best.fitness:
                best = candidate
        return best

"""Multi-objective selection (NSGA-II) over accuracy and complexity.

Both objectives are minimized: ``mse`` and ``complexity``. This module
provides Pareto dominance, fast non-dominated sorting, crowding distance,
and NSGA-II survivor selection, plus the ``ParetoSolution`` record used to
report the final trade-off front of a run.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from dataclasses import field
from typing import Any

from .individual import Individual

SYMPY_MAX_COMPLEXITY = 25


def dominates(a: Individual, b: Individual) -> bool:
    """Check if ``a`` dominates ``b``.

    ``a`` dominates ``b`` if it is at least as good in both objectives and
    strictly better in at least one.
    """
    at_least_as_good = a.mse <= b.mse and a.complexity <= b.complexity
    strictly_better = a.mse < b.mse or a.complexity < b.complexity
    return at_least_as_good and strictly_better


def fast_non_dominated_sort(population: list[Individual]) -> list[list[Individual]]:
    """Partition a population into Pareto fronts.

    Front 0 holds the individuals dominated by nobody; each following front
    holds those dominated only by members of earlier fronts. Every
    individual's ``domination_count`` is left at the number of individuals
    that dominate it.

    Returns:
        List of fronts, best first (empty list for an empty population)
    """
    n = len(population)
    if n == 0:
        return []

    domination_count = [0] * n
    dominated_solutions: list[list[int]] = [[] for _ in range(n)]

    current = []
    for p in range(n):
        for q in range(n):
            if p == q:
                continue
            if dominates(population[p], population[q]):
                dominated_solutions[p].append(q)
            elif dominates(population[q], population[p]):
                domination_count[p] += 1
        population[p].domination_count = domination_count[p]
        if domination_count[p] == 0:
            current.append(p)

    remaining = list(domination_count)
    fronts = []
    while current:
        fronts.append([population[i] for i in current])
        next_front = []
        for p in current:
            for q in dominated_solutions[p]:
                remaining[q] -= 1
                if remaining[q] == 0:
                    next_front.append(q)
        current = next_front

    return fronts


def calculate_crowding_distance(front: list[Individual]) -> None:
    """Assign ``crowding_distance`` to every member of a front.

    For each objective the front is sorted, both extremes get +inf, and each
    interior member accumulates the normalized gap between its neighbours.
    """
    if not front:
        return

    for ind in front:
        ind.crowding_distance = 0.0

    for objective in ("mse", "complexity"):
        ordered = sorted(front, key=lambda ind: getattr(ind, objective))
        ordered[0].crowding_distance = math.inf
        ordered[-1].crowding_distance = math.inf

        value_range = getattr(ordered[-1], objective) - getattr(ordered[0], objective)
        if not value_range > 0 or not math.isfinite(value_range):
            continue
        for i in range(1, len(ordered) - 1):
            gap = getattr(ordered[i + 1], objective) - getattr(ordered[i - 1], objective)
            ordered[i].crowding_distance += gap / value_range


def nsga2_selection(population: list[Individual], target_size: int) -> list[Individual]:
    """Select ``target_size`` survivors by front rank, then crowding distance.

    Whole fronts are taken while they fit; the first front that would
    overflow is filled by descending crowding distance.
    """
    fronts = fast_non_dominated_sort(population)
    selected: list[Individual] = []

    front_index = 0
    while front_index < len(fronts) and len(selected) + len(fronts[front_index]) <= target_size:
        selected.extend(fronts[front_index])
        front_index += 1

    if len(selected) < target_size and front_index < len(fronts):
        last_front = fronts[front_index]
        calculate_crowding_distance(last_front)
        by_distance = sorted(last_front, key=lambda ind: ind.crowding_distance, reverse=True)
        selected.extend(by_distance[: target_size - len(selected)])

    return selected


@dataclass(frozen=True)
class ParetoSolution:
    """A solution on the final Pareto front of a run.

    Attributes:
        expression: String representation of the expression
        sympy_expr: SymPy expression object
        mse: Mean squared error
        complexity: Number of nodes in expression tree
        individual: Snapshot of the underlying Individual
    """

    expression: str
    sympy_expr: Any  # sp.Expr
    mse: float
    complexity: int
    individual: Any = field(compare=False, repr=False)

    @classmethod
    def from_individual(cls, individual: Individual) -> ParetoSolution:
        snapshot = individual.clone_with_scores()
        sympy_expr = None
        # Skip SymPy conversion for complex trees
        if snapshot.complexity <= SYMPY_MAX_COMPLEXITY:
            try:
                sympy_expr = snapshot.root.to_sympy()
            except (TypeError, ValueError, ZeroDivisionError):
                sympy_expr = None
        return cls(
            expression=snapshot.expression,
            sympy_expr=sympy_expr,
            mse=snapshot.mse,
            complexity=int(snapshot.complexity),
            individual=snapshot,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "expression": self.expression,
            "sympy": str(self.sympy_expr) if self.sympy_expr is not None else None,
            "mse": self.mse,
            "complexity": self.complexity,
        }


def pareto_front(population: list[Individual]) -> list[ParetoSolution]:
    """Non-dominated trade-offs of a population, sorted by complexity.

    Individuals sharing the same (mse, complexity) point are reported once.
    """
    fronts = fast_non_dominated_sort(population)
    if not fronts:
        return []

    seen = set()
    solutions = []
    for ind in sorted(fronts[0], key=lambda i: (i.complexity, i.mse)):
        key = (ind.mse, ind.complexity)
        if key in seen:
            continue
        seen.add(key)
        solutions.append(ParetoSolution.from_individual(ind))
    return solutions

"""Benchmark Runner for Symbolic Regression.

Runs the island-model regressor on the built-in target functions and
summarizes how well each one was recovered.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from dataclasses import field
from dataclasses import replace

import numpy as np
import pandas as pd
import sympy as sp

from ..symbolic_regression import GeneticConfig
from ..symbolic_regression import IslandModelRegressor
from .test_functions import TestFunction
from .test_functions import generate_dataset

logger = logging.getLogger(__name__)

EQUIVALENCE_SAMPLES = 10
EQUIVALENCE_SEED = 7


@dataclass
class BenchmarkResult:
    """Result of a single benchmark run.

    Attributes:
        function_name: Name of the target function
        discovered_expression: String of discovered expression
        true_expression: Target formula
        mse: Mean squared error on a denser held-out grid
        r2_score: R² coefficient on the same grid
        exact_match: Whether the discovered expression is symbolically equivalent
        time_seconds: Time taken to discover
        complexity: Number of nodes in discovered expression
        generations: Generations actually run
    """

    function_name: str
    discovered_expression: str
    true_expression: str
    mse: float
    r2_score: float
    exact_match: bool
    time_seconds: float
    complexity: int = 0
    generations: int = 0

    @property
    def is_successful(self) -> bool:
        """Whether discovery was successful (R² > 0.999 or exact match)."""
        return self.exact_match or self.r2_score > 0.999


@dataclass
class BenchmarkSuite:
    """Collection of benchmark results."""

    results: list[BenchmarkResult] = field(default_factory=list)
    total_time: float = 0.0
    config: dict = field(default_factory=dict)

    @property
    def n_total(self) -> int:
        return len(self.results)

    @property
    def n_successful(self) -> int:
        return sum(1 for r in self.results if r.is_successful)

    @property
    def n_exact(self) -> int:
        return sum(1 for r in self.results if r.exact_match)

    @property
    def success_rate(self) -> float:
        return self.n_successful / self.n_total if self.n_total > 0 else 0.0

    @property
    def mean_r2(self) -> float:
        if not self.results:
            return 0.0
        return float(np.mean([r.r2_score for r in self.results]))

    def to_dataframe(self) -> pd.DataFrame:
        """Convert to pandas DataFrame."""
        return pd.DataFrame(
            [
                {
                    "function": r.function_name,
                    "discovered": r.discovered_expression,
                    "mse": r.mse,
                    "r2": r.r2_score,
                    "exact": r.exact_match,
                    "successful": r.is_successful,
                    "complexity": r.complexity,
                    "generations": r.generations,
                    "time": r.time_seconds,
                }
                for r in self.results
            ]
        )

    def summary(self) -> str:
        """Generate summary report."""
        lines = [
            "=" * 60,
            "SYMBOLIC REGRESSION BENCHMARK RESULTS",
            "=" * 60,
            f"Total functions tested: {self.n_total}",
            f"Successful discoveries: {self.n_successful} ({self.success_rate:.1%})",
            f"Exact matches: {self.n_exact}",
            f"Mean R²: {self.mean_r2:.4f}",
            f"Total time: {self.total_time:.1f}s",
            "-" * 60,
        ]
        for r in self.results:
            status = "ok" if r.is_successful else "--"
            lines.append(
                f"  [{status}] {r.function_name:<14} R²={r.r2_score:.4f}  {r.discovered_expression}"
            )
        return "\n".join(lines)


def check_symbolic_equivalence(expr1, expr2) -> bool:
    """Check if two single-variable expressions are equivalent.

    Tries symbolic simplification of the difference first, then compares the
    two at a fixed set of sample points.

    Args:
        expr1: First expression (string or SymPy expression, variable ``x``)
        expr2: Second expression

    Returns:
        True if equivalent
    """
    if expr1 is None or expr2 is None:
        return False
    if isinstance(expr1, str) and not expr1.strip():
        return False

    x = sp.Symbol("x")
    try:
        e1 = sp.sympify(expr1, locals={"x": x})
        e2 = sp.sympify(expr2, locals={"x": x})
    except (sp.SympifyError, TypeError, SyntaxError):
        return False

    if sp.simplify(e1 - e2) == 0:
        return True

    rng = np.random.default_rng(EQUIVALENCE_SEED)
    f1 = sp.lambdify(x, e1, "numpy")
    f2 = sp.lambdify(x, e2, "numpy")
    points = rng.uniform(0.1, 5.0, EQUIVALENCE_SAMPLES)
    with np.errstate(all="ignore"):
        v1 = np.broadcast_to(np.asarray(f1(points), dtype=complex), points.shape)
        v2 = np.broadcast_to(np.asarray(f2(points), dtype=complex), points.shape)
    if not (np.all(np.isfinite(v1)) and np.all(np.isfinite(v2))):
        return False
    return bool(np.all(np.abs(v1 - v2) <= 1e-6 * (np.abs(v1) + np.abs(v2) + 1e-10)))


def run_single_benchmark(
    function: TestFunction | str,
    config: GeneticConfig | None = None,
    n_points: int = 20,
) -> BenchmarkResult:
    """Run benchmark on a single target function.

    Args:
        function: Target function to recover
        config: Run configuration (defaults if None)
        n_points: Number of training points

    Returns:
        BenchmarkResult
    """
    function = TestFunction.from_name(function)
    x, y = generate_dataset(function, n_points=n_points)
    x_test, y_test = generate_dataset(function, n_points=4 * max(n_points, 1) + 1)

    start_time = time.time()
    regressor = IslandModelRegressor(config or GeneticConfig())
    result = regressor.fit(x, y)
    elapsed = time.time() - start_time

    y_pred = regressor.predict(x_test)
    with np.errstate(all="ignore"):
        residual = y_test - y_pred
        mse = float(np.mean(residual**2))
        ss_tot = float(np.sum((y_test - np.mean(y_test)) ** 2))
        r2 = float(1 - np.sum(residual**2) / (ss_tot + 1e-10))
    if not np.isfinite(r2):
        r2 = 0.0

    sympy_expr = None
    if result.pareto_front:
        by_mse = min(result.pareto_front, key=lambda s: s.mse)
        sympy_expr = by_mse.sympy_expr
    exact_match = check_symbolic_equivalence(sympy_expr, function.formula)

    return BenchmarkResult(
        function_name=function.name.lower(),
        discovered_expression=result.expression,
        true_expression=function.formula,
        mse=mse,
        r2_score=r2,
        exact_match=exact_match,
        time_seconds=elapsed,
        complexity=result.complexity,
        generations=result.generations,
    )


def run_benchmark_suite(
    functions: list[TestFunction | str] | None = None,
    config: GeneticConfig | None = None,
    n_points: int = 20,
) -> BenchmarkSuite:
    """Run every requested target function with the same configuration.

    Args:
        functions: Functions to test (default: all built-in functions)
        config: Run configuration; progress logging is silenced per run
        n_points: Number of training points per function

    Returns:
        BenchmarkSuite with all results
    """
    functions = [TestFunction.from_name(f) for f in (functions or list(TestFunction))]
    run_config = replace(config or GeneticConfig(), verbose=False)

    suite = BenchmarkSuite(
        config={
            "n_islands": run_config.n_islands,
            "population_per_island": run_config.population_per_island,
            "max_generations": run_config.max_generations,
            "n_points": n_points,
        }
    )
    start_time = time.time()

    for i, function in enumerate(functions):
        result = run_single_benchmark(function, run_config, n_points)
        suite.results.append(result)
        logger.info(
            "[%d/%d] %s: %s R²=%.4f (%.1fs)",
            i + 1,
            len(functions),
            result.function_name,
            "solved" if result.is_successful else "unsolved",
            result.r2_score,
            result.time_seconds,
        )

    suite.total_time = time.time() - start_time
    return suite

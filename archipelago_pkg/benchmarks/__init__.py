"""Benchmarks Module.

Provides the built-in target functions used to generate synthetic datasets
and a runner that measures how well the regressor recovers them.

Components:
    - test_functions: Target functions and dataset generation
    - benchmark_runner: Automated benchmarking and summaries
"""

from .benchmark_runner import BenchmarkResult
from .benchmark_runner import BenchmarkSuite
from .benchmark_runner import check_symbolic_equivalence
from .benchmark_runner import run_benchmark_suite
from .benchmark_runner import run_single_benchmark
from .test_functions import TestFunction
from .test_functions import generate_dataset

__all__ = [
    # Target functions
    "TestFunction",
    "generate_dataset",
    # Benchmarking
    "BenchmarkResult",
    "BenchmarkSuite",
    "run_single_benchmark",
    "run_benchmark_suite",
    "check_symbolic_equivalence",
]

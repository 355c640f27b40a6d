from __future__ import annotations

import argparse
import json
import logging
import sys

from ..benchmarks import TestFunction
from ..benchmarks import generate_dataset
from ..benchmarks import run_benchmark_suite
from ..config import VERSION
from ..symbolic_regression import GeneticConfig
from ..symbolic_regression import IslandModelRegressor
from ..symbolic_regression import MigrationTopology
from ..types import ArchipelagoError
from ..types import DatasetError
from ..utils.data_loading import load_xy_csv
from ..utils.formatting import print_result_pretty

_logger = logging.getLogger(__name__)


def _health_check() -> int:
    """Run health check to verify dependencies and basic operations.

    Returns:
        Exit code (0 for success, non-zero for failures)
    """
    checks_passed = 0
    checks_failed = 0

    print("Running Archipelago health check...")
    print("-" * 50)

    import numpy as np
    import pandas as pd
    import sympy as sp

    print(f"[OK] NumPy {np.__version__} available")
    print(f"[OK] SymPy {sp.__version__} available")
    print(f"[OK] pandas {pd.__version__} available")
    checks_passed += 3

    # A tiny run must produce a finite best
    try:
        x, y = generate_dataset(TestFunction.QUADRATIC, n_points=10)
        config = GeneticConfig(
            n_islands=2,
            population_per_island=20,
            max_generations=3,
            use_neural_guidance=False,
            verbose=False,
        )
        result = IslandModelRegressor(config).fit(x, y)
        if np.isfinite(result.mse):
            print(f"[OK] Engine run works (best: {result.expression})")
            checks_passed += 1
        else:
            print(f"[FAIL] Engine run produced non-finite MSE: {result.mse}")
            checks_failed += 1
    except ArchipelagoError as e:
        print(f"[FAIL] Engine run failed: {e}")
        checks_failed += 1

    print("-" * 50)
    print(f"Health check: {checks_passed} passed, {checks_failed} failed")
    return 0 if checks_failed == 0 else 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="archipelago",
        description="Discover y = f(x) with island-model genetic programming.",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--function",
        type=str,
        choices=[f.name.lower() for f in TestFunction],
        default="quadratic",
        help="Built-in target function to sample (default: quadratic)",
    )
    source.add_argument("--csv", type=str, help="CSV file holding the samples")
    source.add_argument(
        "--benchmark",
        action="store_true",
        help="Run every built-in target function and print a summary",
    )
    parser.add_argument("--x-column", type=str, default="x", help="Input column of --csv")
    parser.add_argument("--y-column", type=str, default="y", help="Target column of --csv")
    parser.add_argument(
        "--points", type=int, default=20, help="Samples drawn from --function (default: 20)"
    )
    parser.add_argument("--islands", type=int, help="Number of islands")
    parser.add_argument("--population", type=int, help="Individuals per island")
    parser.add_argument("--generations", type=int, help="Maximum generations")
    parser.add_argument(
        "--topology",
        type=str,
        choices=[t.value for t in MigrationTopology],
        help="Migration topology",
    )
    parser.add_argument("--seed", type=int, help="Random seed")
    parser.add_argument("--workers", type=int, help="Worker threads (default: one per island)")
    parser.add_argument(
        "--no-neural", action="store_true", help="Disable neural-guided seeding"
    )
    parser.add_argument(
        "--no-constant-opt", action="store_true", help="Disable constant optimization"
    )
    parser.add_argument(
        "--format",
        type=str,
        choices=["json", "human"],
        default="human",
        help="Output format: json (machine-readable) or human (human-readable)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Set logging level",
    )
    parser.add_argument("--log-file", type=str, help="Write logs to file")
    parser.add_argument(
        "-v", "--version", action="store_true", help="Show program version"
    )
    parser.add_argument(
        "--health-check",
        action="store_true",
        help="Run health check and verify dependencies",
    )
    return parser


def _config_from_args(args: argparse.Namespace) -> GeneticConfig:
    config = GeneticConfig()
    if args.islands is not None:
        config.n_islands = args.islands
    if args.population is not None:
        config.population_per_island = args.population
    if args.generations is not None:
        config.max_generations = args.generations
    if args.topology:
        config.topology = args.topology
    if args.seed is not None:
        config.seed = args.seed
    if args.workers is not None:
        config.max_workers = args.workers
    if args.no_neural:
        config.use_neural_guidance = False
    if args.no_constant_opt:
        config.use_constant_optimization = False
    config.validate()
    return config


def _run(args: argparse.Namespace) -> int:
    config = _config_from_args(args)
    if args.points < 0:
        raise DatasetError(f"--points must be non-negative (got {args.points})")

    if args.benchmark:
        suite = run_benchmark_suite(config=config, n_points=args.points)
        if args.format == "json":
            print(suite.to_dataframe().to_json(orient="records", indent=2))
        else:
            print(suite.summary())
        return 0

    if args.csv:
        x, y = load_xy_csv(args.csv, args.x_column, args.y_column)
        source = args.csv
    else:
        x, y = generate_dataset(args.function, n_points=args.points)
        source = f"{args.function} ({TestFunction.from_name(args.function).formula})"
    _logger.info("Fitting %d samples from %s", len(x), source)

    regressor = IslandModelRegressor(config)
    result = regressor.fit(x, y)

    res = {"ok": True, "source": source, **result.to_dict()}
    res["simplified"] = result.best.root.to_pretty_string()
    print_result_pretty(res, args.format)
    return 0


def main_entry(argv: list[str] | None = None) -> int:
    """
    Main entry point for the Archipelago CLI.

    Args:
        argv: Optional command-line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    from ..logging_config import setup_logging

    setup_logging(level=args.log_level, log_file=args.log_file)

    if args.version:
        print(VERSION)
        return 0
    if args.health_check:
        return _health_check()

    try:
        return _run(args)
    except ArchipelagoError as e:
        _logger.debug("Run failed", exc_info=True)
        if args.format == "json":
            print(json.dumps({"ok": False, "error": str(e), "code": e.code}))
        print(f"Error: {e}", file=sys.stderr)
        return 1

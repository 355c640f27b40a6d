"""Archipelago package: island-model symbolic regression engine, CLI, and benchmarks."""

from .config import VERSION

__version__ = VERSION

from . import config, logging_config, symbolic_regression, types
from .symbolic_regression import GeneticConfig
from .symbolic_regression import IslandModelRegressor
from .symbolic_regression import MigrationTopology
from .symbolic_regression import RunResult
from .symbolic_regression import discover_equation
from .types import ArchipelagoError
from .types import ConfigurationError
from .types import DatasetError
from .types import NotFittedError

__all__ = [
    "config",
    "symbolic_regression",
    "types",
    "logging_config",
    "GeneticConfig",
    "IslandModelRegressor",
    "MigrationTopology",
    "RunResult",
    "discover_equation",
    "ArchipelagoError",
    "ConfigurationError",
    "DatasetError",
    "NotFittedError",
]

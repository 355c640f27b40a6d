"""Symbolic Regression Module.

Island-model genetic programming for discovering a closed-form expression
``y = f(x)`` from samples.

Main Components:
    - ExpressionNode: Tree-based representation of mathematical expressions
    - Individual: One candidate tree with its cached scores
    - Island: Sub-population evolved with its own adaptive parameters
    - IslandModelRegressor: Orchestrates islands, migration and seeding
    - ParetoSolution: Accuracy vs complexity trade-offs of a finished run

Example:
    >>> from archipelago_pkg.symbolic_regression import discover_equation
    >>> import numpy as np
    >>> x = np.linspace(0, 10, 11)
    >>> result = discover_equation(x, x**2 + 1, max_generations=200)
    >>> print(f"Discovered: {result.expression}")
    >>> print(f"MSE: {result.mse:.6e}")
"""

from .adaptive import AdaptiveParameterController
from .annealing import SimulatedAnnealing
from .constant_optimizer import ConstantOptimizer
from .expression_tree import ExpressionNode
from .expression_tree import NodeType
from .genetic_engine import GenerationReport
from .genetic_engine import GeneticConfig
from .genetic_engine import IslandModelRegressor
from .genetic_engine import RunResult
from .genetic_engine import discover_equation
from .individual import Individual
from .island import Island
from .migration import MigrationTopology
from .migration import migrate
from .neural_guidance import ExpressionEncoder
from .neural_guidance import FitnessPredictor
from .neural_guidance import NeuralGuide
from .operators import GeneticOperators
from .pareto_front import ParetoSolution
from .pareto_front import calculate_crowding_distance
from .pareto_front import dominates
from .pareto_front import fast_non_dominated_sort
from .pareto_front import nsga2_selection
from .pareto_front import pareto_front

__all__ = [
    # Expression Trees
    "ExpressionNode",
    "NodeType",
    "Individual",
    # Genetic Operators
    "GeneticOperators",
    "ConstantOptimizer",
    "AdaptiveParameterController",
    "SimulatedAnnealing",
    # Island model
    "Island",
    "MigrationTopology",
    "migrate",
    "GeneticConfig",
    "IslandModelRegressor",
    "GenerationReport",
    "RunResult",
    "discover_equation",
    # Multi-objective selection
    "dominates",
    "fast_non_dominated_sort",
    "calculate_crowding_distance",
    "nsga2_selection",
    "pareto_front",
    "ParetoSolution",
    # Neural guidance
    "ExpressionEncoder",
    "FitnessPredictor",
    "NeuralGuide",
]

"""Gradient-descent refinement of the constant leaves of an expression."""

from __future__ import annotations

import logging

import numpy as np

from ..config import CONST_OPT_LEARNING_RATE
from ..config import CONST_OPT_MAX_ITERATIONS
from ..config import CONST_OPT_TOLERANCE
from .individual import Individual
from .individual import mean_squared_error

logger = logging.getLogger(__name__)


class ConstantOptimizer:
    """Tune every constant of a tree jointly by central-difference gradients.

    Each iteration estimates ``dMSE/dc`` for every constant ``c`` with step
    ``tolerance`` and moves ``c`` against it by ``learning_rate``. The loop
    stops after ``max_iterations`` or once the MSE changes by less than
    ``tolerance``.

    Args:
        learning_rate: Gradient step size
        max_iterations: Iteration cap
        tolerance: Finite-difference step and convergence threshold
    """

    def __init__(
        self,
        learning_rate: float = CONST_OPT_LEARNING_RATE,
        max_iterations: int = CONST_OPT_MAX_ITERATIONS,
        tolerance: float = CONST_OPT_TOLERANCE,
    ):
        self.learning_rate = learning_rate
        self.max_iterations = max_iterations
        self.tolerance = tolerance

    def optimize_constants(
        self, individual: Individual, x: np.ndarray, y: np.ndarray
    ) -> int:
        """Optimize the individual's constants in place.

        The cached fitness is recomputed afterwards with the individual's
        node count standing in for the complexity weight.

        Returns:
            Number of iterations performed (0 when the tree has no constants)
        """
        constants = individual.root.get_constants()
        if not constants:
            return 0

        root = individual.root
        iterations = 0
        for _ in range(self.max_iterations):
            iterations += 1
            current_mse = mean_squared_error(root, x, y)

            for constant in constants:
                original_value = constant.value

                constant.value = original_value + self.tolerance
                mse_plus = mean_squared_error(root, x, y)

                constant.value = original_value - self.tolerance
                mse_minus = mean_squared_error(root, x, y)

                gradient = (mse_plus - mse_minus) / (2 * self.tolerance)
                step = self.learning_rate * gradient
                constant.value = original_value - step if np.isfinite(step) else original_value

            new_mse = mean_squared_error(root, x, y)
            if abs(new_mse - current_mse) < self.tolerance:
                break

        individual.calculate_fitness(x, y, individual.complexity)
        logger.debug(
            "Optimized %d constants in %d iterations: mse=%.6g",
            len(constants),
            iterations,
            individual.mse,
        )
        return iterations

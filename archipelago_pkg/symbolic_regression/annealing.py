"""Temperature-scheduled stochastic acceptance (simulated annealing)."""

from __future__ import annotations

import math
import random

from ..config import COOLING_RATE
from ..config import INITIAL_TEMPERATURE


class SimulatedAnnealing:
    """Metropolis acceptance with geometric cooling.

    Islands currently only cool the temperature each generation; the
    acceptance test is not consulted during reproduction.
    """

    def __init__(
        self,
        initial_temperature: float = INITIAL_TEMPERATURE,
        cooling_rate: float = COOLING_RATE,
    ):
        self.initial_temperature = initial_temperature
        self.cooling_rate = cooling_rate
        self.current_temperature = initial_temperature

    def reset(self) -> None:
        self.current_temperature = self.initial_temperature

    def cool_down(self) -> float:
        self.current_temperature *= self.cooling_rate
        return self.current_temperature

    def accept(self, old_fitness: float, new_fitness: float, rng: random.Random) -> bool:
        """Always accept improvements; accept a worse fitness with
        probability ``exp((new - old) / T)``."""
        if new_fitness > old_fitness:
            return True
        if self.current_temperature <= 0:
            return False
        probability = math.exp((new_fitness - old_fitness) / self.current_temperature)
        return rng.random() < probability

"""Island: one isolated sub-population with its own parameters and RNG.

An island is only ever touched by the single task evolving it, so it needs
no locking. Cross-island exchange happens through clones handed over by the
orchestrator between generations.
"""

from __future__ import annotations

import logging
import random
from collections import deque

import numpy as np

from ..config import ADAPTATION_INTERVAL
from ..config import CROSSOVER_RATE
from ..config import FITNESS_HISTORY_SIZE
from ..config import TOURNAMENT_SIZE
from .adaptive import AdaptiveParameterController
from .annealing import SimulatedAnnealing
from .individual import Individual
from .operators import GeneticOperators

logger = logging.getLogger(__name__)


class Island:
    """A sub-population evolved generation by generation.

    Args:
        island_id: Index of the island within the archipelago
        population_size: Fixed number of individuals
        mutation_rate: Initial probability of mutating a cloned child
        complexity_weight: Initial fitness penalty per node
        initial_max_depth: Depth of the initial random trees
        seed: Seed of the island's private random streams
    """

    def __init__(
        self,
        island_id: int,
        population_size: int,
        mutation_rate: float,
        complexity_weight: float,
        initial_max_depth: int,
        seed: int | None = None,
    ):
        self.id = island_id
        self.mutation_rate = mutation_rate
        self.complexity_weight = complexity_weight
        self.initial_max_depth = initial_max_depth
        self.seed = seed if seed is not None else island_id * 1000

        self.genetic_ops = GeneticOperators(self.seed)
        self.random = self.genetic_ops.random
        self.adaptive_controller = AdaptiveParameterController(
            rng=random.Random(self.seed + 1)
        )
        self.sim_anneal = SimulatedAnnealing()
        self.recent_best_fitness: deque[float] = deque(maxlen=FITNESS_HISTORY_SIZE)
        self.generation = 0

        self.population: list[Individual] = [
            Individual(self.genetic_ops.generate_random_tree(initial_max_depth))
            for _ in range(population_size)
        ]

    @property
    def population_size(self) -> int:
        return len(self.population)

    @property
    def best(self) -> Individual:
        return max(self.population, key=lambda ind: ind.fitness)

    @property
    def worst(self) -> Individual:
        return min(self.population, key=lambda ind: ind.fitness)

    def sort_population(self) -> None:
        """Order the population by descending fitness (best first)."""
        self.population.sort(key=lambda ind: ind.fitness, reverse=True)

    def evaluate(self, x: np.ndarray, y: np.ndarray) -> None:
        for ind in self.population:
            ind.calculate_fitness(x, y, self.complexity_weight)

    def evolve_generation(
        self, x: np.ndarray, y: np.ndarray, death_rate: float, elite_count: int
    ) -> Individual:
        """Evaluate, adapt, and replace the population with the next one.

        Args:
            x: Input samples
            y: Target samples
            death_rate: Fraction of the population not eligible as elites
            elite_count: Maximum number of best individuals carried unchanged

        Returns:
            The best individual of the evaluated (outgoing) population
        """
        self.evaluate(x, y)
        self.sort_population()
        best = self.population[0]

        self.recent_best_fitness.append(best.fitness)
        self.generation += 1
        if (
            self.generation % ADAPTATION_INTERVAL == 0
            and len(self.recent_best_fitness) >= ADAPTATION_INTERVAL
        ):
            self._adapt_parameters()

        population_size = len(self.population)
        kill_count = int(np.floor(population_size * death_rate))
        survive_count = population_size - kill_count

        next_gen = [
            self.population[i].clone_with_scores()
            for i in range(min(elite_count, survive_count))
        ]

        while len(next_gen) < population_size:
            if self.random.random() < CROSSOVER_RATE:
                parent1 = self.genetic_ops.tournament_selection(self.population, TOURNAMENT_SIZE)
                parent2 = self.genetic_ops.tournament_selection(self.population, TOURNAMENT_SIZE)
                child = self.genetic_ops.crossover(parent1, parent2)
            else:
                parent = self.genetic_ops.tournament_selection(self.population, TOURNAMENT_SIZE)
                child = parent.clone()
                if self.random.random() < self.mutation_rate:
                    self.genetic_ops.apply_random_mutation(child)

            child.calculate_fitness(x, y, self.complexity_weight)
            next_gen.append(child)

        self.sim_anneal.cool_down()
        self.population = next_gen
        return best

    def _adapt_parameters(self) -> None:
        history = list(self.recent_best_fitness)
        diversity = self.adaptive_controller.measure_diversity(self.population)
        progress = self.adaptive_controller.measure_progress(history)

        old_rate, old_weight = self.mutation_rate, self.complexity_weight
        self.mutation_rate = self.adaptive_controller.adapt_mutation_rate(
            self.mutation_rate, diversity, progress
        )
        avg_complexity = float(np.mean([ind.complexity for ind in self.population]))
        self.complexity_weight = self.adaptive_controller.adapt_complexity_weight(
            self.complexity_weight, avg_complexity, self.initial_max_depth * 2
        )
        logger.debug(
            "Island %d adapted: diversity=%.3f progress=%.4g mutation %.3f->%.3f "
            "complexity weight %.3f->%.3f",
            self.id,
            diversity,
            progress,
            old_rate,
            self.mutation_rate,
            old_weight,
            self.complexity_weight,
        )

    def replace_worst(self, newcomer: Individual) -> Individual:
        """Overwrite the lowest-fitness slot; returns the evicted individual."""
        worst_index = min(
            range(len(self.population)), key=lambda i: self.population[i].fitness
        )
        evicted = self.population[worst_index]
        self.population[worst_index] = newcomer
        return evicted

    def snapshot(self) -> tuple[Individual, ...]:
        """Independent copies of the population, safe to hand to observers."""
        return tuple(ind.clone_with_scores() for ind in self.population)

    def __repr__(self) -> str:
        return (
            f"Island(id={self.id}, size={len(self.population)}, "
            f"mutation_rate={self.mutation_rate:.3f}, "
            f"complexity_weight={self.complexity_weight:.3f})"
        )

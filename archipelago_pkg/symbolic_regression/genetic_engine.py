"""Island-model Genetic Programming Symbolic Regression Engine."""

from __future__ import annotations

import concurrent.futures
import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass
from dataclasses import field
from dataclasses import replace

import numpy as np

from .. import config as defaults
from ..types import ConfigurationError
from ..types import DatasetError
from ..types import NotFittedError
from ..utils.formatting import format_progress_line
from .constant_optimizer import ConstantOptimizer
from .expression_tree import ExpressionNode
from .individual import Individual
from .island import Island
from .migration import MigrationTopology
from .migration import migrate
from .neural_guidance import NeuralGuide
from .pareto_front import ParetoSolution
from .pareto_front import pareto_front

logger = logging.getLogger(__name__)


@dataclass
class GeneticConfig:
    """Configuration for island-model symbolic regression."""

    n_islands: int = defaults.NUM_ISLANDS
    population_per_island: int = defaults.POPULATION_PER_ISLAND
    max_generations: int = defaults.MAX_GENERATIONS
    death_rate: float = defaults.DEATH_RATE
    elite_count: int = defaults.ELITE_COUNT
    initial_max_depth: int = defaults.INITIAL_MAX_DEPTH

    # Migration
    migration_interval: int = defaults.MIGRATION_INTERVAL
    migrants_per_island: int = defaults.MIGRANTS_PER_ISLAND
    topology: MigrationTopology | str = defaults.MIGRATION_TOPOLOGY

    # Neural guidance and constant optimization schedules
    use_neural_guidance: bool = defaults.USE_NEURAL_GUIDANCE
    neural_guidance_interval: int = defaults.NEURAL_GUIDANCE_INTERVAL
    neural_seed_count: int = defaults.NEURAL_SEED_COUNT
    use_constant_optimization: bool = defaults.USE_CONSTANT_OPTIMIZATION
    optimize_every_n_generations: int = defaults.OPTIMIZE_EVERY_N_GENERATIONS

    early_stop_mse: float = defaults.EARLY_STOP_MSE
    breakthrough_threshold: float = defaults.BREAKTHROUGH_THRESHOLD
    seed: int = defaults.RANDOM_SEED
    max_workers: int | None = defaults.WORKER_POOL_SIZE  # None: one worker per island
    log_interval: int = defaults.LOG_INTERVAL
    verbose: bool = True

    def validate(self) -> None:
        """Check ranges; raises ConfigurationError on the first violation."""
        try:
            self.topology = MigrationTopology.parse(self.topology)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        checks = [
            (self.n_islands >= 1, "n_islands must be at least 1"),
            (self.population_per_island >= 1, "population_per_island must be at least 1"),
            (self.max_generations >= 0, "max_generations must be non-negative"),
            (0.0 <= self.death_rate <= 1.0, "death_rate must be within [0, 1]"),
            (self.elite_count >= 0, "elite_count must be non-negative"),
            (self.initial_max_depth >= 0, "initial_max_depth must be non-negative"),
            (self.migration_interval >= 1, "migration_interval must be at least 1"),
            (
                0 <= self.migrants_per_island <= self.population_per_island,
                "migrants_per_island must be within [0, population_per_island]",
            ),
            (self.neural_guidance_interval >= 1, "neural_guidance_interval must be at least 1"),
            (self.neural_seed_count >= 0, "neural_seed_count must be non-negative"),
            (
                self.optimize_every_n_generations >= 1,
                "optimize_every_n_generations must be at least 1",
            ),
            (self.max_workers is None or self.max_workers >= 1, "max_workers must be at least 1"),
            (self.log_interval >= 1, "log_interval must be at least 1"),
        ]
        for ok, message in checks:
            if not ok:
                raise ConfigurationError(message)


@dataclass(frozen=True)
class GenerationReport:
    """Read-only view of one finished generation, handed to observers.

    All individuals are clones; changing them does not affect the run.
    """

    generation: int
    best: Individual
    island_populations: tuple[tuple[Individual, ...], ...]
    mutation_rates: tuple[float, ...]
    complexity_weights: tuple[float, ...]
    temperatures: tuple[float, ...]
    breakthrough: bool


@dataclass
class RunResult:
    """Outcome of a completed run."""

    best: Individual
    expression: str
    generations: int
    early_stopped: bool
    mse_history: list[float] = field(default_factory=list)
    pareto_front: list[ParetoSolution] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def mse(self) -> float:
        return self.best.mse

    @property
    def complexity(self) -> int:
        return self.best.complexity

    def to_dict(self) -> dict:
        return {
            "expression": self.expression,
            "mse": self.best.mse,
            "fitness": self.best.fitness,
            "complexity": self.best.complexity,
            "generations": self.generations,
            "early_stopped": self.early_stopped,
            "elapsed_seconds": self.elapsed_seconds,
            "pareto_front": [s.to_dict() for s in self.pareto_front],
        }


GenerationObserver = Callable[[GenerationReport], None]


class IslandModelRegressor:
    """Island-model Genetic Programming Symbolic Regression Engine.

    Evolves several heterogeneous islands in parallel, exchanges migrants
    between them, periodically injects neural-guided seeds and refines the
    constants of the global best.

    Example:
        >>> regressor = IslandModelRegressor(GeneticConfig(max_generations=50))
        >>> x = np.linspace(0, 10, 11)
        >>> result = regressor.fit(x, x**2)
        >>> print(result.expression)
    """

    def __init__(self, config: GeneticConfig | None = None):
        """Initialize the regressor.

        Args:
            config: Configuration object (uses defaults if None)
        """
        self.config = config or GeneticConfig()
        self.config.validate()

        self.islands: list[Island] = []
        self.best_individual: Individual | None = None
        self.generation: int = 0
        self.result: RunResult | None = None
        self.neural_guide: NeuralGuide | None = None
        self.constant_optimizer = ConstantOptimizer()
        self._observers: list[GenerationObserver] = []

    def add_observer(self, callback: GenerationObserver) -> None:
        """Register a callback invoked with a GenerationReport after every generation."""
        self._observers.append(callback)

    def remove_observer(self, callback: GenerationObserver) -> None:
        self._observers.remove(callback)

    def _initialize_islands(self) -> list[Island]:
        cfg = self.config
        islands = []
        for i in range(cfg.n_islands):
            islands.append(
                Island(
                    island_id=i,
                    population_size=cfg.population_per_island,
                    mutation_rate=defaults.BASE_MUTATION_RATE + i * defaults.MUTATION_RATE_STEP,
                    complexity_weight=(
                        defaults.BASE_COMPLEXITY_WEIGHT + i * defaults.COMPLEXITY_WEIGHT_STEP
                    ),
                    initial_max_depth=cfg.initial_max_depth + (i % 2),
                    seed=cfg.seed + i * 1000,
                )
            )
        return islands

    @staticmethod
    def _prepare_data(x, y) -> tuple[np.ndarray, np.ndarray]:
        try:
            x = np.asarray(x, dtype=float).ravel()
            y = np.asarray(y, dtype=float).ravel()
        except (TypeError, ValueError) as e:
            raise DatasetError(f"x and y must be numeric: {e}") from e
        if len(x) != len(y):
            raise DatasetError(f"x and y must have equal length (got {len(x)} and {len(y)})")
        return x, y

    def _global_best(self) -> Individual:
        """Best island-local best; each island is left sorted best-first."""
        best = None
        for island in self.islands:
            island.sort_population()
            if best is None or island.population[0].fitness > best.fitness:
                best = island.population[0]
        return best

    def _inject_seed_trees(self, seed_trees: list[ExpressionNode]) -> None:
        for island in self.islands:
            size = len(island.population)
            for j, tree in enumerate(seed_trees[:size]):
                island.population[size - 1 - j] = Individual(tree.copy_subtree())
        logger.debug(
            "Seeded %d expressions into each island",
            min(len(seed_trees), self.config.population_per_island),
        )

    def _inject_neural_seeds(self, x: np.ndarray, y: np.ndarray) -> None:
        all_population = [ind for island in self.islands for ind in island.population]
        self.neural_guide.train_on_population(all_population)

        seeds = self.neural_guide.generate_promising_seeds(
            self.config.neural_seed_count, self.config.initial_max_depth
        )
        # Predicted fitness is only a ranking; score seeds for real before insertion
        weight = self.islands[0].complexity_weight
        for seed in seeds:
            seed.calculate_fitness(x, y, weight)

        for i, seed in enumerate(seeds):
            self.islands[i % len(self.islands)].replace_worst(seed)
        logger.debug("Injected %d neural-guided seeds", len(seeds))

    def _notify(self, report: GenerationReport) -> None:
        for callback in list(self._observers):
            try:
                callback(report)
            except Exception:
                logger.warning("Generation observer %r failed", callback, exc_info=True)

    def _report(self, generation: int, best: Individual, breakthrough: bool) -> GenerationReport:
        return GenerationReport(
            generation=generation,
            best=best.clone_with_scores(),
            island_populations=tuple(island.snapshot() for island in self.islands),
            mutation_rates=tuple(island.mutation_rate for island in self.islands),
            complexity_weights=tuple(island.complexity_weight for island in self.islands),
            temperatures=tuple(
                island.sim_anneal.current_temperature for island in self.islands
            ),
            breakthrough=breakthrough,
        )

    def fit(self, x, y, seed_trees: list[ExpressionNode] | None = None) -> RunResult:
        """Evolve expressions fitting ``y = f(x)``.

        Args:
            x: Input samples (1-D)
            y: Target samples, same length as ``x``
            seed_trees: Known expressions copied into the worst initial slots
                of every island

        Returns:
            RunResult with the global best and the final Pareto front

        Raises:
            DatasetError: If x and y are not equal-length numeric sequences
        """
        x, y = self._prepare_data(x, y)
        cfg = self.config
        cfg.validate()

        self.islands = self._initialize_islands()
        if seed_trees:
            self._inject_seed_trees(seed_trees)
        self.neural_guide = (
            NeuralGuide(seed=cfg.seed + 99) if cfg.use_neural_guidance else None
        )
        migration_rng = random.Random(cfg.seed + 7)
        self.best_individual = None
        self.result = None

        # Scored up front so a zero-generation run still reports a best
        for island in self.islands:
            island.evaluate(x, y)

        if cfg.verbose:
            logger.info(
                "Starting evolution with %d islands, %d individuals each (%d samples)",
                cfg.n_islands,
                cfg.population_per_island,
                len(x),
            )

        best = self._global_best()
        previous_best_fitness: float | None = None
        mse_history: list[float] = []
        early_stopped = False
        generations_run = 0
        start_time = time.time()
        workers = cfg.max_workers or cfg.n_islands

        with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
            for gen in range(cfg.max_generations):
                self.generation = gen

                futures = [
                    executor.submit(
                        island.evolve_generation, x, y, cfg.death_rate, cfg.elite_count
                    )
                    for island in self.islands
                ]
                # Barrier: everything below sees quiescent islands
                for future in futures:
                    future.result()

                if gen > 0 and gen % cfg.migration_interval == 0:
                    migrate(self.islands, cfg.migrants_per_island, cfg.topology, migration_rng)

                best = self._global_best()

                if (
                    self.neural_guide is not None
                    and gen > 0
                    and gen % cfg.neural_guidance_interval == 0
                ):
                    self._inject_neural_seeds(x, y)

                # Compared on island scoring; the optimizer rescores with its own weight
                breakthrough = (
                    previous_best_fitness is not None
                    and best.fitness > previous_best_fitness + cfg.breakthrough_threshold
                )
                if breakthrough and cfg.verbose:
                    logger.info(
                        "Breakthrough at generation %d: fitness improved by %.4f",
                        gen,
                        best.fitness - previous_best_fitness,
                    )
                previous_best_fitness = best.fitness

                if (
                    cfg.use_constant_optimization
                    and gen > 0
                    and gen % cfg.optimize_every_n_generations == 0
                ):
                    self.constant_optimizer.optimize_constants(best, x, y)

                self.best_individual = best.clone_with_scores()
                mse_history.append(best.mse)
                generations_run = gen + 1

                if self._observers:
                    self._notify(self._report(gen, best, breakthrough))

                if cfg.verbose and gen % cfg.log_interval == 0:
                    logger.info(
                        "%s",
                        format_progress_line(gen, best.mse, best.complexity, best.expression),
                    )

                if best.mse < cfg.early_stop_mse:
                    early_stopped = True
                    if cfg.verbose:
                        logger.info("Perfect solution found at generation %d", gen)
                    break

        if self.best_individual is None:
            # Zero generations: report the best of the initial populations
            self.best_individual = best.clone_with_scores()

        all_population = [ind for island in self.islands for ind in island.population]
        self.result = RunResult(
            best=self.best_individual,
            expression=self.best_individual.expression,
            generations=generations_run,
            early_stopped=early_stopped,
            mse_history=mse_history,
            pareto_front=pareto_front(all_population),
            elapsed_seconds=time.time() - start_time,
        )

        if cfg.verbose:
            logger.info(
                "Final result: f(x) = %s  MSE: %.8g  Complexity: %d",
                self.result.expression,
                self.result.mse,
                self.result.complexity,
            )
        return self.result

    def predict(self, x) -> np.ndarray:
        """Evaluate the best evolved expression.

        Args:
            x: Input samples

        Returns:
            Predictions, shaped like ``x``
        """
        if self.best_individual is None:
            raise NotFittedError("Model not fitted. Call fit() first.")
        return np.asarray(self.best_individual.evaluate(np.asarray(x, dtype=float)))

    def get_expression(self) -> str:
        if self.best_individual is None:
            raise NotFittedError("Model not fitted. Call fit() first.")
        return self.best_individual.expression


def discover_equation(
    x,
    y,
    config: GeneticConfig | None = None,
    seed_trees: list[ExpressionNode] | None = None,
    **overrides,
) -> RunResult:
    """Convenience function to discover an equation from data.

    Args:
        x: Input samples
        y: Target samples
        config: Base configuration (defaults if None)
        seed_trees: Known expressions to start every island with
        **overrides: GeneticConfig fields to replace, e.g. ``max_generations=200``

    Returns:
        RunResult of the run
    """
    base = config or GeneticConfig()
    try:
        run_config = replace(base, **overrides)
    except TypeError as e:
        raise ConfigurationError(str(e)) from e

    regressor = IslandModelRegressor(run_config)
    return regressor.fit(x, y, seed_trees)

"""Centralized configuration for Archipelago.

This module defines:
- Island model defaults (island count, population size, generation cap)
- Migration and reproduction parameters
- Adaptive parameter controller bounds
- Neural guidance and constant optimization schedules
- Worker pool sizing for parallel island evolution

Configuration can be overridden via:
- CLI flags (see cli/app.py)
- Environment variables (prefixed with ARCHIPELAGO_)
"""

import os
import sys

VERSION = "0.4.0"

# Island model
NUM_ISLANDS = int(os.getenv("ARCHIPELAGO_NUM_ISLANDS", "4"))
POPULATION_PER_ISLAND = int(os.getenv("ARCHIPELAGO_POPULATION_PER_ISLAND", "250"))
MAX_GENERATIONS = int(os.getenv("ARCHIPELAGO_MAX_GENERATIONS", "1000"))
DEATH_RATE = float(os.getenv("ARCHIPELAGO_DEATH_RATE", "0.7"))
ELITE_COUNT = int(os.getenv("ARCHIPELAGO_ELITE_COUNT", "5"))
INITIAL_MAX_DEPTH = int(os.getenv("ARCHIPELAGO_INITIAL_MAX_DEPTH", "4"))
RANDOM_SEED = int(os.getenv("ARCHIPELAGO_RANDOM_SEED", "0"))

# Heterogeneous island starting parameters: base + step * island_id
BASE_MUTATION_RATE = float(os.getenv("ARCHIPELAGO_BASE_MUTATION_RATE", "0.7"))
MUTATION_RATE_STEP = float(os.getenv("ARCHIPELAGO_MUTATION_RATE_STEP", "0.05"))
BASE_COMPLEXITY_WEIGHT = float(
    os.getenv("ARCHIPELAGO_BASE_COMPLEXITY_WEIGHT", "1.0")
)
COMPLEXITY_WEIGHT_STEP = float(
    os.getenv("ARCHIPELAGO_COMPLEXITY_WEIGHT_STEP", "0.5")
)

# Migration
MIGRATION_INTERVAL = int(os.getenv("ARCHIPELAGO_MIGRATION_INTERVAL", "20"))
MIGRANTS_PER_ISLAND = int(os.getenv("ARCHIPELAGO_MIGRANTS_PER_ISLAND", "3"))
MIGRATION_TOPOLOGY = os.getenv(
    "ARCHIPELAGO_MIGRATION_TOPOLOGY", "ring"
)  # "ring", "fully_connected", "star", "random"

# Reproduction
TOURNAMENT_SIZE = int(os.getenv("ARCHIPELAGO_TOURNAMENT_SIZE", "5"))
CROSSOVER_RATE = float(os.getenv("ARCHIPELAGO_CROSSOVER_RATE", "0.7"))
CONSTANT_RANGE = float(os.getenv("ARCHIPELAGO_CONSTANT_RANGE", "10"))
MUTATION_STRENGTH = float(os.getenv("ARCHIPELAGO_MUTATION_STRENGTH", "1.0"))
SUBTREE_MUTATION_DEPTH = int(os.getenv("ARCHIPELAGO_SUBTREE_MUTATION_DEPTH", "3"))
FITNESS_HISTORY_SIZE = int(os.getenv("ARCHIPELAGO_FITNESS_HISTORY_SIZE", "20"))
ADAPTATION_INTERVAL = int(os.getenv("ARCHIPELAGO_ADAPTATION_INTERVAL", "5"))

# Adaptive parameter controller bounds
MIN_MUTATION_RATE = float(os.getenv("ARCHIPELAGO_MIN_MUTATION_RATE", "0.3"))
MAX_MUTATION_RATE = float(os.getenv("ARCHIPELAGO_MAX_MUTATION_RATE", "0.95"))
MIN_COMPLEXITY_WEIGHT = float(os.getenv("ARCHIPELAGO_MIN_COMPLEXITY_WEIGHT", "0.5"))
MAX_COMPLEXITY_WEIGHT = float(os.getenv("ARCHIPELAGO_MAX_COMPLEXITY_WEIGHT", "5.0"))
DIVERSITY_SAMPLES = int(os.getenv("ARCHIPELAGO_DIVERSITY_SAMPLES", "50"))

# Simulated annealing
INITIAL_TEMPERATURE = float(os.getenv("ARCHIPELAGO_INITIAL_TEMPERATURE", "1.0"))
COOLING_RATE = float(os.getenv("ARCHIPELAGO_COOLING_RATE", "0.995"))

# Constant optimizer (central-difference gradient descent)
CONST_OPT_LEARNING_RATE = float(
    os.getenv("ARCHIPELAGO_CONST_OPT_LEARNING_RATE", "0.01")
)
CONST_OPT_MAX_ITERATIONS = int(
    os.getenv("ARCHIPELAGO_CONST_OPT_MAX_ITERATIONS", "100")
)
CONST_OPT_TOLERANCE = float(os.getenv("ARCHIPELAGO_CONST_OPT_TOLERANCE", "1e-6"))
USE_CONSTANT_OPTIMIZATION = (
    os.getenv("ARCHIPELAGO_USE_CONSTANT_OPTIMIZATION", "true").lower() == "true"
)
OPTIMIZE_EVERY_N_GENERATIONS = int(
    os.getenv("ARCHIPELAGO_OPTIMIZE_EVERY_N_GENERATIONS", "50")
)

# Neural guidance
USE_NEURAL_GUIDANCE = (
    os.getenv("ARCHIPELAGO_USE_NEURAL_GUIDANCE", "true").lower() == "true"
)
NEURAL_GUIDANCE_INTERVAL = int(
    os.getenv("ARCHIPELAGO_NEURAL_GUIDANCE_INTERVAL", "50")
)
NEURAL_SEED_COUNT = int(os.getenv("ARCHIPELAGO_NEURAL_SEED_COUNT", "10"))
NEURAL_ENCODING_DIM = int(os.getenv("ARCHIPELAGO_NEURAL_ENCODING_DIM", "32"))
NEURAL_HIDDEN_SIZE = int(os.getenv("ARCHIPELAGO_NEURAL_HIDDEN_SIZE", "64"))
NEURAL_LEARNING_RATE = float(os.getenv("ARCHIPELAGO_NEURAL_LEARNING_RATE", "0.01"))
NEURAL_TRAINING_EPOCHS = int(os.getenv("ARCHIPELAGO_NEURAL_TRAINING_EPOCHS", "50"))
NEURAL_MIN_TRAINING_EXAMPLES = int(
    os.getenv("ARCHIPELAGO_NEURAL_MIN_TRAINING_EXAMPLES", "100")
)  # Training starts once the log holds more than this many examples
NEURAL_TRAINING_WINDOW = int(
    os.getenv("ARCHIPELAGO_NEURAL_TRAINING_WINDOW", "1000")
)  # Most recent examples replayed per training call
ENCODER_NOISE_SEED = 42
PREDICTOR_WEIGHT_SEED = 123

# Termination and reporting
EARLY_STOP_MSE = float(os.getenv("ARCHIPELAGO_EARLY_STOP_MSE", "0.001"))
BREAKTHROUGH_THRESHOLD = float(
    os.getenv("ARCHIPELAGO_BREAKTHROUGH_THRESHOLD", "0.1")
)
LOG_INTERVAL = int(os.getenv("ARCHIPELAGO_LOG_INTERVAL", "10"))

# Worker pool (None means one worker per island)
_pool_size = os.getenv("ARCHIPELAGO_WORKER_POOL_SIZE")
WORKER_POOL_SIZE = int(_pool_size) if _pool_size else None

# Worst possible mean squared error, assigned when no sample is usable
MAX_MSE = sys.float_info.max

OUTPUT_PRECISION = int(os.getenv("ARCHIPELAGO_OUTPUT_PRECISION", "6"))

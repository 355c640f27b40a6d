"""Neural fitness prediction used to seed islands with promising trees.

Components:
    - ExpressionEncoder: fixed-length feature vector of a tree
    - FitnessPredictor: one-hidden-layer ReLU regressor trained online
    - TrainingExample: one logged (encoding, scores) observation
    - NeuralGuide: owns the log, trains the predictor, ranks random trees

The predictor is a surrogate: it only ranks freshly generated candidates.
Callers must compute each seed's real fitness before it enters a population.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass

import numpy as np

from ..config import ENCODER_NOISE_SEED
from ..config import MAX_MSE
from ..config import NEURAL_ENCODING_DIM
from ..config import NEURAL_HIDDEN_SIZE
from ..config import NEURAL_LEARNING_RATE
from ..config import NEURAL_MIN_TRAINING_EXAMPLES
from ..config import NEURAL_TRAINING_EPOCHS
from ..config import NEURAL_TRAINING_WINDOW
from ..config import PREDICTOR_WEIGHT_SEED
from .expression_tree import ExpressionNode
from .expression_tree import NodeType
from .individual import Individual
from .operators import GeneticOperators

logger = logging.getLogger(__name__)

# Feature layout
NUM_NODE_TYPES = len(NodeType)
OP_COUNT_OFFSET = 6
NOISE_OFFSET = OP_COUNT_OFFSET + NUM_NODE_TYPES


class ExpressionEncoder:
    """Encode a tree into a vector of ``dimension`` features.

    Layout: ``[0]`` node count / 50, ``[1]`` max depth / 10 (root at depth
    0), ``[2]`` constant count / 20, ``[3:6]`` mean/max/min constant / 10
    (zero without constants), ``[6:18]`` per-tag counts / 10 in
    ``NodeType`` order, and the remaining slots small noise in ``[0, 0.1)``
    drawn from the encoder's own seeded stream.
    """

    def __init__(self, dimension: int = NEURAL_ENCODING_DIM, seed: int = ENCODER_NOISE_SEED):
        self.dimension = dimension
        self.random = random.Random(seed)

    def encode(self, node: ExpressionNode) -> np.ndarray:
        encoding = np.zeros(self.dimension, dtype=float)

        node_types: list[NodeType] = []
        constants: list[float] = []
        max_depth = self._collect_features(node, node_types, constants, 0)

        encoding[0] = len(node_types) / 50.0
        encoding[1] = max_depth / 10.0
        encoding[2] = len(constants) / 20.0

        if constants:
            encoding[3] = (sum(constants) / len(constants)) / 10.0
            encoding[4] = max(constants) / 10.0
            encoding[5] = min(constants) / 10.0

        op_counts = [0] * NUM_NODE_TYPES
        for node_type in node_types:
            op_counts[node_type.value] += 1
        for i in range(min(NUM_NODE_TYPES, self.dimension - OP_COUNT_OFFSET)):
            encoding[OP_COUNT_OFFSET + i] = op_counts[i] / 10.0

        for i in range(NOISE_OFFSET, self.dimension):
            encoding[i] = self.random.random() * 0.1

        return encoding

    def _collect_features(
        self,
        node: ExpressionNode,
        node_types: list[NodeType],
        constants: list[float],
        depth: int,
    ) -> int:
        node_types.append(node.node_type)
        if node.node_type == NodeType.CONSTANT:
            constants.append(node.value)
        max_depth = depth
        for child in node.children:
            max_depth = max(
                max_depth, self._collect_features(child, node_types, constants, depth + 1)
            )
        return max_depth


@dataclass
class TrainingExample:
    """One observed individual: its encoding and the scores it earned."""

    encoding: np.ndarray
    fitness: float
    mse: float
    complexity: float


class FitnessPredictor:
    """Feed-forward regressor: input -> ReLU hidden layer -> linear output.

    Weights are drawn uniformly from ``[-1, 1)`` and scaled by
    ``sqrt(2 / fan_in)``; biases start at zero.
    """

    def __init__(
        self,
        input_size: int = NEURAL_ENCODING_DIM,
        hidden_size: int = NEURAL_HIDDEN_SIZE,
        seed: int = PREDICTOR_WEIGHT_SEED,
    ):
        self.input_size = input_size
        self.hidden_size = hidden_size
        self.rng = np.random.default_rng(seed)

        scale = math.sqrt(2.0 / input_size)
        self.weights_input_hidden = self.rng.uniform(-1.0, 1.0, (input_size, hidden_size)) * scale
        self.bias_hidden = np.zeros(hidden_size)

        scale = math.sqrt(2.0 / hidden_size)
        self.weights_hidden_output = self.rng.uniform(-1.0, 1.0, hidden_size) * scale
        self.bias_output = 0.0

    def _hidden(self, inputs: np.ndarray) -> np.ndarray:
        return np.maximum(inputs @ self.weights_input_hidden + self.bias_hidden, 0.0)

    def predict(self, inputs: np.ndarray) -> float | np.ndarray:
        """Predict for one encoding (returns float) or a batch (returns array)."""
        inputs = np.asarray(inputs, dtype=float)
        output = self._hidden(inputs) @ self.weights_hidden_output + self.bias_output
        if inputs.ndim == 1:
            return float(output)
        return output

    def train(
        self,
        encodings: np.ndarray,
        targets: np.ndarray,
        epochs: int = NEURAL_TRAINING_EPOCHS,
        learning_rate: float = NEURAL_LEARNING_RATE,
    ) -> list[float]:
        """Online gradient descent on squared error, one example at a time.

        The output layer is updated first; the input layer then follows the
        ReLU-gated error propagated through the updated output weights.

        Returns:
            Mean squared loss of each epoch
        """
        encodings = np.asarray(encodings, dtype=float)
        targets = np.asarray(targets, dtype=float)
        losses = []

        for epoch in range(epochs):
            total_loss = 0.0
            for encoding, target in zip(encodings, targets):
                hidden = self._hidden(encoding)
                prediction = hidden @ self.weights_hidden_output + self.bias_output
                error = target - prediction
                total_loss += error * error

                self.weights_hidden_output += learning_rate * error * hidden
                self.bias_output += learning_rate * error

                gate = (hidden > 0).astype(float)
                self.weights_input_hidden += learning_rate * error * np.outer(
                    encoding, self.weights_hidden_output * gate
                )

            epoch_loss = total_loss / max(len(targets), 1)
            losses.append(float(epoch_loss))
            if epoch % 10 == 0:
                logger.debug("Neural training epoch %d, loss: %.4f", epoch, epoch_loss)

        return losses


def compress_fitness(fitness: float) -> float:
    """Map a (non-positive) fitness onto a log scale the network can fit."""
    return -math.log1p(max(-fitness, 0.0))


def expand_fitness(target: float) -> float:
    """Inverse of :func:`compress_fitness`."""
    return -math.expm1(min(-target, 700.0))


class NeuralGuide:
    """Learn fitness from observed individuals and propose seeds.

    Args:
        encoding_dim: Encoder output length and predictor input size
        hidden_size: Hidden layer width
        learning_rate: Predictor learning rate
        epochs: Passes over the training window per training call
        min_examples: Training starts once the log holds more examples
        training_window: Most recent examples used per training call
        seed: Seed for the guide's own random tree generator
    """

    def __init__(
        self,
        encoding_dim: int = NEURAL_ENCODING_DIM,
        hidden_size: int = NEURAL_HIDDEN_SIZE,
        learning_rate: float = NEURAL_LEARNING_RATE,
        epochs: int = NEURAL_TRAINING_EPOCHS,
        min_examples: int = NEURAL_MIN_TRAINING_EXAMPLES,
        training_window: int = NEURAL_TRAINING_WINDOW,
        seed: int | None = None,
    ):
        self.encoder = ExpressionEncoder(encoding_dim)
        self.predictor = FitnessPredictor(encoding_dim, hidden_size)
        self.learning_rate = learning_rate
        self.epochs = epochs
        self.min_examples = min_examples
        self.training_window = training_window
        self.training_data: list[TrainingExample] = []
        self.genetic_ops = GeneticOperators(seed)
        self.is_trained = False

    def train_on_population(self, population: list[Individual]) -> bool:
        """Log every individual and retrain once enough examples exist.

        Individuals carrying the worst-case MSE sentinel are logged but left
        out of training.

        Returns:
            True if the predictor was trained by this call
        """
        for ind in population:
            self.training_data.append(
                TrainingExample(
                    encoding=self.encoder.encode(ind.root),
                    fitness=ind.fitness,
                    mse=ind.mse,
                    complexity=ind.complexity,
                )
            )

        if len(self.training_data) <= self.min_examples:
            return False

        window = [
            ex
            for ex in self.training_data[-self.training_window:]
            if ex.mse < MAX_MSE and math.isfinite(ex.fitness)
        ]
        if not window:
            return False

        encodings = np.stack([ex.encoding for ex in window])
        targets = np.array([compress_fitness(ex.fitness) for ex in window])
        losses = self.predictor.train(encodings, targets, self.epochs, self.learning_rate)
        self.is_trained = True
        logger.debug(
            "Neural predictor trained on %d examples (log size %d), final loss %.4f",
            len(window),
            len(self.training_data),
            losses[-1] if losses else float("nan"),
        )
        return True

    def predict_fitness(self, node: ExpressionNode) -> float:
        return expand_fitness(self.predictor.predict(self.encoder.encode(node)))

    def generate_promising_seeds(self, count: int, max_depth: int) -> list[Individual]:
        """Rank ``count * 10`` random trees by predicted fitness, keep ``count``.

        Each returned individual carries its *predicted* fitness only.
        """
        if count <= 0:
            return []

        candidates = [
            Individual(self.genetic_ops.generate_random_tree(max_depth))
            for _ in range(count * 10)
        ]
        encodings = np.stack([self.encoder.encode(c.root) for c in candidates])
        predictions = self.predictor.predict(encodings)
        for candidate, predicted in zip(candidates, predictions):
            value = float(predicted)
            candidate.fitness = expand_fitness(value) if math.isfinite(value) else float("-inf")

        candidates.sort(key=lambda ind: ind.fitness, reverse=True)
        seeds = candidates[:count]
        logger.debug("Neural guidance generated %d promising seeds", len(seeds))
        return seeds

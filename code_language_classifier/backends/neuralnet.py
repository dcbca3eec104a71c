"""
Feedforward neural network with one tanh hidden layer and one output unit per label.

Inputs are length-normalized frequencies standardized with the training mean
and standard deviation; both are stored with the weights.
"""

import logging
import warnings
from typing import List, Optional

import numpy as np
from sklearn.exceptions import ConvergenceWarning
from sklearn.neural_network import MLPClassifier

from ..codec import ModelReader, ModelWriter
from ..config import NeuralNetConfig
from ..exceptions import DecodeError, TrainingFailure
from ..features import normalize_rows, standardization
from ..models.data_models import SampleCorpus, Vocabulary
from .base import VocabularyClassifier

logger = logging.getLogger(__name__)


class NeuralNetClassifier(VocabularyClassifier):
    """Two-layer network classifier."""

    MAGIC = b"NNT\x01"

    def __init__(self, vocabulary: Vocabulary, labels: List[str],
                 mean: np.ndarray, std: np.ndarray,
                 hidden_weights: np.ndarray, hidden_biases: np.ndarray,
                 output_weights: np.ndarray, output_biases: np.ndarray):
        super().__init__(vocabulary, labels)
        self._mean = np.array(mean, dtype=float)
        self._std = np.array(std, dtype=float)
        self._hidden_weights = np.array(hidden_weights, dtype=float)
        self._hidden_biases = np.array(hidden_biases, dtype=float)
        self._output_weights = np.array(output_weights, dtype=float)
        self._output_biases = np.array(output_biases, dtype=float)

    @property
    def hidden_size(self) -> int:
        return self._hidden_biases.shape[0]

    def scores(self, features: np.ndarray) -> np.ndarray:
        """Output layer activations (before the output nonlinearity) for length-normalized features."""
        inputs = (features - self._mean) / self._std
        hidden = np.tanh(inputs @ self._hidden_weights + self._hidden_biases)
        return hidden @ self._output_weights + self._output_biases

    def _predict(self, features: np.ndarray) -> int:
        return int(np.argmax(self.scores(features)))

    def _write_parameters(self, writer: ModelWriter) -> None:
        writer.write_uint(self.hidden_size)
        writer.write_array(self._mean)
        writer.write_array(self._std)
        writer.write_array(self._hidden_weights)
        writer.write_array(self._hidden_biases)
        writer.write_array(self._output_weights)
        writer.write_array(self._output_biases)

    @classmethod
    def _read_parameters(cls, reader: ModelReader, vocabulary: Vocabulary,
                         labels: List[str]) -> 'NeuralNetClassifier':
        inputs = len(vocabulary)
        hidden = reader.read_uint()
        if hidden == 0:
            raise DecodeError("Network has no hidden units")
        mean = reader.read_array((inputs,))
        std = reader.read_array((inputs,))
        if np.any(std <= 0):
            raise DecodeError("Network standard deviations must be positive")
        return cls(
            vocabulary,
            labels,
            mean,
            std,
            reader.read_array((inputs, hidden)),
            reader.read_array((hidden,)),
            reader.read_array((hidden, len(labels))),
            reader.read_array((len(labels),)),
        )


def train(corpus: SampleCorpus, config: Optional[NeuralNetConfig] = None) -> NeuralNetClassifier:
    """
    Train a network with scikit-learn's MLPClassifier and copy out its weights.

    The Adam solver starts from a seeded generator and runs for at most the
    configured number of epochs, so the result is deterministic for a given
    corpus and configuration. A single-language corpus needs no fitting.

    Args:
        corpus: Training corpus, usually reduced to a vocabulary
        config: Network settings (defaults to the global configuration)

    Returns:
        Trained network classifier

    Raises:
        TrainingFailure: If the solver fails or the weights diverge to non-finite values
    """
    if config is None:
        from ..config import config as global_config
        config = global_config.neuralnet

    counts, targets, labels, vocabulary = corpus.to_arrays()
    features = normalize_rows(counts)
    mean, std = standardization(features)

    if len(labels) == 1:
        return NeuralNetClassifier(
            vocabulary, labels, mean, std,
            np.zeros((len(vocabulary), config.hidden_size)), np.zeros(config.hidden_size),
            np.zeros((config.hidden_size, 1)), np.zeros(1),
        )

    estimator = MLPClassifier(
        hidden_layer_sizes=(config.hidden_size,),
        activation="tanh",
        solver="adam",
        learning_rate_init=config.learning_rate,
        max_iter=config.iterations,
        random_state=config.seed,
    )
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", ConvergenceWarning)
            estimator.fit((features - mean) / std, targets)
    except ValueError as e:
        raise TrainingFailure(f"Network training failed: {e}") from e
    if estimator.n_iter_ >= config.iterations:
        logger.warning(f"MLPClassifier did not converge within {config.iterations} epochs")

    hidden_weights, output_weights = estimator.coefs_
    hidden_biases, output_biases = estimator.intercepts_
    if output_weights.shape[1] == 1:
        # Two labels share one logistic unit that scores the second against the first
        output_weights = np.hstack([np.zeros_like(output_weights), output_weights])
        output_biases = np.concatenate([np.zeros(1), output_biases])

    parameters = (hidden_weights, hidden_biases, output_weights, output_biases)
    if not all(np.all(np.isfinite(p)) for p in parameters):
        raise TrainingFailure("Network weights diverged; try a smaller learning rate")

    logger.debug(f"Trained network with {config.hidden_size} hidden units on {len(targets)} samples")
    return NeuralNetClassifier(vocabulary, labels, mean, std, *parameters)


def decode(data: bytes) -> NeuralNetClassifier:
    return NeuralNetClassifier.decode(data)

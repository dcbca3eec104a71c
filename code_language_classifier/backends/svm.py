"""
One-vs-rest linear support vector machines.

Each label gets a hinge-loss hyperplane over length-normalized frequencies
scaled by their training maximum, with a constant bias feature appended.
"""

import logging
import warnings
from typing import List, Optional

import numpy as np
from sklearn.exceptions import ConvergenceWarning
from sklearn.svm import LinearSVC

from ..codec import ModelReader, ModelWriter
from ..config import SVMConfig
from ..exceptions import DecodeError, TrainingFailure
from ..features import column_scale, normalize_rows
from ..models.data_models import SampleCorpus, Vocabulary
from .base import VocabularyClassifier

logger = logging.getLogger(__name__)


class SVMClassifier(VocabularyClassifier):
    """Picks the label whose hyperplane scores a sample highest."""

    MAGIC = b"SVM\x01"

    def __init__(self, vocabulary: Vocabulary, labels: List[str],
                 scale: np.ndarray, weights: np.ndarray):
        super().__init__(vocabulary, labels)
        self._scale = np.array(scale, dtype=float)
        # One row per label; the last column is the bias
        self._weights = np.array(weights, dtype=float)

    def scores(self, features: np.ndarray) -> np.ndarray:
        """Hyperplane score of every label for length-normalized features."""
        augmented = np.append(features / self._scale, 1.0)
        return self._weights @ augmented

    def _predict(self, features: np.ndarray) -> int:
        return int(np.argmax(self.scores(features)))

    def _write_parameters(self, writer: ModelWriter) -> None:
        writer.write_array(self._scale)
        writer.write_array(self._weights)

    @classmethod
    def _read_parameters(cls, reader: ModelReader, vocabulary: Vocabulary,
                         labels: List[str]) -> 'SVMClassifier':
        scale = reader.read_array((len(vocabulary),))
        if np.any(scale <= 0):
            raise DecodeError("Feature scales must be positive")
        weights = reader.read_array((len(labels), len(vocabulary) + 1))
        return cls(vocabulary, labels, scale, weights)


def train(corpus: SampleCorpus, config: Optional[SVMConfig] = None) -> SVMClassifier:
    """
    Fit one hyperplane per label against all other labels with scikit-learn's LinearSVC.

    The intercept is fitted as a regularized constant feature and stored as the
    last weight column. A two-label fit yields a single hyperplane for the
    second label, which is mirrored for the first. A single-language corpus
    needs no fitting.

    Args:
        corpus: Training corpus, usually reduced to a vocabulary
        config: SVM settings (defaults to the global configuration)

    Returns:
        Trained SVM classifier

    Raises:
        TrainingFailure: If a hyperplane ends up with non-finite weights
    """
    if config is None:
        from ..config import config as global_config
        config = global_config.svm

    counts, targets, labels, vocabulary = corpus.to_arrays()
    features = normalize_rows(counts)
    scale = column_scale(features)

    if len(labels) == 1:
        return SVMClassifier(vocabulary, labels, scale, np.zeros((1, len(vocabulary) + 1)))

    estimator = LinearSVC(
        C=config.c,
        loss="hinge",
        dual=True,
        tol=config.tolerance,
        max_iter=config.max_iter,
        random_state=config.seed,
    )
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", ConvergenceWarning)
        estimator.fit(features / scale, targets)
    if estimator.n_iter_ >= config.max_iter:
        logger.warning(f"LinearSVC did not converge within {config.max_iter} iterations")

    weights = np.hstack([estimator.coef_, estimator.intercept_[:, np.newaxis]])
    if len(labels) == 2:
        weights = np.vstack([-weights, weights])

    for label, row in zip(labels, weights):
        if not np.all(np.isfinite(row)):
            raise TrainingFailure(f"Hyperplane for '{label}' has non-finite weights")

    return SVMClassifier(vocabulary, labels, scale, weights)


def decode(data: bytes) -> SVMClassifier:
    return SVMClassifier.decode(data)

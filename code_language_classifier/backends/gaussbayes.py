"""
Naive Bayes with one Gaussian per label and vocabulary token.
"""

import math
from typing import List, Optional

import numpy as np
from sklearn.naive_bayes import GaussianNB

from ..codec import ModelReader, ModelWriter
from ..config import GaussBayesConfig
from ..exceptions import DecodeError
from ..features import normalize_rows
from ..models.data_models import SampleCorpus, Vocabulary
from .base import VocabularyClassifier


class GaussBayesClassifier(VocabularyClassifier):
    """
    Picks the label maximizing log prior plus the Gaussian log-likelihood of
    every token frequency, assuming tokens are conditionally independent.
    """

    MAGIC = b"GNB\x01"

    def __init__(self, vocabulary: Vocabulary, labels: List[str],
                 log_priors: np.ndarray, means: np.ndarray, variances: np.ndarray):
        super().__init__(vocabulary, labels)
        self._log_priors = np.array(log_priors, dtype=float)
        self._means = np.array(means, dtype=float)
        self._variances = np.array(variances, dtype=float)

    def log_posteriors(self, features: np.ndarray) -> np.ndarray:
        """Unnormalized log posterior of every label for length-normalized features."""
        squared = (features - self._means) ** 2 / self._variances
        log_likelihoods = -0.5 * (np.log(2 * math.pi * self._variances) + squared).sum(axis=1)
        return self._log_priors + log_likelihoods

    def _predict(self, features: np.ndarray) -> int:
        return int(np.argmax(self.log_posteriors(features)))

    def _write_parameters(self, writer: ModelWriter) -> None:
        writer.write_array(self._log_priors)
        writer.write_array(self._means)
        writer.write_array(self._variances)

    @classmethod
    def _read_parameters(cls, reader: ModelReader, vocabulary: Vocabulary,
                         labels: List[str]) -> 'GaussBayesClassifier':
        shape = (len(labels), len(vocabulary))
        log_priors = reader.read_array((len(labels),))
        means = reader.read_array(shape)
        variances = reader.read_array(shape)
        if np.any(variances <= 0):
            raise DecodeError("Variances must be positive")
        return cls(vocabulary, labels, log_priors, means, variances)


def train(corpus: SampleCorpus, config: Optional[GaussBayesConfig] = None) -> GaussBayesClassifier:
    """
    Estimate per-label Gaussians and label priors with scikit-learn's GaussianNB.

    The variance floor is added on top of the fitted variances so a token that
    never varies within a label keeps a usable Gaussian.

    Args:
        corpus: Training corpus, usually reduced to a vocabulary
        config: Naive Bayes settings (defaults to the global configuration)

    Returns:
        Trained Gaussian naive Bayes classifier
    """
    if config is None:
        from ..config import config as global_config
        config = global_config.gaussbayes

    counts, targets, labels, vocabulary = corpus.to_arrays()
    estimator = GaussianNB()
    estimator.fit(normalize_rows(counts), targets)

    return GaussBayesClassifier(
        vocabulary,
        labels,
        np.log(estimator.class_prior_),
        estimator.theta_,
        estimator.var_ + config.variance_floor,
    )


def decode(data: bytes) -> GaussBayesClassifier:
    return GaussBayesClassifier.decode(data)

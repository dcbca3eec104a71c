"""
K-nearest neighbors over length-normalized frequency vectors.
"""

from typing import List, Optional

import numpy as np
from sklearn.neighbors import NearestNeighbors

from ..codec import ModelReader, ModelWriter
from ..config import KNNConfig
from ..exceptions import DecodeError
from ..features import normalize_rows
from ..models.data_models import SampleCorpus, Vocabulary
from .base import VocabularyClassifier


class KNNClassifier(VocabularyClassifier):
    """
    Stores every training sample and votes among the k closest (Euclidean distance).

    Neighbors are ordered by distance, then by training order. A vote tie goes
    to the tied label whose member appears first among the neighbors.
    """

    MAGIC = b"KNN\x01"

    def __init__(self, vocabulary: Vocabulary, labels: List[str], k: int,
                 samples: np.ndarray, targets: np.ndarray):
        super().__init__(vocabulary, labels)
        if k < 1:
            raise ValueError("k must be at least 1")
        self._k = k
        self._samples = np.array(samples, dtype=float)
        self._targets = np.array(targets, dtype=np.int64)
        self._index = NearestNeighbors(n_neighbors=min(k, len(self._samples)), algorithm="brute")
        self._index.fit(self._samples)

    @property
    def k(self) -> int:
        return self._k

    def neighbors(self, features: np.ndarray) -> np.ndarray:
        """Indices of the k nearest stored samples, closest first."""
        distances, indices = self._index.kneighbors(features.reshape(1, -1))
        # Equal distances keep training order
        return indices[0][np.lexsort((indices[0], distances[0]))]

    def _predict(self, features: np.ndarray) -> int:
        nearest = self._targets[self.neighbors(features)]
        votes = np.bincount(nearest, minlength=len(self._labels))
        winners = set(np.flatnonzero(votes == votes.max()).tolist())
        for label in nearest:
            if int(label) in winners:
                return int(label)
        return int(np.argmax(votes))

    def _write_parameters(self, writer: ModelWriter) -> None:
        writer.write_uint(self._k)
        writer.write_array(self._samples)
        writer.write_index_array(self._targets)

    @classmethod
    def _read_parameters(cls, reader: ModelReader, vocabulary: Vocabulary,
                         labels: List[str]) -> 'KNNClassifier':
        k = reader.read_uint()
        if k == 0:
            raise DecodeError("Neighbor count must be at least 1")
        samples = reader.read_array()
        if samples.ndim != 2 or samples.shape[1] != len(vocabulary) or samples.shape[0] == 0:
            raise DecodeError(f"Stored sample matrix has invalid shape {samples.shape}")
        targets = reader.read_index_array((samples.shape[0],), bound=len(labels))
        return cls(vocabulary, labels, k, samples, targets)


def train(corpus: SampleCorpus, config: Optional[KNNConfig] = None) -> KNNClassifier:
    """
    Store the length-normalized training set.

    Args:
        corpus: Training corpus, usually reduced to a vocabulary
        config: Neighbor settings (defaults to the global configuration)

    Returns:
        Nearest neighbor classifier
    """
    if config is None:
        from ..config import config as global_config
        config = global_config.knn

    counts, targets, labels, vocabulary = corpus.to_arrays()
    return KNNClassifier(vocabulary, labels, config.k, normalize_rows(counts), targets)


def decode(data: bytes) -> KNNClassifier:
    return KNNClassifier.decode(data)

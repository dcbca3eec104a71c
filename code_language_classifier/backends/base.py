"""
Shared plumbing for the vocabulary-based classifiers.
"""

from abc import abstractmethod
from typing import List, Mapping, Sequence

import numpy as np

from ..codec import ModelReader, ModelWriter
from ..exceptions import ConfigurationError, DecodeError
from ..features import normalize
from ..models.data_models import Vocabulary
from ..services.interfaces import Classifier


class VocabularyClassifier(Classifier):
    """
    Base class for classifiers that project frequency vectors onto a vocabulary.

    Subclasses set MAGIC, implement _predict on the length-normalized feature
    array, and read/write their own parameters after the shared header of
    labels and vocabulary tokens.
    """

    MAGIC = b"\0\0\0\0"

    def __init__(self, vocabulary: Vocabulary, labels: Sequence[str]):
        if not labels:
            raise ValueError("A classifier needs at least one label")
        self._vocabulary = vocabulary
        self._labels = tuple(labels)

    @property
    def vocabulary(self) -> Vocabulary:
        return self._vocabulary

    def labels(self) -> List[str]:
        return list(self._labels)

    def classify(self, vector: Mapping[str, float]) -> str:
        features = normalize(self._vocabulary.vectorize(vector))
        return self._labels[self._predict(features)]

    @abstractmethod
    def _predict(self, features: np.ndarray) -> int:
        """Return the label index for a length-normalized feature array."""
        pass

    def encode(self) -> bytes:
        writer = ModelWriter(self.MAGIC)
        writer.write_strings(self._labels)
        writer.write_strings(self._vocabulary.tokens)
        self._write_parameters(writer)
        return writer.getvalue()

    @abstractmethod
    def _write_parameters(self, writer: ModelWriter) -> None:
        pass

    @classmethod
    def decode(cls, data: bytes) -> 'VocabularyClassifier':
        """
        Decode a classifier of this type.

        Args:
            data: Bytes produced by encode()

        Returns:
            Classifier that behaves identically to the encoded one

        Raises:
            DecodeError: If the bytes do not match this backend's layout
        """
        reader = ModelReader(data, cls.MAGIC)
        labels = reader.read_strings()
        if not labels:
            raise DecodeError("Encoded classifier has no labels")
        if len(set(labels)) != len(labels):
            raise DecodeError("Encoded classifier has duplicate labels")
        try:
            vocabulary = Vocabulary(tuple(reader.read_strings()))
        except ConfigurationError as e:
            raise DecodeError(f"Invalid vocabulary: {e}") from e
        classifier = cls._read_parameters(reader, vocabulary, labels)
        reader.finish()
        return classifier

    @classmethod
    @abstractmethod
    def _read_parameters(cls, reader: ModelReader, vocabulary: Vocabulary,
                         labels: List[str]) -> 'VocabularyClassifier':
        pass

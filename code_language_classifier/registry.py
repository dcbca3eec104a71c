"""
The closed set of classifier backends.

Backend is an enumeration rather than a mutable table: every member binds an
identifier to its training function, decoding function and description, and
no backend can be added at runtime.
"""

from enum import Enum
from typing import Callable, List

from .backends import gaussbayes, idtree, knn, neuralnet, svm
from .exceptions import ConfigurationError
from .models.data_models import SampleCorpus
from .services.interfaces import Classifier


class Backend(Enum):
    """Supported classifier backends, in the order they are trained and reported."""

    IDTREE = ("idtree", idtree.train, idtree.decode, "decision trees generated with ID3")
    NEURALNET = ("neuralnet", neuralnet.train, neuralnet.decode, "feedforward neural network")
    KNN = ("knn", knn.train, knn.decode, "K-nearest neighbors")
    SVM = ("svm", svm.train, svm.decode, "support vector machines")
    GAUSSBAYES = ("gaussbayes", gaussbayes.train, gaussbayes.decode, "naive Bayes with Gaussians")

    def __new__(cls, identifier: str, trainer: Callable, decoder: Callable, description: str):
        member = object.__new__(cls)
        member._value_ = identifier
        member.trainer = trainer
        member.decoder = decoder
        member.description = description
        return member

    @property
    def identifier(self) -> str:
        return self.value

    def train(self, corpus: SampleCorpus) -> Classifier:
        """Train this backend with its default configuration."""
        return self.trainer(corpus)

    def decode(self, data: bytes) -> Classifier:
        """Decode bytes produced by a classifier of this backend."""
        return self.decoder(data)


BACKEND_NAMES: List[str] = [backend.identifier for backend in Backend]


def get_backend(identifier: str) -> Backend:
    """
    Look up a backend by identifier.

    Raises:
        ConfigurationError: If the identifier is unknown
    """
    try:
        return Backend(identifier)
    except ValueError:
        raise ConfigurationError(
            f"Unknown backend '{identifier}'. Available: {', '.join(BACKEND_NAMES)}"
        ) from None


def decode_classifier(identifier: str, data: bytes) -> Classifier:
    """Decode bytes with the decoder of the named backend."""
    return get_backend(identifier).decode(data)


def describe_backends() -> List[str]:
    """One 'identifier: description' line per backend."""
    return [f"{backend.identifier}: {backend.description}" for backend in Backend]

"""
Exception classes for the code language classifier.
"""


class ClassifierError(Exception):
    """Base exception for classifier errors."""
    pass


class ConfigurationError(ClassifierError):
    """Raised when a corpus, vocabulary size, backend or hyperparameter is invalid."""
    pass


class InvalidInputError(ClassifierError):
    """Raised when input text or parameters are invalid."""
    pass


class TrainingFailure(ClassifierError):
    """Raised when a single backend fails to train (e.g. numerical degeneracy)."""
    pass


class DecodeError(ClassifierError):
    """Raised when encoded classifier bytes do not match the expected layout."""
    pass


class DatasetLoadingError(ClassifierError):
    """Raised when a sample directory cannot be turned into a corpus."""
    pass


class ModelStoreError(ClassifierError):
    """Raised when a model bundle cannot be written or read."""
    pass

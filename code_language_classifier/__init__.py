"""
Programming language classification from token frequencies, with five
interchangeable classical learning backends.
"""

from .models import (
    FrequencyVector,
    Vocabulary,
    SampleCorpus,
    BackendResult,
    TrainingReport,
    EvaluationResult,
    ClassificationResult
)
from .services import Classifier
from .registry import Backend, BACKEND_NAMES, get_backend, decode_classifier
from .vocabulary import VocabularySelector, select_vocabulary
from .trainer import ClassifierTrainer, train_classifiers
from .tokens import count_tokens
from .dataset_loader import SampleDirectory, load_samples
from .evaluation import evaluate_classifier, split_corpus
from .model_store import ModelBundle, save_bundle, load_bundle
from .language_classifier import LanguageClassifier
from .exceptions import (
    ClassifierError,
    ConfigurationError,
    InvalidInputError,
    TrainingFailure,
    DecodeError,
    DatasetLoadingError,
    ModelStoreError
)

__version__ = "0.1.0"
__all__ = [
    "FrequencyVector",
    "Vocabulary",
    "SampleCorpus",
    "BackendResult",
    "TrainingReport",
    "EvaluationResult",
    "ClassificationResult",
    "Classifier",
    "Backend",
    "BACKEND_NAMES",
    "get_backend",
    "decode_classifier",
    "VocabularySelector",
    "select_vocabulary",
    "ClassifierTrainer",
    "train_classifiers",
    "count_tokens",
    "SampleDirectory",
    "load_samples",
    "evaluate_classifier",
    "split_corpus",
    "ModelBundle",
    "save_bundle",
    "load_bundle",
    "LanguageClassifier",
    "ClassifierError",
    "ConfigurationError",
    "InvalidInputError",
    "TrainingFailure",
    "DecodeError",
    "DatasetLoadingError",
    "ModelStoreError"
]

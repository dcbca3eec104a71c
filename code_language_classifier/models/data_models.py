"""
Core data models for the code language classifier.
"""

import math
from dataclasses import dataclass, field
from numbers import Real
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, TYPE_CHECKING

import numpy as np

from ..exceptions import ConfigurationError

if TYPE_CHECKING:
    from ..services.interfaces import Classifier


# Token to raw count for one source file. Absent tokens count as zero.
FrequencyVector = Dict[str, float]


@dataclass(frozen=True)
class Vocabulary:
    """Ordered set of tokens used as the feature basis of a training run."""
    tokens: Tuple[str, ...] = ()

    def __post_init__(self):
        tokens = tuple(self.tokens)
        if not all(isinstance(token, str) and token for token in tokens):
            raise ConfigurationError("Vocabulary tokens must be non-empty strings")
        if len(set(tokens)) != len(tokens):
            raise ConfigurationError("Vocabulary tokens must be unique")
        object.__setattr__(self, 'tokens', tokens)
        object.__setattr__(self, '_positions', {token: i for i, token in enumerate(tokens)})

    def __len__(self) -> int:
        return len(self.tokens)

    def __iter__(self) -> Iterator[str]:
        return iter(self.tokens)

    def __contains__(self, token: object) -> bool:
        return token in self._positions

    def index(self, token: str) -> int:
        """Position of a token in the feature basis."""
        return self._positions[token]

    def vectorize(self, vector: Mapping[str, float]) -> np.ndarray:
        """
        Project a frequency vector onto this vocabulary.

        Tokens outside the vocabulary are ignored, as are values that are not
        finite non-negative numbers.

        Args:
            vector: Token to raw count mapping

        Returns:
            Float array of raw counts in vocabulary order
        """
        features = np.zeros(len(self.tokens), dtype=float)
        for token, count in vector.items():
            position = self._positions.get(token)
            if position is None or not _is_count(count):
                continue
            features[position] = float(count)
        return features

    def reduce(self, vector: Mapping[str, float]) -> FrequencyVector:
        """Keep only the entries of a frequency vector that belong to this vocabulary."""
        return {token: float(count) for token, count in vector.items() if token in self._positions}


def _is_count(value: Any) -> bool:
    return (
        isinstance(value, Real)
        and not isinstance(value, bool)
        and math.isfinite(value)
        and value >= 0
    )


@dataclass(frozen=True)
class SampleCorpus:
    """
    Labeled training set: language name to the frequency vectors of its samples.

    Languages are always iterated in sorted order, which is also the label
    index order used by every backend.
    """
    samples: Dict[str, List[FrequencyVector]]
    vocabulary: Optional[Vocabulary] = None

    def __post_init__(self):
        """Validate and copy the samples so the corpus cannot be mutated through the caller's dicts."""
        if not isinstance(self.samples, Mapping) or not self.samples:
            raise ConfigurationError("Sample corpus must contain at least one language")

        copied: Dict[str, List[FrequencyVector]] = {}
        for language in sorted(self.samples, key=str):
            if not isinstance(language, str) or not language.strip():
                raise ConfigurationError(f"Language names must be non-empty strings, got {language!r}")
            vectors = self.samples[language]
            if isinstance(vectors, Mapping) or not isinstance(vectors, Sequence) or not vectors:
                raise ConfigurationError(f"Language '{language}' must have at least one sample")
            copied_vectors = []
            for i, vector in enumerate(vectors):
                if not isinstance(vector, Mapping):
                    raise ConfigurationError(f"Sample {i} of '{language}' is not a token mapping")
                for token, count in vector.items():
                    if not isinstance(token, str):
                        raise ConfigurationError(f"Sample {i} of '{language}' has a non-string token {token!r}")
                    if not _is_count(count):
                        raise ConfigurationError(
                            f"Sample {i} of '{language}' has an invalid count for '{token}': {count!r}"
                        )
                copied_vectors.append({token: float(count) for token, count in vector.items()})
            copied[language] = copied_vectors

        object.__setattr__(self, 'samples', copied)

    @property
    def languages(self) -> List[str]:
        """Sorted language names."""
        return list(self.samples)

    @property
    def num_samples(self) -> int:
        """Total number of samples across all languages."""
        return sum(len(vectors) for vectors in self.samples.values())

    def tokens(self) -> List[str]:
        """Every token observed anywhere in the corpus, sorted."""
        observed = set()
        for vectors in self.samples.values():
            for vector in vectors:
                observed.update(vector)
        return sorted(observed)

    def restrict(self, vocabulary: Vocabulary) -> 'SampleCorpus':
        """
        Reduce every sample to a vocabulary.

        Args:
            vocabulary: Feature basis shared by every backend of a run

        Returns:
            New corpus with reduced vectors and the vocabulary attached
        """
        reduced = {
            language: [vocabulary.reduce(vector) for vector in vectors]
            for language, vectors in self.samples.items()
        }
        return SampleCorpus(samples=reduced, vocabulary=vocabulary)

    def feature_vocabulary(self) -> Vocabulary:
        """Attached vocabulary, or every observed token when the corpus was never reduced."""
        if self.vocabulary is not None:
            return self.vocabulary
        return Vocabulary(tuple(self.tokens()))

    def to_arrays(self) -> Tuple[np.ndarray, np.ndarray, List[str], Vocabulary]:
        """
        Build the dense training arrays consumed by the backends.

        Returns:
            Tuple of (raw count matrix of shape (num_samples, vocabulary size),
            label index per sample, sorted labels, vocabulary)
        """
        vocabulary = self.feature_vocabulary()
        labels = self.languages
        rows = []
        targets = []
        for label_index, language in enumerate(labels):
            for vector in self.samples[language]:
                rows.append(vocabulary.vectorize(vector))
                targets.append(label_index)
        matrix = np.array(rows, dtype=float).reshape(len(rows), len(vocabulary))
        return matrix, np.array(targets, dtype=np.int64), labels, vocabulary


@dataclass
class BackendResult:
    """Outcome of training one backend."""
    backend: str
    classifier: Optional['Classifier'] = None
    error: Optional[str] = None
    training_time: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.classifier is not None


@dataclass
class TrainingReport:
    """Every backend's outcome for a single vocabulary size."""
    max_tokens: int
    vocabulary: Vocabulary
    results: Dict[str, BackendResult] = field(default_factory=dict)

    @property
    def classifiers(self) -> Dict[str, 'Classifier']:
        """Successfully trained classifiers keyed by backend identifier."""
        return {name: result.classifier for name, result in self.results.items() if result.succeeded}

    @property
    def failures(self) -> Dict[str, str]:
        """Error messages keyed by backend identifier."""
        return {name: result.error or "unknown error" for name, result in self.results.items() if not result.succeeded}

    def succeeded(self) -> List[str]:
        return [name for name, result in self.results.items() if result.succeeded]

    def failed(self) -> List[str]:
        return [name for name, result in self.results.items() if not result.succeeded]

    def best(self, evaluation_corpus: 'SampleCorpus') -> Tuple[str, 'Classifier']:
        """
        Pick the trained classifier with the highest accuracy on a corpus.

        Ties go to the backend that comes first in registry order.

        Args:
            evaluation_corpus: Labeled samples to score against

        Returns:
            Tuple of (backend identifier, classifier)

        Raises:
            ConfigurationError: If no backend trained successfully
        """
        from ..evaluation import evaluate_classifier

        best_name = None
        best_accuracy = -1.0
        for name, classifier in self.classifiers.items():
            accuracy = evaluate_classifier(classifier, evaluation_corpus).accuracy
            if accuracy > best_accuracy:
                best_name, best_accuracy = name, accuracy

        if best_name is None:
            raise ConfigurationError("No backend trained successfully")
        return best_name, self.results[best_name].classifier


@dataclass
class EvaluationResult:
    """Accuracy of one classifier over a labeled corpus."""
    correct: int = 0
    total: int = 0
    per_language: Dict[str, Tuple[int, int]] = field(default_factory=dict)

    @property
    def accuracy(self) -> float:
        if self.total == 0:
            return 0.0
        return self.correct / self.total

    def language_accuracy(self, language: str) -> float:
        correct, total = self.per_language.get(language, (0, 0))
        return correct / total if total else 0.0


@dataclass
class ClassificationResult:
    """Predicted language of a source file with the prediction of each backend consulted."""
    language: str
    backend_predictions: Dict[str, str] = field(default_factory=dict)
    backend: Optional[str] = None  # None when the result is a vote across backends

    @property
    def agreement(self) -> float:
        """Share of consulted backends that predicted the final language."""
        if not self.backend_predictions:
            return 0.0
        votes = sum(1 for label in self.backend_predictions.values() if label == self.language)
        return votes / len(self.backend_predictions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "language": self.language,
            "backend": self.backend,
            "agreement": self.agreement,
            "backend_predictions": dict(self.backend_predictions),
        }

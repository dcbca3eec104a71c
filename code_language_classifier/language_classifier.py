"""
Main LanguageClassifier class for classifying source files.

This module ties a model bundle to the tokenizer so callers can go straight
from source text to a predicted language, either with a single backend or by
majority vote across every backend in the bundle.
"""

import logging
from collections import Counter
from pathlib import Path
from typing import Dict, List, Optional, Union

from .exceptions import InvalidInputError
from .model_store import ModelBundle, load_bundle
from .models.data_models import ClassificationResult
from .registry import Backend
from .tokens import count_tokens

logger = logging.getLogger(__name__)


class LanguageClassifier:
    """
    Predicts the programming language of source text from a trained bundle.
    """

    def __init__(self, bundle: Union[str, ModelBundle], backend: Optional[str] = None):
        """
        Initialize the classifier.

        Args:
            bundle: Path to a bundle written by save_bundle(), or a loaded ModelBundle
            backend: Backend to use; when omitted every backend in the bundle votes

        Raises:
            ModelStoreError: If the bundle file cannot be loaded
            DecodeError: If a classifier in the bundle is malformed
            ConfigurationError: If the backend is unknown or missing from the bundle
            InvalidInputError: If the bundle holds no classifiers
        """
        self.bundle = bundle if isinstance(bundle, ModelBundle) else load_bundle(bundle)
        if not self.bundle.classifiers:
            raise InvalidInputError("Bundle does not contain any trained classifier")

        self.backend = backend
        if backend is not None:
            self.bundle.get(backend)

        logger.debug(f"LanguageClassifier ready with backends: {', '.join(self.backends)}")

    @property
    def backends(self) -> List[str]:
        """Backends consulted by predict(), in registry order."""
        if self.backend is not None:
            return [self.backend]
        return [b.identifier for b in Backend if b.identifier in self.bundle.classifiers]

    @property
    def languages(self) -> List[str]:
        """Every language any consulted backend can predict, sorted."""
        labels = set()
        for name in self.backends:
            labels.update(self.bundle.classifiers[name].labels())
        return sorted(labels)

    def predict(self, text: str) -> ClassificationResult:
        """
        Predict the language of source text.

        With several backends the most common prediction wins; ties go to the
        language predicted by the earliest backend in registry order.

        Args:
            text: Source code

        Returns:
            ClassificationResult with the language and each backend's prediction

        Raises:
            InvalidInputError: If text is not a string
        """
        if not isinstance(text, str):
            raise InvalidInputError(f"Text must be a string, got {type(text).__name__}")

        vector = count_tokens(text)
        predictions: Dict[str, str] = {
            name: self.bundle.classifiers[name].classify(vector) for name in self.backends
        }

        votes = Counter(predictions.values())
        top = max(votes.values())
        language = next(label for label in predictions.values() if votes[label] == top)

        return ClassificationResult(
            language=language,
            backend_predictions=predictions,
            backend=self.backend,
        )

    def predict_file(self, filepath: str) -> ClassificationResult:
        """
        Predict the language of a source file.

        Raises:
            InvalidInputError: If the file cannot be read
        """
        path = Path(filepath)
        if not path.is_file():
            raise InvalidInputError(f"Source file not found: {filepath}")
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise InvalidInputError(f"Failed to read source file {filepath}: {e}") from e
        return self.predict(text)

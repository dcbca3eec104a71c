"""
Persistence of trained classifiers as a JSON bundle.

Each classifier is stored as the base64 text of its backend-specific binary
encoding, keyed by backend identifier, next to the run's vocabulary and the
backends that failed to train.
"""

import base64
import binascii
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from .exceptions import ConfigurationError, DecodeError, ModelStoreError
from .models.data_models import TrainingReport, Vocabulary
from .registry import BACKEND_NAMES, get_backend
from .services.interfaces import Classifier

logger = logging.getLogger(__name__)

BUNDLE_VERSION = 1


@dataclass
class ModelBundle:
    """Classifiers decoded from a bundle file."""
    max_tokens: int
    vocabulary: Vocabulary
    classifiers: Dict[str, Classifier] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)

    def get(self, backend: str) -> Classifier:
        """
        Get the classifier of one backend.

        Raises:
            ConfigurationError: If the backend is unknown or not part of the bundle
        """
        get_backend(backend)
        if backend not in self.classifiers:
            raise ConfigurationError(
                f"Backend '{backend}' is not in this bundle. Available: {', '.join(self.classifiers)}"
            )
        return self.classifiers[backend]


def bundle_to_dict(report: TrainingReport, backends: Optional[Sequence[str]] = None) -> Dict[str, Any]:
    """
    Build the JSON-ready form of a training report.

    Args:
        report: Result of a training run
        backends: Subset of successful backends to keep (defaults to all of them)

    Returns:
        Dictionary ready for json.dump
    """
    trained = report.classifiers
    if backends is None:
        selected = list(trained)
    else:
        selected = []
        for name in backends:
            get_backend(name)
            if name not in trained:
                raise ConfigurationError(f"Backend '{name}' did not train successfully")
            selected.append(name)

    return {
        "version": BUNDLE_VERSION,
        "max_tokens": report.max_tokens,
        "vocabulary": list(report.vocabulary.tokens),
        "classifiers": {
            name: {
                "description": get_backend(name).description,
                "data": base64.b64encode(trained[name].encode()).decode("ascii"),
            }
            for name in selected
        },
        "failures": report.failures,
    }


def save_bundle(report: TrainingReport, filepath: str, backends: Optional[Sequence[str]] = None) -> None:
    """
    Write a training report's classifiers to a JSON bundle.

    Args:
        report: Result of a training run
        filepath: Destination path
        backends: Subset of successful backends to keep (defaults to all of them)

    Raises:
        ModelStoreError: If the file cannot be written
    """
    data = bundle_to_dict(report, backends)
    try:
        path = Path(filepath)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)
    except OSError as e:
        raise ModelStoreError(f"Failed to write bundle {filepath}: {e}") from e

    logger.info(f"Saved {len(data['classifiers'])} classifiers to {filepath}")


def bundle_from_dict(data: Dict[str, Any]) -> ModelBundle:
    """
    Decode every classifier of a parsed bundle.

    Raises:
        ModelStoreError: If the bundle structure is invalid
        DecodeError: If a classifier's bytes are malformed
    """
    if not isinstance(data, dict):
        raise ModelStoreError("Bundle must be a JSON object")
    if data.get("version") != BUNDLE_VERSION:
        raise ModelStoreError(f"Unsupported bundle version: {data.get('version')!r}")
    if not isinstance(data.get("classifiers"), dict):
        raise ModelStoreError("Bundle missing required 'classifiers' object")

    vocabulary_tokens = data.get("vocabulary", [])
    if not isinstance(vocabulary_tokens, list):
        raise ModelStoreError("'vocabulary' field must be a list")
    try:
        vocabulary = Vocabulary(tuple(vocabulary_tokens))
    except ConfigurationError as e:
        raise ModelStoreError(f"Invalid vocabulary: {e}") from e

    max_tokens = data.get("max_tokens", len(vocabulary))
    if "max_tokens" in data and (
            not isinstance(max_tokens, int) or isinstance(max_tokens, bool) or max_tokens < 1):
        raise ModelStoreError(f"'max_tokens' field must be a positive integer, got {max_tokens!r}")

    classifiers: Dict[str, Classifier] = {}
    for name, entry in data["classifiers"].items():
        if name not in BACKEND_NAMES:
            raise ModelStoreError(f"Unknown backend in bundle: '{name}'")
        if not isinstance(entry, dict) or not isinstance(entry.get("data"), str):
            raise ModelStoreError(f"Classifier '{name}' missing required 'data' field")
        try:
            raw = base64.b64decode(entry["data"], validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecodeError(f"Classifier '{name}' is not valid base64: {e}") from e
        classifiers[name] = get_backend(name).decode(raw)

    failures = data.get("failures", {})
    if not isinstance(failures, dict):
        raise ModelStoreError("'failures' field must be an object")

    return ModelBundle(
        max_tokens=max_tokens,
        vocabulary=vocabulary,
        classifiers=classifiers,
        failures={str(k): str(v) for k, v in failures.items()},
    )


def load_bundle(filepath: str) -> ModelBundle:
    """
    Load and decode a JSON bundle.

    Args:
        filepath: Path written by save_bundle()

    Returns:
        ModelBundle with decoded classifiers

    Raises:
        ModelStoreError: If the file is missing, unreadable or not a bundle
        DecodeError: If a classifier's bytes are malformed
    """
    path = Path(filepath)
    if not path.exists():
        raise ModelStoreError(f"Bundle file not found: {filepath}")

    if not path.is_file():
        raise ModelStoreError(f"Path is not a file: {filepath}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ModelStoreError(f"Invalid JSON in bundle file: {str(e)}") from e
    except OSError as e:
        raise ModelStoreError(f"Failed to read bundle file: {str(e)}") from e

    return bundle_from_dict(data)

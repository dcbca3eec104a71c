"""
Accuracy measurement and holdout splits.
"""

import math
from typing import Dict, List, Tuple

from sklearn.metrics import accuracy_score

from .exceptions import ConfigurationError, InvalidInputError
from .models.data_models import EvaluationResult, FrequencyVector, SampleCorpus
from .services.interfaces import Classifier


def evaluate_classifier(classifier: Classifier, corpus: SampleCorpus) -> EvaluationResult:
    """
    Classify every sample of a labeled corpus.

    Samples of languages the classifier does not know count as misses.

    Args:
        classifier: Trained classifier
        corpus: Labeled samples

    Returns:
        EvaluationResult with overall and per-language counts
    """
    if not isinstance(corpus, SampleCorpus):
        raise InvalidInputError(f"Expected a SampleCorpus, got {type(corpus).__name__}")

    result = EvaluationResult()
    for language in corpus.languages:
        vectors = corpus.samples[language]
        predicted = [classifier.classify(vector) for vector in vectors]
        correct = int(accuracy_score([language] * len(vectors), predicted, normalize=False))
        result.per_language[language] = (correct, len(vectors))
        result.correct += correct
        result.total += len(vectors)
    return result


def split_corpus(corpus: SampleCorpus, holdout_fraction: float) -> Tuple[SampleCorpus, SampleCorpus]:
    """
    Deterministically split a corpus into training and holdout parts.

    For every language with at least two samples, the last
    ceil(n * holdout_fraction) samples (at least one, never all) are held out.
    Languages with a single sample stay in the training part only.

    Args:
        corpus: Labeled samples
        holdout_fraction: Share of each language to hold out, between 0 and 1

    Returns:
        Tuple of (training corpus, holdout corpus)

    Raises:
        ConfigurationError: If the fraction is out of range or nothing can be held out
    """
    if not 0.0 < holdout_fraction < 1.0:
        raise ConfigurationError(f"Holdout fraction must be between 0.0 and 1.0, got {holdout_fraction}")

    training: Dict[str, List[FrequencyVector]] = {}
    holdout: Dict[str, List[FrequencyVector]] = {}
    for language in corpus.languages:
        vectors = corpus.samples[language]
        if len(vectors) < 2:
            training[language] = list(vectors)
            continue
        held = min(max(1, math.ceil(len(vectors) * holdout_fraction)), len(vectors) - 1)
        training[language] = vectors[:-held]
        holdout[language] = vectors[-held:]

    if not holdout:
        raise ConfigurationError("A holdout split needs at least one language with two or more samples")

    return SampleCorpus(samples=training), SampleCorpus(samples=holdout)

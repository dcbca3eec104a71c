"""
Data models for the code language classifier.
"""

from .data_models import (
    FrequencyVector,
    Vocabulary,
    SampleCorpus,
    BackendResult,
    TrainingReport,
    EvaluationResult,
    ClassificationResult
)

__all__ = [
    "FrequencyVector",
    "Vocabulary",
    "SampleCorpus",
    "BackendResult",
    "TrainingReport",
    "EvaluationResult",
    "ClassificationResult"
]

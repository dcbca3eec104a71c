"""
Configuration for the code language classifier library.
Every section can be overridden through environment variables.
"""

import os
from dataclasses import dataclass

from .exceptions import ConfigurationError

# Decoding walks trees recursively, so depth stays well under the recursion limit
MAX_TREE_DEPTH = 256


@dataclass
class VocabularyConfig:
    """Vocabulary selection settings."""
    default_max_tokens: int = 100

    def __post_init__(self):
        if self.default_max_tokens < 1:
            raise ConfigurationError("default_max_tokens must be at least 1")

    @classmethod
    def from_env(cls) -> 'VocabularyConfig':
        """Create vocabulary config from environment variables."""
        return cls(
            default_max_tokens=int(os.getenv('VOCAB_DEFAULT_MAX_TOKENS', cls.default_max_tokens)),
        )


@dataclass
class TrainingConfig:
    """Training orchestration settings."""
    max_workers: int = 5

    # Fraction of each language's samples held out for evaluation
    default_holdout_fraction: float = 0.2

    def __post_init__(self):
        if self.max_workers < 1:
            raise ConfigurationError("max_workers must be at least 1")
        if not 0.0 < self.default_holdout_fraction < 1.0:
            raise ConfigurationError("default_holdout_fraction must be between 0.0 and 1.0")

    @classmethod
    def from_env(cls) -> 'TrainingConfig':
        """Create training config from environment variables."""
        return cls(
            max_workers=int(os.getenv('TRAINING_MAX_WORKERS', cls.max_workers)),
            default_holdout_fraction=float(os.getenv('TRAINING_HOLDOUT_FRACTION', cls.default_holdout_fraction)),
        )


@dataclass
class IDTreeConfig:
    """Decision tree settings."""
    max_depth: int = 32
    min_samples_split: int = 2
    # Fixes the feature visiting order, which decides between equally good splits
    seed: int = 1

    def __post_init__(self):
        if not 1 <= self.max_depth <= MAX_TREE_DEPTH:
            raise ConfigurationError(f"max_depth must be between 1 and {MAX_TREE_DEPTH}")
        if self.min_samples_split < 2:
            raise ConfigurationError("min_samples_split must be at least 2")

    @classmethod
    def from_env(cls) -> 'IDTreeConfig':
        """Create decision tree config from environment variables."""
        return cls(
            max_depth=int(os.getenv('IDTREE_MAX_DEPTH', cls.max_depth)),
            min_samples_split=int(os.getenv('IDTREE_MIN_SAMPLES_SPLIT', cls.min_samples_split)),
            seed=int(os.getenv('IDTREE_SEED', cls.seed)),
        )


@dataclass
class NeuralNetConfig:
    """Feedforward network settings."""
    hidden_size: int = 16
    iterations: int = 2000
    learning_rate: float = 0.01
    seed: int = 1

    def __post_init__(self):
        if self.hidden_size < 1:
            raise ConfigurationError("hidden_size must be at least 1")
        if self.iterations < 1:
            raise ConfigurationError("iterations must be at least 1")
        if self.learning_rate <= 0:
            raise ConfigurationError("learning_rate must be positive")

    @classmethod
    def from_env(cls) -> 'NeuralNetConfig':
        """Create network config from environment variables."""
        return cls(
            hidden_size=int(os.getenv('NEURALNET_HIDDEN_SIZE', cls.hidden_size)),
            iterations=int(os.getenv('NEURALNET_ITERATIONS', cls.iterations)),
            learning_rate=float(os.getenv('NEURALNET_LEARNING_RATE', cls.learning_rate)),
            seed=int(os.getenv('NEURALNET_SEED', cls.seed)),
        )


@dataclass
class KNNConfig:
    """Nearest neighbor settings."""
    k: int = 5

    def __post_init__(self):
        if self.k < 1:
            raise ConfigurationError("k must be at least 1")

    @classmethod
    def from_env(cls) -> 'KNNConfig':
        """Create nearest neighbor config from environment variables."""
        return cls(
            k=int(os.getenv('KNN_K', cls.k)),
        )


@dataclass
class SVMConfig:
    """Linear support vector machine settings."""
    c: float = 1.0
    max_iter: int = 1000
    tolerance: float = 1e-4
    seed: int = 1

    def __post_init__(self):
        if self.c <= 0:
            raise ConfigurationError("c must be positive")
        if self.max_iter < 1:
            raise ConfigurationError("max_iter must be at least 1")
        if self.tolerance <= 0:
            raise ConfigurationError("tolerance must be positive")

    @classmethod
    def from_env(cls) -> 'SVMConfig':
        """Create SVM config from environment variables."""
        return cls(
            c=float(os.getenv('SVM_C', cls.c)),
            max_iter=int(os.getenv('SVM_MAX_ITER', cls.max_iter)),
            tolerance=float(os.getenv('SVM_TOLERANCE', cls.tolerance)),
            seed=int(os.getenv('SVM_SEED', cls.seed)),
        )


@dataclass
class GaussBayesConfig:
    """Gaussian naive Bayes settings."""
    # Added to every variance so single-sample labels stay well defined
    variance_floor: float = 1e-4

    def __post_init__(self):
        if self.variance_floor <= 0:
            raise ConfigurationError("variance_floor must be positive")

    @classmethod
    def from_env(cls) -> 'GaussBayesConfig':
        """Create Gaussian naive Bayes config from environment variables."""
        return cls(
            variance_floor=float(os.getenv('GAUSSBAYES_VARIANCE_FLOOR', cls.variance_floor)),
        )


@dataclass
class ClassifierConfig:
    """Configuration for the code language classifier library."""
    vocabulary: VocabularyConfig
    training: TrainingConfig
    idtree: IDTreeConfig
    neuralnet: NeuralNetConfig
    knn: KNNConfig
    svm: SVMConfig
    gaussbayes: GaussBayesConfig

    @classmethod
    def from_env(cls) -> 'ClassifierConfig':
        """Create classifier config from environment variables."""
        return cls(
            vocabulary=VocabularyConfig.from_env(),
            training=TrainingConfig.from_env(),
            idtree=IDTreeConfig.from_env(),
            neuralnet=NeuralNetConfig.from_env(),
            knn=KNNConfig.from_env(),
            svm=SVMConfig.from_env(),
            gaussbayes=GaussBayesConfig.from_env(),
        )


# Global configuration instance
config = ClassifierConfig.from_env()

"""
Shared fixtures for the code language classifier tests.
"""

import pytest

from code_language_classifier.models.data_models import SampleCorpus
from code_language_classifier.vocabulary import select_vocabulary


GO_SAMPLES = [
    {"func": 10, "def": 1, "{": 6, "package": 1},
    {"func": 7, "{": 5, "package": 1},
    {"func": 12, "def": 2, "{": 8, "package": 1},
]

PYTHON_SAMPLES = [
    {"def": 9, "func": 1, ":": 6, "import": 2},
    {"def": 6, ":": 4, "import": 1},
    {"def": 11, "func": 1, ":": 8, "import": 3},
]

# Dominated by "func" / "def", with a token no model has seen
GO_LIKE = {"func": 20, "def": 1, "{": 10, "package": 1, "goroutine": 3}
PYTHON_LIKE = {"def": 15, "func": 1, ":": 3, "lambda": 2}


@pytest.fixture
def scenario_corpus():
    """Two languages told apart by 'func' and 'def'."""
    return SampleCorpus(samples={"go": GO_SAMPLES, "python": PYTHON_SAMPLES})


@pytest.fixture
def reduced_scenario_corpus(scenario_corpus):
    """Scenario corpus reduced to its two most discriminative tokens."""
    return scenario_corpus.restrict(select_vocabulary(scenario_corpus, 2))


@pytest.fixture
def single_language_corpus():
    """Corpus with exactly one language."""
    return SampleCorpus(samples={"go": [{"func": 3, "{": 2}, {"func": 1, "package": 1}]})


@pytest.fixture
def query_vectors():
    """Vectors used to compare classifiers, including edge cases."""
    return [
        GO_LIKE,
        PYTHON_LIKE,
        {},
        {"func": 0, "def": 0},
        {"unseen": 5},
        {"func": 1, "def": 1},
        {"func": 3, "def": 2, ":": 1},
        {"def": 1e6},
    ]

"""
Vocabulary selection for the code language classifier.

The selector scores every token by how unevenly its frequency is spread across
languages and keeps the top K, so every backend in a run trains on the same
bounded feature space.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Tuple

from .exceptions import ConfigurationError
from .models.data_models import SampleCorpus, Vocabulary

logger = logging.getLogger(__name__)


class VocabularySelector:
    """
    Selects at most max_tokens discriminative tokens from a corpus.

    A token's score is the population variance, across languages, of the
    language's mean length-normalized frequency of that token. Tokens are
    ranked by score descending with ties broken alphabetically, which makes the
    selection deterministic for a given corpus and bound.
    """

    def __init__(self, max_tokens: int):
        """
        Initialize the selector.

        Args:
            max_tokens: Maximum vocabulary size, at least 1

        Raises:
            ConfigurationError: If max_tokens is not a positive integer
        """
        if isinstance(max_tokens, bool) or not isinstance(max_tokens, int) or max_tokens < 1:
            raise ConfigurationError(f"Maximum vocabulary size must be a positive integer, got {max_tokens!r}")
        self.max_tokens = max_tokens

    def select(self, corpus: SampleCorpus) -> Vocabulary:
        """
        Select the vocabulary for a corpus.

        Args:
            corpus: Full training corpus

        Returns:
            Vocabulary of at most max_tokens tokens, all of them if the corpus has fewer
        """
        ranked = self.rank(corpus)
        tokens = tuple(token for token, _ in ranked[:self.max_tokens])
        logger.debug(f"Selected {len(tokens)} of {len(ranked)} tokens (max {self.max_tokens})")
        return Vocabulary(tokens)

    def rank(self, corpus: SampleCorpus) -> List[Tuple[str, float]]:
        """Every observed token with its score, best first."""
        scores = self.score_tokens(corpus)
        return sorted(scores.items(), key=lambda item: (-item[1], item[0]))

    @staticmethod
    def score_tokens(corpus: SampleCorpus) -> Dict[str, float]:
        """
        Score every token observed in the corpus.

        Returns:
            Mapping from token to the variance of its per-language mean frequency
        """
        language_means: List[Dict[str, float]] = []
        for language in corpus.languages:
            vectors = corpus.samples[language]
            sums: Dict[str, float] = defaultdict(float)
            for vector in vectors:
                total = sum(vector.values())
                if total <= 0:
                    continue
                for token in sorted(vector):
                    sums[token] += vector[token] / total
            language_means.append({token: value / len(vectors) for token, value in sums.items()})

        num_languages = len(language_means)
        scores: Dict[str, float] = {}
        for token in corpus.tokens():
            values = [means.get(token, 0.0) for means in language_means]
            mean = sum(values) / num_languages
            scores[token] = sum((value - mean) ** 2 for value in values) / num_languages
        return scores


def select_vocabulary(corpus: SampleCorpus, max_tokens: int) -> Vocabulary:
    """Select at most max_tokens discriminative tokens from a corpus."""
    return VocabularySelector(max_tokens).select(corpus)

"""
Tokenization of source text into frequency vectors.
"""

import re
from collections import Counter
from typing import Dict

# Identifiers and keywords, or runs of punctuation
_TOKEN_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*|[^\w\s]+")

# Longest punctuation token; longer runs are split into chunks of this size
MAX_SYMBOL_LENGTH = 3


def tokenize(text: str):
    """
    Yield the tokens of a source file.

    Words are kept whole. Punctuation runs such as '=>' or ':=' are kept
    together up to MAX_SYMBOL_LENGTH characters. Numbers and whitespace are
    dropped.
    """
    for match in _TOKEN_PATTERN.finditer(text):
        token = match.group()
        if token[0].isalpha() or token[0] == "_":
            yield token
            continue
        for start in range(0, len(token), MAX_SYMBOL_LENGTH):
            yield token[start:start + MAX_SYMBOL_LENGTH]


def count_tokens(text: str) -> Dict[str, float]:
    """
    Build the frequency vector of a source file.

    Args:
        text: Source code

    Returns:
        Token to raw count mapping (empty for text without tokens)
    """
    return {token: float(count) for token, count in Counter(tokenize(text)).items()}

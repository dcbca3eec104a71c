"""
Normalization helpers for vocabulary-projected frequency vectors.

Corpora and classifiers exchange raw counts; each backend decides which of
these scalings its algorithm needs.
"""

import numpy as np


def normalize(features: np.ndarray) -> np.ndarray:
    """
    Length-normalize a single count vector so it sums to one.

    An all-zero vector stays all zero.
    """
    total = float(features.sum())
    if total <= 0:
        return np.zeros_like(features, dtype=float)
    return features / total


def normalize_rows(matrix: np.ndarray) -> np.ndarray:
    """Length-normalize every row of a count matrix; all-zero rows stay zero."""
    totals = matrix.sum(axis=1, keepdims=True)
    safe_totals = np.where(totals > 0, totals, 1.0)
    return matrix / safe_totals


def column_scale(matrix: np.ndarray) -> np.ndarray:
    """Per-column maximum of a non-negative matrix, with empty columns mapped to one."""
    if matrix.shape[0] == 0:
        return np.ones(matrix.shape[1])
    maxima = matrix.max(axis=0)
    return np.where(maxima > 0, maxima, 1.0)


def standardization(matrix: np.ndarray):
    """
    Per-column mean and standard deviation of a matrix.

    Constant columns get a standard deviation of one so standardizing never divides by zero.

    Returns:
        Tuple of (mean, std) arrays
    """
    mean = matrix.mean(axis=0)
    std = matrix.std(axis=0)
    return mean, np.where(std > 1e-12, std, 1.0)

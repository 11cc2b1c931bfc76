from __future__ import annotations

import numpy as np

# Degree of accuracy for comparing samples, in normalized [-1, 1] units.
EPSILON = 0.0001


def is_close(a: float, b: float, epsilon: float = EPSILON) -> bool:
    """True if samples a and b differ by strictly less than epsilon."""
    return abs(a - b) < epsilon


def channels_match(left: np.ndarray, right: np.ndarray, epsilon: float = EPSILON) -> np.ndarray:
    """Element-wise is_close over two equally sized sample blocks."""
    return np.abs(np.asarray(left) - np.asarray(right)) < epsilon


def first_mismatch_in_block(left: np.ndarray, right: np.ndarray, epsilon: float = EPSILON) -> int | None:
    """Index of the first pair that is not close, or None if every pair matches."""
    misses = np.flatnonzero(~channels_match(left, right, epsilon))
    if misses.size == 0:
        return None
    return int(misses[0])


def peak_dbfs(x: np.ndarray, eps: float = 1e-12) -> float:
    if x.size == 0:
        return float(20.0 * np.log10(eps))
    peak = float(np.max(np.abs(x)) + eps)
    return float(20.0 * np.log10(peak))

"""
Distance and similarity primitives for embedding vectors.
"""

from typing import Sequence

import numpy as np


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity between two embedding vectors."""
    a, b = np.asarray(a, dtype=float), np.asarray(b, dtype=float)
    if a.shape != b.shape:
        raise ValueError(f"Vector dimensions differ: {a.shape} vs {b.shape}")
    norm_a, norm_b = np.linalg.norm(a), np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return float(np.dot(a, b) / (norm_a * norm_b))


def cosine_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """
    1 - cosine similarity.

    Symmetric, and zero for identical non-zero vectors (up to float error).
    Clamped to [0, 2] so rounding never yields a negative distance.
    """
    return float(min(2.0, max(0.0, 1.0 - cosine_similarity(a, b))))

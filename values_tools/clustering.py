"""
Density clustering over embedding vectors.

DBSCAN partitions items into similarity groups. Points that DBSCAN labels
as noise are NOT dropped: each becomes its own singleton group, so the
union of returned groups is always the full input, exactly once each.
"""

import logging
from collections import defaultdict
from typing import Callable, List, Sequence, TypeVar

import numpy as np
from sklearn.cluster import DBSCAN

from .similarity import cosine_distance

logger = logging.getLogger(__name__)

T = TypeVar("T")

DistanceFn = Callable[[Sequence[float], Sequence[float]], float]

DEFAULT_EPS = 0.3
DEFAULT_MIN_SAMPLES = 5


def _embedding_matrix(embeddings: Sequence[Sequence[float]]) -> np.ndarray:
    lengths = {len(e) for e in embeddings}
    if len(lengths) > 1:
        raise ValueError(f"Embeddings have mixed dimensions: {sorted(lengths)}")
    return np.array(embeddings, dtype=np.float64)


def cluster(
    embeddings: Sequence[Sequence[float]],
    eps: float = DEFAULT_EPS,
    min_samples: int = DEFAULT_MIN_SAMPLES,
    distance_fn: DistanceFn = cosine_distance,
) -> List[List[int]]:
    """
    Cluster embedding vectors with DBSCAN.

    Args:
        embeddings: One vector per item
        eps: Neighborhood radius (in distance_fn units)
        min_samples: Points (including itself) needed in a neighborhood
            to form a dense core
        distance_fn: Pairwise distance, cosine distance by default

    Returns:
        Groups of item indices. Density clusters come first (by label),
        followed by one singleton per noise point in input order.
    """
    if len(embeddings) == 0:
        return []

    X = _embedding_matrix(embeddings)

    # sklearn's built-in cosine metric is vectorized; custom callables are
    # evaluated pairwise
    metric = "cosine" if distance_fn is cosine_distance else distance_fn
    labels = DBSCAN(eps=eps, min_samples=min_samples, metric=metric).fit_predict(X)

    clusters_dict = defaultdict(list)
    noise: List[List[int]] = []
    for i, label in enumerate(labels):
        if label == -1:
            # Noise point - singleton cluster
            noise.append([i])
        else:
            clusters_dict[int(label)].append(i)

    groups = [clusters_dict[label] for label in sorted(clusters_dict)] + noise

    logger.debug(
        f"DBSCAN(eps={eps}, min_samples={min_samples}): {len(embeddings)} items -> "
        f"{len(clusters_dict)} clusters + {len(noise)} singletons"
    )
    return groups


def cluster_items(
    items: Sequence[T],
    embeddings: Sequence[Sequence[float]],
    eps: float = DEFAULT_EPS,
    min_samples: int = DEFAULT_MIN_SAMPLES,
    distance_fn: DistanceFn = cosine_distance,
) -> List[List[T]]:
    """Same as cluster(), but returns the items themselves instead of indices."""
    if len(items) != len(embeddings):
        raise ValueError(
            f"Got {len(items)} items but {len(embeddings)} embeddings"
        )
    groups = cluster(embeddings, eps=eps, min_samples=min_samples, distance_fn=distance_fn)
    return [[items[i] for i in group] for group in groups]

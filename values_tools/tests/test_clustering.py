"""
Tests for similarity primitives and DBSCAN clustering.

Key invariant: every input item ends up in exactly one group.
"""

import math

import numpy as np
import pytest

from values_tools.clustering import cluster, cluster_items
from values_tools.similarity import cosine_distance, cosine_similarity


# =============================================================================
# SIMILARITY
# =============================================================================

class TestCosine:
    """Cosine similarity / distance primitives."""

    def test_identical_vectors_zero_distance(self):
        assert cosine_distance([0.3, 0.4, 0.5], [0.3, 0.4, 0.5]) == pytest.approx(0.0, abs=1e-12)

    def test_symmetric(self):
        a, b = [0.1, 0.9, -0.2], [0.5, -0.3, 0.8]
        assert cosine_distance(a, b) == pytest.approx(cosine_distance(b, a))

    def test_orthogonal(self):
        assert cosine_similarity([1, 0], [0, 1]) == pytest.approx(0.0)
        assert cosine_distance([1, 0], [0, 1]) == pytest.approx(1.0)

    def test_opposite(self):
        assert cosine_distance([1, 0], [-1, 0]) == pytest.approx(2.0)

    def test_scale_invariant(self):
        assert cosine_distance([1, 2, 3], [2, 4, 6]) == pytest.approx(0.0, abs=1e-12)

    def test_zero_vector(self):
        """Zero vectors have no direction: similarity 0."""
        assert cosine_similarity([0, 0], [1, 0]) == 0.0

    def test_dimension_mismatch(self):
        with pytest.raises(ValueError):
            cosine_similarity([1, 0], [1, 0, 0])


# =============================================================================
# CLUSTERING
# =============================================================================

def _flatten(groups):
    return [i for group in groups for i in group]


class TestCluster:
    """DBSCAN wrapper."""

    def test_near_duplicates_and_outlier(self):
        """Two near-identical vectors cluster; the far one is a singleton."""
        embeddings = [[1.0, 0.0, 0.0], [0.99, 0.01, 0.0], [0.0, 0.0, 1.0]]
        groups = cluster(embeddings, eps=0.3, min_samples=2)

        assert groups == [[0, 1], [2]]

    def test_noise_becomes_singletons(self):
        """With min_samples above the input size, everything is noise."""
        embeddings = [[1.0, 0.0], [0.99, 0.01], [0.0, 1.0]]
        groups = cluster(embeddings)  # default min_samples=5

        assert groups == [[0], [1], [2]]

    def test_empty(self):
        assert cluster([]) == []

    def test_single_item(self):
        assert cluster([[0.2, 0.8]], min_samples=1) == [[0]]
        assert cluster([[0.2, 0.8]]) == [[0]]

    def test_mixed_dimensions_rejected(self):
        with pytest.raises(ValueError):
            cluster([[1.0, 0.0], [1.0, 0.0, 0.0]])

    def test_custom_distance_fn(self):
        """A callable metric is passed through to DBSCAN."""
        def euclidean(a, b):
            return math.dist(a, b)

        embeddings = [[0.0, 0.0], [0.1, 0.0], [5.0, 5.0]]
        groups = cluster(embeddings, eps=0.5, min_samples=2, distance_fn=euclidean)

        assert groups == [[0, 1], [2]]

    @pytest.mark.parametrize("eps,min_samples", [(0.05, 2), (0.3, 2), (0.3, 5), (0.8, 3), (1.5, 1)])
    def test_completeness(self, eps, min_samples):
        """Union of groups equals the input, each index exactly once."""
        rng = np.random.default_rng(42)
        centers = rng.normal(size=(4, 16))
        points = np.vstack([
            c + rng.normal(scale=0.05, size=(6, 16)) for c in centers
        ] + [rng.normal(size=(7, 16))])

        groups = cluster(points.tolist(), eps=eps, min_samples=min_samples)
        flat = _flatten(groups)

        assert sorted(flat) == list(range(len(points)))
        assert len(flat) == len(set(flat))
        assert all(groups)

    def test_dense_groups_found(self):
        rng = np.random.default_rng(7)
        a = np.array([1.0] + [0.0] * 7)
        b = np.array([0.0] * 7 + [1.0])
        points = [a + rng.normal(scale=0.01, size=8) for _ in range(5)]
        points += [b + rng.normal(scale=0.01, size=8) for _ in range(5)]

        groups = cluster([p.tolist() for p in points], eps=0.1, min_samples=3)

        assert sorted(map(sorted, groups)) == [[0, 1, 2, 3, 4], [5, 6, 7, 8, 9]]


class TestClusterItems:
    """Index groups mapped back to items."""

    def test_maps_items(self):
        items = ["listen", "hear", "dance"]
        embeddings = [[1.0, 0.0], [0.98, 0.05], [0.0, 1.0]]

        assert cluster_items(items, embeddings, min_samples=2) == [["listen", "hear"], ["dance"]]

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            cluster_items(["a", "b"], [[1.0, 0.0]])

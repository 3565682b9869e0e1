"""
Tests for PageRank over the moral graph.
"""

import pytest

from values_tools.pagerank import (
    RankingStrategy,
    page_rank,
    unweighted_page_rank,
    weighted_page_rank,
)
from values_tools.tests.conftest import make_edge


class TestPageRank:
    """Both strategies."""

    @pytest.mark.parametrize("rank_fn", [weighted_page_rank, unweighted_page_rank])
    def test_sums_to_one(self, rank_fn):
        edges = [
            make_edge(1, 2, 0.9),
            make_edge(1, 3, 0.4),
            make_edge(2, 3, 0.6),
            make_edge(4, 3, 0.5),
            make_edge(3, 5, 0.7),
        ]
        ranks = rank_fn(edges)

        assert set(ranks) == {1, 2, 3, 4, 5}
        assert sum(ranks.values()) == pytest.approx(1.0, abs=1e-9)
        assert all(r > 0 for r in ranks.values())

    @pytest.mark.parametrize("rank_fn", [weighted_page_rank, unweighted_page_rank])
    def test_deterministic(self, rank_fn):
        edges = [make_edge(1, 2, 0.8), make_edge(2, 3, 0.5), make_edge(3, 1, 0.4)]
        assert rank_fn(edges) == rank_fn(edges)

    def test_chain_ordering(self):
        """Rank flows towards the wiser end of a chain."""
        ranks = weighted_page_rank([make_edge(1, 2), make_edge(2, 3)])

        assert ranks[3] > ranks[2] > ranks[1]

    def test_weighted_prefers_likelier_upgrade(self):
        edges = [make_edge(1, 2, 0.9), make_edge(1, 3, 0.1)]

        weighted = weighted_page_rank(edges)
        unweighted = unweighted_page_rank(edges)

        assert weighted[2] > weighted[3]
        assert unweighted[2] == pytest.approx(unweighted[3])

    def test_non_positive_weight_ignored(self):
        """Edges with non-positive likelihood carry no rank."""
        ranks = weighted_page_rank([make_edge(1, 2, -0.5), make_edge(3, 4, 0.5)])

        assert ranks[1] == pytest.approx(ranks[2])
        assert ranks[4] > ranks[3]
        assert sum(ranks.values()) == pytest.approx(1.0, abs=1e-9)

    def test_empty(self):
        assert weighted_page_rank([]) == {}
        assert unweighted_page_rank([]) == {}

    @pytest.mark.parametrize("damping", [0.0, 1.0, -0.1, 1.5])
    def test_invalid_damping(self, damping):
        with pytest.raises(ValueError):
            weighted_page_rank([make_edge(1, 2)], damping_factor=damping)

    def test_invalid_iterations(self):
        with pytest.raises(ValueError):
            unweighted_page_rank([make_edge(1, 2)], iterations=0)


class TestDispatch:
    """page_rank() routes to the chosen strategy."""

    def test_weighted(self):
        edges = [make_edge(1, 2, 0.9), make_edge(1, 3, 0.1)]
        assert page_rank(edges, RankingStrategy.WEIGHTED) == weighted_page_rank(edges)

    def test_unweighted(self):
        edges = [make_edge(1, 2, 0.9), make_edge(1, 3, 0.1)]
        assert page_rank(edges, RankingStrategy.UNWEIGHTED) == unweighted_page_rank(edges)

    def test_parameters_forwarded(self):
        edges = [make_edge(1, 2), make_edge(2, 3)]
        assert page_rank(edges, RankingStrategy.WEIGHTED, damping_factor=0.5, iterations=3) == \
            weighted_page_rank(edges, damping_factor=0.5, iterations=3)

    def test_unknown_strategy(self):
        with pytest.raises(ValueError):
            page_rank([make_edge(1, 2)], "weighted")

"""
Tests for summarize_graph().
"""

import pytest

from values_tools.aggregation import us_political_affiliation_summarizer
from values_tools.moral_graph import SummaryOptions, summarize_graph
from values_tools.pagerank import RankingStrategy
from values_tools.types import ComparisonEvent, Value


def ev(from_id, to_id, type, context="ctxA", demographics=None):
    return ComparisonEvent(from_id, to_id, context, type, demographics)


@pytest.fixture
def values():
    return [Value(id=i, policies=[f"policy {i}"]) for i in (1, 2, 3, 4)]


@pytest.fixture
def events():
    """1 -> 2 is a confident upgrade, 2 -> 3 has one vote, 4 is never compared."""
    return (
        [ev(1, 2, "upgrade", "ctxA")] * 3
        + [ev(1, 2, "no_upgrade", "ctxB")]
        + [ev(2, 3, "upgrade", "ctxC")]
    )


class TestSummarizeGraph:
    """Aggregation, filtering and projection."""

    def test_default_options(self, values, events):
        graph = summarize_graph(values, events)

        assert [e.key for e in graph.edges] == [(1, 2)]
        assert [v.id for v in graph.values] == [1, 2]
        assert graph.all_edges is None
        assert all(v.page_rank is None for v in values)
        assert all(v.contexts is None for v in values)

    def test_edge_statistics(self, values, events):
        edge = summarize_graph(values, events).edges[0]

        assert edge.summary.wiser_likelihood == pytest.approx(0.75)
        assert edge.summary.entropy == pytest.approx(0.811, abs=1e-3)
        assert edge.contexts == ["ctxA", "ctxB"]

    def test_projection_invariant(self, values, events):
        """Every edge endpoint is in values, every value is an edge endpoint."""
        graph = summarize_graph(values, events, SummaryOptions(marked_wiser_threshold=1))

        endpoints = {n for e in graph.edges for n in e.key}
        assert {v.id for v in graph.values} == endpoints

    def test_all_edges(self, values, events):
        graph = summarize_graph(values, events, SummaryOptions(include_all_edges=True))

        keys = {e.key for e in graph.all_edges}
        assert keys == {(1, 2), (2, 1), (2, 3), (3, 2)}

    def test_page_rank(self, values, events):
        options = SummaryOptions(
            include_page_rank=True,
            ranking_strategy=RankingStrategy.WEIGHTED,
            marked_wiser_threshold=1,
        )
        graph = summarize_graph(values, events, options)

        by_id = {v.id: v for v in values}
        assert by_id[3].page_rank > by_id[2].page_rank > by_id[1].page_rank
        # Unreferenced values get no rank
        assert by_id[4].page_rank is None
        assert sum(v.page_rank for v in graph.values) == pytest.approx(1.0, abs=1e-9)

    def test_page_rank_requires_strategy(self, values, events):
        with pytest.raises(ValueError):
            summarize_graph(values, events, SummaryOptions(include_page_rank=True))

    def test_contexts(self, values, events):
        summarize_graph(values, events, SummaryOptions(include_contexts=True))

        by_id = {v.id: v for v in values}
        assert by_id[2].contexts == {"ctxA", "ctxB"}
        assert by_id[1].contexts == set()
        assert by_id[3].contexts == set()

    def test_demographics(self, values):
        events = [
            ev(1, 2, "upgrade", demographics={"usPoliticalAffiliation": "Democrat"}),
            ev(1, 2, "upgrade", demographics={"usPoliticalAffiliation": "Democrat"}),
        ]
        options = SummaryOptions(
            include_demographics=True,
            demographics_summarizer=us_political_affiliation_summarizer,
        )
        graph = summarize_graph(values, events, options)

        assert graph.edges[0].summary.demographics["main_us_political_affiliation"] == "Democrat"

    def test_no_events(self, values):
        graph = summarize_graph(values, [])

        assert graph.values == []
        assert graph.edges == []

    def test_rebuilt_each_call(self, values, events):
        first = summarize_graph(values, events)
        second = summarize_graph(values, events)

        assert first is not second
        assert [e.key for e in first.edges] == [e.key for e in second.edges]

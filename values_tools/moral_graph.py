"""
Moral Graph Summarization
=========================

Composes aggregation, filtering and (optional) ranking into a MoralGraph:

    events -> aggregate() -> filter_edges() -> referenced ids
           -> project values -> options (all edges, page rank, contexts)

The graph is rebuilt from scratch on every call.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from .aggregation import (
    DEFAULT_MARKED_WISER_THRESHOLD,
    DEFAULT_MAX_ENTROPY,
    DEFAULT_MIN_WISER_LIKELIHOOD,
    DemographicsSummarizer,
    aggregate,
    filter_edges,
)
from .pagerank import DEFAULT_DAMPING_FACTOR, DEFAULT_ITERATIONS, RankingStrategy, page_rank
from .types import ComparisonEvent, MoralGraph, Value

logger = logging.getLogger(__name__)


@dataclass
class SummaryOptions:
    """Options for summarize_graph(). Everything is off by default."""
    include_all_edges: bool = False
    include_page_rank: bool = False
    # Required when include_page_rank is set
    ranking_strategy: Optional[RankingStrategy] = None
    damping_factor: float = DEFAULT_DAMPING_FACTOR
    iterations: int = DEFAULT_ITERATIONS
    include_contexts: bool = False
    marked_wiser_threshold: int = DEFAULT_MARKED_WISER_THRESHOLD
    min_wiser_likelihood: float = DEFAULT_MIN_WISER_LIKELIHOOD
    max_entropy: float = DEFAULT_MAX_ENTROPY
    include_demographics: bool = False
    demographics_summarizer: Optional[DemographicsSummarizer] = None


def summarize_graph(
    values: Sequence[Value],
    events: Iterable[ComparisonEvent],
    options: Optional[SummaryOptions] = None,
) -> MoralGraph:
    """
    Summarize comparison events into a moral graph.

    Args:
        values: Candidate values (derived fields may be written in place)
        events: Comparison events
        options: SummaryOptions, defaults when omitted

    Returns:
        MoralGraph with the values referenced by surviving edges

    Raises:
        ValueError: include_page_rank without a ranking_strategy
    """
    options = options or SummaryOptions()
    if options.include_page_rank and options.ranking_strategy is None:
        raise ValueError("include_page_rank requires an explicit ranking_strategy")

    all_edges = list(aggregate(
        events,
        include_demographics=options.include_demographics,
        demographics_summarizer=options.demographics_summarizer,
    ).values())

    # Eliminate edges with low wiser likelihood, low signal, or no consensus.
    edges = filter_edges(
        all_edges,
        marked_wiser_threshold=options.marked_wiser_threshold,
        min_wiser_likelihood=options.min_wiser_likelihood,
        max_entropy=options.max_entropy,
    )

    referenced_ids = set()
    for edge in edges:
        referenced_ids.add(edge.source_value_id)
        referenced_ids.add(edge.wiser_value_id)

    if options.include_contexts:
        for value in values:
            value.contexts = {
                context
                for edge in edges if edge.wiser_value_id == value.id
                for context in edge.contexts
            }

    if options.include_page_rank:
        ranks = page_rank(
            edges,
            options.ranking_strategy,
            damping_factor=options.damping_factor,
            iterations=options.iterations,
        )
        for value in values:
            value.page_rank = ranks.get(value.id)

    graph_values: List[Value] = [v for v in values if v.id in referenced_ids]

    logger.info(
        f"Moral graph: {len(graph_values)} values, {len(edges)} edges "
        f"({len(all_edges)} before filtering)"
    )

    return MoralGraph(
        values=graph_values,
        edges=edges,
        all_edges=all_edges if options.include_all_edges else None,
    )

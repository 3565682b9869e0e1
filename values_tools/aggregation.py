"""
Edge Aggregation
================

Turns a multiset of pairwise comparison events into per-pair vote
counters, a wiser likelihood and an entropy, then filters pairs down to
statistically meaningful, directionally confident edges.

Every event touches two records:
    (from, to): impressions, contexts, and wiser / not wiser / unsure
    (to, from): impressions, contexts, and less wise (for upgrades)

A vote that B is wiser than A is also evidence, from B's side, that
A is less wise than B.
"""

import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .types import ComparisonEvent, EdgeCounts, EdgeSummary, EdgeType, MoralGraphEdge

logger = logging.getLogger(__name__)

DemographicsSummarizer = Callable[[List[Any]], Any]

# Retention defaults. max entropy is ~0.85 * log2(4).
DEFAULT_MARKED_WISER_THRESHOLD = 2
DEFAULT_MIN_WISER_LIKELIHOOD = 0.33
DEFAULT_MAX_ENTROPY = 1.69


def calculate_entropy(counts: Iterable[int]) -> float:
    """
    Shannon entropy (bits) of a categorical count distribution.

    Zero-mass categories are skipped. Returns 0.0 for an empty distribution
    or when all mass sits in one category.
    """
    counts = [c for c in counts if c > 0]
    total = sum(counts)
    if total == 0:
        return 0.0

    entropy = 0.0
    for count in counts:
        p = count / total
        entropy -= p * math.log2(p)
    # -0.0 for single-category distributions
    return abs(entropy)


def wiser_likelihood(counts: EdgeCounts) -> float:
    """Net fraction of judgments favoring the wiser endpoint, in [-1, 1]."""
    total = counts.total
    if total == 0:
        return 0.0
    return (counts.marked_wiser - counts.marked_less_wise) / total


@dataclass
class _RawEdge:
    source_value_id: int
    wiser_value_id: int
    contexts: List[str] = field(default_factory=list)
    demographics: List[Any] = field(default_factory=list)
    counts: EdgeCounts = field(default_factory=EdgeCounts)


class _PairMap:
    """Insertion-ordered map of (source, wiser) -> raw counters."""

    def __init__(self):
        self._data: Dict[Tuple[int, int], _RawEdge] = {}

    def get(self, a: int, b: int) -> _RawEdge:
        key = (a, b)
        if key not in self._data:
            self._data[key] = _RawEdge(source_value_id=a, wiser_value_id=b)
        return self._data[key]

    def items(self):
        return self._data.items()


def aggregate(
    events: Iterable[ComparisonEvent],
    include_demographics: bool = False,
    demographics_summarizer: Optional[DemographicsSummarizer] = None,
) -> Dict[Tuple[int, int], MoralGraphEdge]:
    """
    Aggregate comparison events into edges keyed by (source, wiser).

    Args:
        events: Comparison events (consumed once)
        include_demographics: Attach demographics to each edge summary
        demographics_summarizer: Optional reducer over an edge's per-event
            demographics; the raw list is attached when omitted

    Returns:
        Edges in first-seen order, unfiltered
    """
    events = list(events)
    pairs = _PairMap()

    for event in events:
        forward = pairs.get(event.from_id, event.to_id)
        forward.contexts.append(event.context_id)
        forward.counts.impressions += 1
        if event.type is EdgeType.UPGRADE:
            forward.counts.marked_wiser += 1
        elif event.type is EdgeType.NO_UPGRADE:
            forward.counts.marked_not_wiser += 1
        elif event.type is EdgeType.NOT_SURE:
            forward.counts.marked_unsure += 1
        else:
            raise ValueError(f"Unhandled edge type: {event.type!r}")
        if event.demographics is not None:
            forward.demographics.append(event.demographics)

    # Do the opposite.
    for event in events:
        reverse = pairs.get(event.to_id, event.from_id)
        reverse.contexts.append(event.context_id)
        reverse.counts.impressions += 1
        if event.type is EdgeType.UPGRADE:
            reverse.counts.marked_less_wise += 1

    edges: Dict[Tuple[int, int], MoralGraphEdge] = {}
    for key, raw in pairs.items():
        summary = EdgeSummary(
            wiser_likelihood=wiser_likelihood(raw.counts),
            entropy=calculate_entropy(raw.counts.categories()),
        )
        if include_demographics:
            if demographics_summarizer is not None:
                summary.demographics = demographics_summarizer(raw.demographics)
            else:
                summary.demographics = raw.demographics

        edges[key] = MoralGraphEdge(
            source_value_id=raw.source_value_id,
            wiser_value_id=raw.wiser_value_id,
            contexts=list(dict.fromkeys(raw.contexts)),
            counts=raw.counts,
            summary=summary,
        )

    logger.debug(f"Aggregated {len(events)} events into {len(edges)} directed edges")
    return edges


def passes_filter(
    edge: MoralGraphEdge,
    marked_wiser_threshold: int = DEFAULT_MARKED_WISER_THRESHOLD,
    min_wiser_likelihood: float = DEFAULT_MIN_WISER_LIKELIHOOD,
    max_entropy: float = DEFAULT_MAX_ENTROPY,
) -> bool:
    """Keep edges with enough wiser votes, a clear direction and consensus."""
    if not edge.counts.marked_wiser:
        return False
    if edge.summary.wiser_likelihood < min_wiser_likelihood:
        return False
    if edge.summary.entropy > max_entropy:
        return False
    if edge.counts.marked_wiser < marked_wiser_threshold:
        return False
    return True


def filter_edges(
    edges: Iterable[MoralGraphEdge],
    marked_wiser_threshold: int = DEFAULT_MARKED_WISER_THRESHOLD,
    min_wiser_likelihood: float = DEFAULT_MIN_WISER_LIKELIHOOD,
    max_entropy: float = DEFAULT_MAX_ENTROPY,
) -> List[MoralGraphEdge]:
    """Apply passes_filter() to every edge, preserving order."""
    return [
        edge for edge in edges
        if passes_filter(
            edge,
            marked_wiser_threshold=marked_wiser_threshold,
            min_wiser_likelihood=min_wiser_likelihood,
            max_entropy=max_entropy,
        )
    ]


# =============================================================================
# DEMOGRAPHICS SUMMARIZERS
# =============================================================================

MAIN_US_POLITICAL_AFFILIATIONS = ("Democrat", "Republican")


def us_political_affiliation_summarizer(demographics: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Count `usPoliticalAffiliation` across an edge's respondents.

    Only Democrat/Republican compete for the main affiliation; every
    affiliation is kept in the counts.
    """
    counts = Counter(
        d.get("usPoliticalAffiliation")
        for d in demographics
        if d and d.get("usPoliticalAffiliation")
    )

    main = None
    main_candidates = [
        (affiliation, n) for affiliation, n in counts.items()
        if affiliation in MAIN_US_POLITICAL_AFFILIATIONS
    ]
    if main_candidates:
        # Stable sort keeps first-seen affiliation on ties
        main = sorted(main_candidates, key=lambda item: -item[1])[0][0]

    return {
        "main_us_political_affiliation": main,
        "us_political_affiliation_counts": dict(counts),
    }

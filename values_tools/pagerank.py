"""
PageRank over the moral graph.

Two strategies are exposed and the caller must pick one:

    WEIGHTED:   an edge source -> wiser carries weight wiser_likelihood,
                each source splits its rank proportionally to edge weight
    UNWEIGHTED: each outgoing edge gets an equal share

Nodes are every source/wiser id referenced by the edge list. Iteration
count is fixed (no convergence check), so results are deterministic.
Mass held by nodes without usable outgoing edges is spread uniformly over
all nodes, which keeps the ranks summing to 1.
"""

import logging
from collections import defaultdict
from enum import Enum
from typing import Callable, Dict, List, Sequence, Tuple

from .types import MoralGraphEdge

logger = logging.getLogger(__name__)

PageRank = Dict[int, float]

DEFAULT_DAMPING_FACTOR = 0.85
DEFAULT_ITERATIONS = 100


class RankingStrategy(Enum):
    WEIGHTED = "weighted"
    UNWEIGHTED = "unweighted"


def _nodes(edges: Sequence[MoralGraphEdge]) -> List[int]:
    return list(dict.fromkeys(
        node for edge in edges for node in (edge.source_value_id, edge.wiser_value_id)
    ))


def _power_iteration(
    edges: Sequence[MoralGraphEdge],
    weight_fn: Callable[[MoralGraphEdge], float],
    damping_factor: float,
    iterations: int,
) -> PageRank:
    if not 0 < damping_factor < 1:
        raise ValueError(f"damping_factor must be in (0, 1), got {damping_factor}")
    if iterations < 1:
        raise ValueError(f"iterations must be >= 1, got {iterations}")

    nodes = _nodes(edges)
    if not nodes:
        return {}
    n = len(nodes)

    # source -> [(wiser, share of source's outgoing weight)]
    outgoing: Dict[int, List[Tuple[int, float]]] = defaultdict(list)
    total_weight: Dict[int, float] = defaultdict(float)
    for edge in edges:
        w = max(weight_fn(edge), 0.0)
        outgoing[edge.source_value_id].append((edge.wiser_value_id, w))
        total_weight[edge.source_value_id] += w

    shares: Dict[int, List[Tuple[int, float]]] = {
        source: [(wiser, w / total_weight[source]) for wiser, w in targets if w > 0]
        for source, targets in outgoing.items()
        if total_weight[source] > 0
    }

    rank: PageRank = {node: 1.0 / n for node in nodes}

    for _ in range(iterations):
        dangling = sum(rank[node] for node in nodes if node not in shares)
        base = (1.0 - damping_factor) / n + damping_factor * dangling / n
        new_rank: PageRank = {node: base for node in nodes}

        for source, targets in shares.items():
            for wiser, share in targets:
                new_rank[wiser] += damping_factor * rank[source] * share

        rank = new_rank

    return rank


def weighted_page_rank(
    edges: Sequence[MoralGraphEdge],
    damping_factor: float = DEFAULT_DAMPING_FACTOR,
    iterations: int = DEFAULT_ITERATIONS,
) -> PageRank:
    """PageRank with transition weights proportional to wiser_likelihood."""
    return _power_iteration(
        edges, lambda edge: edge.summary.wiser_likelihood, damping_factor, iterations
    )


def unweighted_page_rank(
    edges: Sequence[MoralGraphEdge],
    damping_factor: float = DEFAULT_DAMPING_FACTOR,
    iterations: int = DEFAULT_ITERATIONS,
) -> PageRank:
    """PageRank where every outgoing edge gets an equal share."""
    return _power_iteration(edges, lambda edge: 1.0, damping_factor, iterations)


def page_rank(
    edges: Sequence[MoralGraphEdge],
    strategy: RankingStrategy,
    damping_factor: float = DEFAULT_DAMPING_FACTOR,
    iterations: int = DEFAULT_ITERATIONS,
) -> PageRank:
    """Dispatch to the ranking strategy chosen by the caller."""
    if strategy is RankingStrategy.WEIGHTED:
        return weighted_page_rank(edges, damping_factor, iterations)
    if strategy is RankingStrategy.UNWEIGHTED:
        return unweighted_page_rank(edges, damping_factor, iterations)
    raise ValueError(f"Unknown ranking strategy: {strategy!r}")

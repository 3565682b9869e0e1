"""
Core Types for the Moral Graph
==============================

This module contains pure data structures with no algorithms.
All computation is in separate modules.

  Value:            A bundle of attention policies (one source of meaning)
  ComparisonEvent:  One respondent's judgment between two values in a context
  MoralGraphEdge:   Aggregated judgments for an ordered (source, wiser) pair
  MoralGraph:       Filtered edges plus the values they reference
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Set, Tuple


# =============================================================================
# ENUMS
# =============================================================================

class EdgeType(Enum):
    """Judgment recorded for a (from, to) pair of values."""
    UPGRADE = "upgrade"         # `to` is wiser than `from`
    NO_UPGRADE = "no_upgrade"   # `to` is not wiser than `from`
    NOT_SURE = "not_sure"       # Respondent could not tell


# =============================================================================
# VALUES
# =============================================================================

@dataclass
class Value:
    """
    A value represented by a set of attention policies.

    `page_rank` and `contexts` are derived fields, written only by
    summarize_graph() when the matching option is enabled.
    """
    id: int
    policies: List[str]
    title: Optional[str] = None
    description: Optional[str] = None
    embedding: Optional[List[float]] = None

    # Derived
    page_rank: Optional[float] = None
    contexts: Optional[Set[str]] = None

    def to_prompt_dict(self) -> dict:
        """Minimal representation sent to the language model."""
        return {"id": self.id, "policies": list(self.policies)}


# =============================================================================
# COMPARISON EVENTS (aggregation input)
# =============================================================================

@dataclass
class ComparisonEvent:
    """
    Judgment that `to_id` is (or is not) a wiser value than `from_id`
    in the situation named by `context_id`.
    """
    from_id: int
    to_id: int
    context_id: str
    type: EdgeType
    demographics: Optional[Any] = None

    def __post_init__(self):
        if not isinstance(self.type, EdgeType):
            # Raises ValueError for unknown tags
            self.type = EdgeType(self.type)


# =============================================================================
# AGGREGATED EDGES
# =============================================================================

@dataclass
class EdgeCounts:
    """Vote counters for one ordered (source, wiser) pair."""
    marked_wiser: int = 0
    marked_not_wiser: int = 0
    marked_less_wise: int = 0
    marked_unsure: int = 0
    impressions: int = 0

    def categories(self) -> Tuple[int, int, int, int]:
        """The four judgment categories (impressions excluded)."""
        return (
            self.marked_wiser,
            self.marked_not_wiser,
            self.marked_unsure,
            self.marked_less_wise,
        )

    @property
    def total(self) -> int:
        return sum(self.categories())


@dataclass
class EdgeSummary:
    """Derived statistics for an aggregated edge."""
    wiser_likelihood: float = 0.0
    entropy: float = 0.0
    demographics: Optional[Any] = None


@dataclass
class MoralGraphEdge:
    """Aggregated judgments that `wiser_value_id` is wiser than `source_value_id`."""
    source_value_id: int
    wiser_value_id: int
    contexts: List[str] = field(default_factory=list)
    counts: EdgeCounts = field(default_factory=EdgeCounts)
    summary: EdgeSummary = field(default_factory=EdgeSummary)

    @property
    def key(self) -> Tuple[int, int]:
        return (self.source_value_id, self.wiser_value_id)


@dataclass
class MoralGraph:
    """
    Filtered, weighted directed graph of "wiser than" relationships.

    `values` only holds values referenced by at least one edge.
    `all_edges` is populated only when requested (unfiltered edge list).
    """
    values: List[Value] = field(default_factory=list)
    edges: List[MoralGraphEdge] = field(default_factory=list)
    all_edges: Optional[List[MoralGraphEdge]] = None


# =============================================================================
# UPGRADES (generated wisdom transitions)
# =============================================================================

@dataclass
class UpgradeMapping:
    a: str
    rationale: str


@dataclass
class Upgrade:
    """A generated transition from value `a_id` to the wiser value `b_id`."""
    a_id: int
    b_id: int
    a_was_really_about: str
    clarification: str
    story: str
    likelihood_score: str
    mapping: List[UpgradeMapping] = field(default_factory=list)

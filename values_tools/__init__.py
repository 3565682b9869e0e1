"""
values_tools
============

Eliciting, deduplicating and aggregating values (sets of attention
policies), and summarizing pairwise "wiser than" judgments into a moral
graph.

ARCHITECTURE:
    ComparisonEvents → aggregate() → filter_edges() → page_rank() → MoralGraph
                       (summarize_graph composes all of it)

    Values/contexts → embeddings → cluster() → AI reconciliation per cluster
                                              → repair pass → partition

PUBLIC API:
- Value, ComparisonEvent, EdgeType, MoralGraph, MoralGraphEdge: Core types
- summarize_graph, SummaryOptions: Moral graph summarization
- weighted_page_rank, unweighted_page_rank, RankingStrategy: Ranking
- cluster, cluster_items: DBSCAN clustering (noise → singletons)
- deduplicate_values, deduplicate_contexts, get_representative_value,
  get_existing_duplicate_value, get_existing_duplicate_context: Reconciliation
- generate_upgrades, generate_upgrades_to_value, generate_value,
  generate_contexts: Generation
- LLMClient, Embedder, PromptCache, Settings, load_prompts: Collaborators
"""

from .types import (
    Value,
    EdgeType,
    ComparisonEvent,
    EdgeCounts,
    EdgeSummary,
    MoralGraphEdge,
    MoralGraph,
    Upgrade,
    UpgradeMapping,
)
from .errors import (
    ValuesToolsError,
    GenerationError,
    EmbeddingError,
    TargetMismatchError,
)
from .similarity import cosine_similarity, cosine_distance
from .clustering import cluster, cluster_items
from .aggregation import (
    aggregate,
    calculate_entropy,
    filter_edges,
    passes_filter,
    us_political_affiliation_summarizer,
)
from .pagerank import (
    RankingStrategy,
    page_rank,
    weighted_page_rank,
    unweighted_page_rank,
)
from .moral_graph import SummaryOptions, summarize_graph
from .deduplicate import (
    deduplicate_values,
    deduplicate_strings,
    deduplicate_contexts,
    cluster_and_deduplicate_values,
    get_representative_value,
    get_existing_duplicate_value,
    get_existing_duplicate_context,
    repair_partition,
)
from .upgrades import generate_upgrades, generate_upgrades_to_value
from .generation import generate_value, generated_value_to_value, generate_contexts
from .config import Settings, get_settings
from .prompts import Prompts, load_prompts
from .services import (
    CacheBackend,
    PromptCache,
    Embedder,
    LLMClient,
    StructuredGenerator,
    TextEmbedder,
)

__all__ = [
    # Types
    'Value',
    'EdgeType',
    'ComparisonEvent',
    'EdgeCounts',
    'EdgeSummary',
    'MoralGraphEdge',
    'MoralGraph',
    'Upgrade',
    'UpgradeMapping',

    # Errors
    'ValuesToolsError',
    'GenerationError',
    'EmbeddingError',
    'TargetMismatchError',

    # Clustering
    'cosine_similarity',
    'cosine_distance',
    'cluster',
    'cluster_items',

    # Moral graph
    'aggregate',
    'calculate_entropy',
    'filter_edges',
    'passes_filter',
    'us_political_affiliation_summarizer',
    'RankingStrategy',
    'page_rank',
    'weighted_page_rank',
    'unweighted_page_rank',
    'SummaryOptions',
    'summarize_graph',

    # Reconciliation
    'deduplicate_values',
    'deduplicate_strings',
    'deduplicate_contexts',
    'cluster_and_deduplicate_values',
    'get_representative_value',
    'get_existing_duplicate_value',
    'get_existing_duplicate_context',
    'repair_partition',

    # Generation
    'generate_upgrades',
    'generate_upgrades_to_value',
    'generate_value',
    'generated_value_to_value',
    'generate_contexts',

    # Collaborators
    'Settings',
    'get_settings',
    'Prompts',
    'load_prompts',
    'CacheBackend',
    'PromptCache',
    'Embedder',
    'LLMClient',
    'StructuredGenerator',
    'TextEmbedder',
]

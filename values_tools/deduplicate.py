"""
Deduplication - AI-assisted reconciliation of clustered values and contexts

Pipeline (values and contexts alike):

    items ─► embeddings ─► cluster() ─► one reconciliation call per cluster
                                         (concurrent, asyncio.gather)
                                                   │
                                          repair pass over all items
                                                   ▼
                                            final partition

Failure policy:
- Merge operations fall back to "unresolved": the cluster is kept as is
  (values) or every term stays its own group (contexts).
- Single-item lookups fall back to "no match" (None).
- Ids/terms the model returns that are not in the input are ignored.
- The repair pass re-adds any input item missing from every group as its
  own singleton group. No input is ever lost.

Embedding failures are NOT recovered: EmbeddingError propagates.
"""

import asyncio
import logging
from typing import Callable, Dict, Hashable, Iterable, List, Optional, Sequence, TypeVar

from .clustering import DEFAULT_EPS, DEFAULT_MIN_SAMPLES, cluster_items
from .errors import GenerationError
from .schemas import (
    BestValueResult,
    DeduplicateValuesResult,
    ExistingDuplicateContextResult,
    ExistingDuplicateValueResult,
    SynonymGroupsResult,
)
from .services.embedding import TextEmbedder, value_embedding_text
from .services.llm import StructuredGenerator
from .types import Value

logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============================================================================
# PARTITION REPAIR
# =============================================================================

def repair_partition(
    items: Sequence[T],
    groups: Iterable[Iterable[Hashable]],
    key: Callable[[T], Hashable],
) -> List[List[T]]:
    """
    Map groups of keys back to items and make the result a partition.

    - Keys not matching any input item are dropped (and logged)
    - A key already placed in an earlier group is dropped
    - Groups left empty are dropped
    - Items missing from every group are appended as singletons
    """
    by_key = {key(item): item for item in items}
    placed = set()
    unknown = []
    result: List[List[T]] = []

    for group in groups:
        members = []
        for k in group:
            if k not in by_key:
                unknown.append(k)
                continue
            if k in placed:
                continue
            placed.add(k)
            members.append(by_key[k])
        if members:
            result.append(members)

    if unknown:
        logger.warning(f"Ignoring {len(unknown)} references not present in the input: {unknown[:10]}")

    missing = [item for item in items if key(item) not in placed]
    if missing:
        logger.debug(f"Repair pass: {len(missing)} items added back as singletons")
    result.extend([item] for item in missing)
    return result


def _value_id(value: Value) -> int:
    return value.id


def _check_unique_ids(values: Sequence[Value]):
    ids = [v.id for v in values]
    if len(set(ids)) != len(ids):
        raise ValueError("Value ids must be unique within a deduplication run")


# =============================================================================
# VALUES
# =============================================================================

async def deduplicate_values(
    values: Sequence[Value],
    llm: StructuredGenerator,
    prompt: str,
    context: Optional[str] = None,
) -> List[List[Value]]:
    """
    Split a cluster of values into groups sharing one source of meaning.

    Args:
        values: Values believed to be similar (unique ids)
        llm: Structured generator
        prompt: Deduplicate-values system prompt
        context: Optional choice type / context the values were articulated for

    Returns:
        Groups of values; their union is exactly the input. On generation
        failure the input is returned as one unsplit group.
    """
    values = list(values)
    if not values:
        return []
    _check_unique_ids(values)
    if len(values) == 1:
        return [[values[0]]]

    data = {"values": [v.to_prompt_dict() for v in values]}
    if context:
        data["context"] = context

    try:
        result = await llm.gen_obj(prompt=prompt, data=data, schema=DeduplicateValuesResult)
    except GenerationError as e:
        logger.warning(f"Value deduplication failed, keeping {len(values)} values unsplit: {e}")
        return [values]

    for c in result.clusters:
        if len(c.value_ids) > 1 and c.explanation:
            logger.debug(f"Merged {c.value_ids}: {c.explanation}")

    return repair_partition(values, (c.value_ids for c in result.clusters), key=_value_id)


async def get_representative_value(
    values: Sequence[Value],
    llm: StructuredGenerator,
    prompt: str,
) -> Value:
    """
    Pick the best formulated value from a group representing one source of meaning.

    Falls back to the first candidate when generation fails or the model
    picks an id that is not a candidate.
    """
    values = list(values)
    if not values:
        raise ValueError("get_representative_value() needs at least one value")
    if len(values) == 1:
        return values[0]

    try:
        result = await llm.gen_obj(
            prompt=prompt,
            data={"values": [v.to_prompt_dict() for v in values]},
            schema=BestValueResult,
        )
    except GenerationError as e:
        logger.warning(f"Representative selection failed, using value {values[0].id}: {e}")
        return values[0]

    for value in values:
        if value.id == result.best_value_id:
            return value

    logger.warning(
        f"Model picked value {result.best_value_id} which is not a candidate, "
        f"using value {values[0].id}"
    )
    return values[0]


async def get_existing_duplicate_value(
    value: Value,
    candidates: Sequence[Value],
    llm: StructuredGenerator,
    prompt: str,
) -> Optional[Value]:
    """
    Find the canonical value that `value` duplicates, if any.

    Returns None for "no match", including on any generation failure.
    """
    if not candidates:
        return None

    try:
        result = await llm.gen_obj(
            prompt=prompt,
            data={
                "value": value.to_prompt_dict(),
                "candidates": [c.to_prompt_dict() for c in candidates],
            },
            schema=ExistingDuplicateValueResult,
        )
    except GenerationError as e:
        logger.warning(f"Duplicate lookup for value {value.id} failed, treating as no match: {e}")
        return None

    if result.duplicate_id is None:
        return None

    for candidate in candidates:
        if candidate.id == result.duplicate_id:
            return candidate

    logger.warning(
        f"Duplicate lookup for value {value.id} returned unknown id {result.duplicate_id}, "
        f"treating as no match"
    )
    return None


async def cluster_and_deduplicate_values(
    values: Sequence[Value],
    llm: StructuredGenerator,
    embedder: TextEmbedder,
    prompt: str,
    context: Optional[str] = None,
    eps: float = DEFAULT_EPS,
    min_samples: int = DEFAULT_MIN_SAMPLES,
) -> List[List[Value]]:
    """
    Embed, cluster and reconcile a set of values.

    Values without an embedding are embedded first and the embedding is
    attached to them. Each density cluster is reconciled concurrently.

    Raises:
        EmbeddingError: embeddings could not be computed
    """
    values = list(values)
    if not values:
        return []
    _check_unique_ids(values)

    missing = [v for v in values if v.embedding is None]
    if missing:
        embeddings = await embedder.embed_texts([value_embedding_text(v) for v in missing])
        for value, embedding in zip(missing, embeddings):
            value.embedding = embedding

    clusters = cluster_items(
        values, [v.embedding for v in values], eps=eps, min_samples=min_samples
    )
    logger.info(f"🔬 {len(values)} values -> {len(clusters)} density clusters")

    reconciled = await asyncio.gather(*(
        deduplicate_values(c, llm, prompt, context=context) for c in clusters
    ))

    groups = [[v.id for v in group] for cluster_groups in reconciled for group in cluster_groups]
    result = repair_partition(values, groups, key=_value_id)

    logger.info(f"✅ Deduplicated {len(values)} values into {len(result)} groups")
    return result


# =============================================================================
# CONTEXTS (choice types)
# =============================================================================

def _groups_to_synonym_map(groups: List[List[str]]) -> Dict[str, List[str]]:
    # The last term of each group is its representative
    return {group[-1]: group for group in groups}


async def deduplicate_strings(
    strings: Sequence[str],
    llm: StructuredGenerator,
    prompt: str,
) -> Dict[str, List[str]]:
    """
    Group synonymous terms.

    Returns:
        representative -> synonym group (the representative is the group's
        last term). Every input term appears in exactly one group; on
        generation failure every term is its own group.
    """
    unique = list(dict.fromkeys(strings))
    if not unique:
        return {}
    if len(unique) == 1:
        return {unique[0]: [unique[0]]}

    try:
        result = await llm.gen_obj(
            prompt=prompt,
            data={"terms": unique},
            schema=SynonymGroupsResult,
        )
        groups = result.synonym_groups
    except GenerationError as e:
        logger.warning(f"Synonym grouping failed, keeping {len(unique)} terms separate: {e}")
        groups = []

    return _groups_to_synonym_map(repair_partition(unique, groups, key=lambda s: s))


async def get_existing_duplicate_context(
    context: str,
    candidates: Sequence[str],
    llm: StructuredGenerator,
    prompt: str,
) -> Optional[str]:
    """
    Find the canonical context that `context` duplicates, if any.

    Returns None for "no match", including on any generation failure.
    """
    if not candidates:
        return None
    if context in candidates:
        return context

    try:
        result = await llm.gen_obj(
            prompt=prompt,
            data={
                "context": context,
                "candidates": [{"index": i, "context": c} for i, c in enumerate(candidates)],
            },
            schema=ExistingDuplicateContextResult,
        )
    except GenerationError as e:
        logger.warning(f"Duplicate lookup for context '{context}' failed, treating as no match: {e}")
        return None

    index = result.duplicate_index
    if index is None:
        return None
    if not 0 <= index < len(candidates):
        logger.warning(
            f"Duplicate lookup for context '{context}' returned out-of-range index {index}, "
            f"treating as no match"
        )
        return None
    return candidates[index]


async def deduplicate_contexts(
    contexts: Sequence[str],
    llm: StructuredGenerator,
    embedder: TextEmbedder,
    prompt: str,
    use_dbscan: bool = True,
    eps: float = DEFAULT_EPS,
    min_samples: int = DEFAULT_MIN_SAMPLES,
) -> Dict[str, List[str]]:
    """
    Deduplicate contexts (choice types) into synonym groups.

    With use_dbscan the contexts are embedded and clustered first, which
    keeps each prompt small; otherwise all contexts go into one prompt.

    Returns:
        representative -> synonym group, covering every unique input context

    Raises:
        EmbeddingError: embeddings could not be computed
    """
    unique = list(dict.fromkeys(contexts))
    if not unique:
        return {}

    if use_dbscan:
        embeddings = await embedder.embed_texts(unique)
        clusters = cluster_items(unique, embeddings, eps=eps, min_samples=min_samples)
    else:
        clusters = [unique]
    logger.info(f"🔬 {len(unique)} contexts -> {len(clusters)} clusters")

    mappings = await asyncio.gather(*(
        deduplicate_strings(c, llm, prompt) for c in clusters
    ))

    groups = [group for mapping in mappings for group in mapping.values()]
    result = _groups_to_synonym_map(repair_partition(unique, groups, key=lambda s: s))

    logger.info(f"✅ Deduplicated {len(unique)} contexts into {len(result)} groups")
    return result

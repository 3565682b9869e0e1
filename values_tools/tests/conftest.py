"""
Pytest configuration and fakes for values_tools tests.

Async tests run under pytest-asyncio (asyncio_mode = auto, see pyproject.toml).
"""

from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import pytest

from values_tools.errors import GenerationError
from values_tools.services.embedding import value_embedding_text
from values_tools.types import EdgeCounts, EdgeSummary, MoralGraphEdge, Value


def pytest_configure(config):
    """Configure pytest with asyncio marker."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as an async test."
    )


# =============================================================================
# FAKE COLLABORATORS
# =============================================================================

Response = Union[Dict[str, Any], Callable[[Dict[str, Any]], Dict[str, Any]]]


class FakeGenerator:
    """
    Scripted StructuredGenerator.

    `responses` maps a schema class to a payload (or a function of the
    rendered input data returning a payload). Every call is recorded.
    """

    def __init__(self, responses: Optional[Dict[type, Response]] = None, error: Optional[Exception] = None):
        self.responses = responses or {}
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def gen_obj(self, prompt, data, schema, temperature=None):
        self.calls.append({
            "prompt": prompt,
            "data": data,
            "schema": schema,
            "temperature": temperature,
        })
        if self.error is not None:
            raise self.error

        for scripted_schema, response in self.responses.items():
            if issubclass(schema, scripted_schema):
                if callable(response):
                    response = response(data)
                return schema.model_validate(response)
        raise GenerationError(f"No scripted response for {schema.__name__}")


class FakeEmbedder:
    """TextEmbedder returning fixed vectors per text."""

    def __init__(self, vectors: Optional[Dict[str, Sequence[float]]] = None, error: Optional[Exception] = None):
        self.vectors = vectors or {}
        self.error = error
        self.calls: List[List[str]] = []

    async def embed_texts(self, texts):
        self.calls.append(list(texts))
        if self.error is not None:
            raise self.error
        return [list(self.vectors[t]) for t in texts]

    async def embed_text(self, text):
        return (await self.embed_texts([text]))[0]

    async def embed_value(self, value):
        return await self.embed_text(value_embedding_text(value))


# =============================================================================
# FIXTURES / HELPERS
# =============================================================================

@pytest.fixture
def failing_llm():
    """Generator that always fails."""
    return FakeGenerator(error=GenerationError("provider unavailable"))


@pytest.fixture
def sample_values():
    return [
        Value(id=1, policies=["MOMENTS where someone feels truly heard"]),
        Value(id=2, policies=["MOMENTS when a person feels listened to"]),
        Value(id=3, policies=["CHANGES in people when entrusted with self-determination"]),
        Value(id=4, policies=["INSIGHTS that emerge from grappling with hard questions"]),
    ]


def make_edge(
    source: int,
    wiser: int,
    wiser_likelihood: float = 1.0,
    entropy: float = 0.0,
    marked_wiser: int = 2,
) -> MoralGraphEdge:
    """Edge with preset summary, for ranking tests."""
    return MoralGraphEdge(
        source_value_id=source,
        wiser_value_id=wiser,
        contexts=["ctx"],
        counts=EdgeCounts(marked_wiser=marked_wiser, impressions=marked_wiser),
        summary=EdgeSummary(wiser_likelihood=wiser_likelihood, entropy=entropy),
    )

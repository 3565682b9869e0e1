"""
Embedder - text embeddings over the OpenAI embeddings API

Values are embedded from their sorted policies joined by newlines, so
the same policy set always maps to the same vector.
"""

import asyncio
import logging
from typing import List, Optional, Protocol, Sequence

from openai import AsyncOpenAI, OpenAIError

from ..config import Settings
from ..errors import EmbeddingError
from ..types import Value

logger = logging.getLogger(__name__)

# OpenAI accepts at most 2048 inputs per request
MAX_BATCH_SIZE = 2048


class TextEmbedder(Protocol):
    async def embed_text(self, text: str) -> List[float]: ...

    async def embed_texts(self, texts: Sequence[str]) -> List[List[float]]: ...

    async def embed_value(self, value: Value) -> List[float]: ...


def value_embedding_text(value: Value) -> str:
    """Text used to embed a value (does not mutate value.policies)."""
    return "\n".join(sorted(value.policies))


class Embedder:
    """Embedding client backed by AsyncOpenAI."""

    def __init__(
        self,
        openai_client: AsyncOpenAI,
        model: str = "text-embedding-3-large",
        dimensions: int = 1536,
        timeout: Optional[float] = 60.0,
        batch_size: int = MAX_BATCH_SIZE,
    ):
        self.openai = openai_client
        self.model = model
        self.dimensions = dimensions
        self.timeout = timeout
        self.batch_size = min(batch_size, MAX_BATCH_SIZE)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Embedder":
        return cls(
            AsyncOpenAI(api_key=settings.openai_api_key or None),
            model=settings.embedding_model,
            dimensions=settings.embedding_dimensions,
            timeout=settings.request_timeout,
        )

    async def _embed_batch(self, texts: List[str]) -> List[List[float]]:
        try:
            response = await asyncio.wait_for(
                self.openai.embeddings.create(
                    model=self.model,
                    input=texts,
                    dimensions=self.dimensions,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise EmbeddingError(f"{self.model} did not respond within {self.timeout}s") from e
        except OpenAIError as e:
            raise EmbeddingError(f"{self.model} request failed: {e}") from e

        data = sorted(response.data, key=lambda d: d.index)
        if len(data) != len(texts):
            raise EmbeddingError(
                f"Requested {len(texts)} embeddings but received {len(data)}"
            )
        return [list(d.embedding) for d in data]

    async def embed_texts(self, texts: Sequence[str]) -> List[List[float]]:
        """Embed texts, preserving order."""
        if not texts:
            return []

        embeddings: List[List[float]] = []
        for start in range(0, len(texts), self.batch_size):
            batch = list(texts[start:start + self.batch_size])
            embeddings.extend(await self._embed_batch(batch))

        logger.debug(f"Embedded {len(texts)} texts with {self.model}")
        return embeddings

    async def embed_text(self, text: str) -> List[float]:
        """Embed a single text."""
        return (await self._embed_batch([text]))[0]

    async def embed_value(self, value: Value) -> List[float]:
        """Embed a value from its sorted policies."""
        return await self.embed_text(value_embedding_text(value))

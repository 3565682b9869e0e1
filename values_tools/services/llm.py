"""
LLMClient - Structured object and text generation over the OpenAI chat API

Every structured call:
  1. Renders the named input sections into one user message
  2. Appends the pydantic schema (as JSON schema) to the system prompt
  3. Requests JSON mode and validates the reply against the schema
  4. Optionally consults / fills an injected cache

Any failure (provider, timeout, invalid JSON, schema mismatch) surfaces
as GenerationError. Callers decide whether to recover.
"""

import asyncio
import dataclasses
import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol, Type, TypeVar

from openai import AsyncOpenAI, OpenAIError
from pydantic import BaseModel, ValidationError

from ..config import Settings
from ..errors import GenerationError
from .cache import CacheBackend, make_key

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class StructuredGenerator(Protocol):
    """
    Anything that can generate a schema-validated object.

    The reconciliation and generation functions only depend on this,
    so tests (or other providers) can stand in for LLMClient.
    """
    async def gen_obj(
        self,
        prompt: str,
        data: Mapping[str, Any],
        schema: Type[M],
        temperature: Optional[float] = None,
    ) -> M:
        ...


# =============================================================================
# INPUT RENDERING
# =============================================================================

def _prune(value: Any) -> Any:
    """Convert to plain JSON types, dropping None and empty-string fields."""
    if isinstance(value, BaseModel):
        value = value.model_dump()
    elif dataclasses.is_dataclass(value) and not isinstance(value, type):
        value = dataclasses.asdict(value)

    if isinstance(value, Mapping):
        return {
            str(k): _prune(v) for k, v in value.items()
            if v is not None and v != ""
        }
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_prune(v) for v in value]
    return value


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return "\n\n".join(_stringify(v) for v in value)
    return json.dumps(_prune(value), indent=2, ensure_ascii=False)


def render_data(data: Mapping[str, Any]) -> str:
    """Render named sections as markdown: '# name' followed by the body."""
    return "\n\n".join(f"# {name}\n\n{_stringify(value)}" for name, value in data.items())


# =============================================================================
# CLIENT
# =============================================================================

class LLMClient:
    """
    Generation client backed by AsyncOpenAI.

    Counts calls in `llm_calls` (cache hits are not counted).
    """

    def __init__(
        self,
        openai_client: AsyncOpenAI,
        model: str = "gpt-4o",
        temperature: float = 0.0,
        timeout: Optional[float] = 60.0,
        cache: Optional[CacheBackend] = None,
    ):
        self.openai = openai_client
        self.model = model
        self.temperature = temperature
        self.timeout = timeout
        self.cache = cache
        self.llm_calls = 0

    @classmethod
    def from_settings(cls, settings: Settings, cache: Optional[CacheBackend] = None) -> "LLMClient":
        return cls(
            AsyncOpenAI(api_key=settings.openai_api_key or None),
            model=settings.default_model,
            temperature=settings.default_temperature,
            timeout=settings.request_timeout,
            cache=cache,
        )

    def _cache_get(self, key: Optional[str]) -> Optional[Any]:
        if self.cache is None or key is None:
            return None
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Cache hit!")
        return cached

    def _cache_set(self, key: Optional[str], value: Any):
        if self.cache is not None and key is not None:
            self.cache.set(key, value)

    async def _complete(
        self,
        messages: List[Dict[str, str]],
        model: str,
        temperature: float,
        json_mode: bool = False,
    ) -> str:
        """Single chat completion bounded by the client timeout."""
        self.llm_calls += 1

        kwargs: Dict[str, Any] = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = await asyncio.wait_for(
                self.openai.chat.completions.create(**kwargs),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise GenerationError(f"{model} did not respond within {self.timeout}s") from e
        except OpenAIError as e:
            raise GenerationError(f"{model} request failed: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise GenerationError(f"{model} returned an empty response")
        return content

    async def gen_obj(
        self,
        prompt: str,
        data: Mapping[str, Any],
        schema: Type[M],
        temperature: Optional[float] = None,
        model: Optional[str] = None,
    ) -> M:
        """
        Generate an object matching `schema`.

        Args:
            prompt: System prompt
            data: Named input sections, rendered with render_data()
            schema: Pydantic model the reply must validate against
            temperature: Overrides the client default
            model: Overrides the client default

        Raises:
            GenerationError: provider/timeout failure or invalid reply
        """
        model = model or self.model
        temperature = self.temperature if temperature is None else temperature
        rendered = render_data(data)
        json_schema = schema.model_json_schema()

        key = None
        if self.cache is not None:
            key = make_key(
                kind="obj",
                prompt=prompt,
                data=rendered,
                schema=json_schema,
                model=model,
                temperature=temperature,
            )
            cached = self._cache_get(key)
            if cached is not None:
                try:
                    return schema.model_validate(cached)
                except ValidationError:
                    logger.warning(f"Discarding cached {schema.__name__} that no longer validates")

        system = (
            f"{prompt}\n\n"
            "# Output format\n\n"
            "Respond with a single JSON object that validates against this JSON schema:\n\n"
            f"{json.dumps(json_schema, indent=2)}"
        )
        content = await self._complete(
            [
                {"role": "system", "content": system},
                {"role": "user", "content": rendered},
            ],
            model=model,
            temperature=temperature,
            json_mode=True,
        )

        try:
            result = schema.model_validate_json(content)
        except ValidationError as e:
            raise GenerationError(
                f"{model} reply does not match {schema.__name__}: {e.error_count()} errors"
            ) from e

        self._cache_set(key, result.model_dump(mode="json"))
        return result

    async def gen_text(
        self,
        prompt: str,
        user_message: str,
        temperature: Optional[float] = None,
        model: Optional[str] = None,
    ) -> str:
        """Generate free text from a system prompt and one user message."""
        return await self.gen_text_messages(
            [{"role": "user", "content": user_message}],
            system_prompt=prompt,
            temperature=temperature,
            model=model,
        )

    async def gen_text_messages(
        self,
        messages: List[Dict[str, str]],
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        model: Optional[str] = None,
    ) -> str:
        """Generate free text continuing a conversation."""
        model = model or self.model
        temperature = self.temperature if temperature is None else temperature

        full_messages = list(messages)
        if system_prompt:
            full_messages = [{"role": "system", "content": system_prompt}] + full_messages

        key = None
        if self.cache is not None:
            key = make_key(
                kind="text",
                messages=full_messages,
                model=model,
                temperature=temperature,
            )
            cached = self._cache_get(key)
            if cached is not None:
                return cached

        text = await self._complete(full_messages, model=model, temperature=temperature)
        self._cache_set(key, text)
        return text

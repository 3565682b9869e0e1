"""
External collaborators: generation, embeddings and the prompt cache.
"""

from .cache import CacheBackend, PromptCache, make_key
from .embedding import Embedder, TextEmbedder, value_embedding_text
from .llm import LLMClient, StructuredGenerator, render_data

__all__ = [
    'CacheBackend',
    'PromptCache',
    'make_key',
    'Embedder',
    'TextEmbedder',
    'value_embedding_text',
    'LLMClient',
    'StructuredGenerator',
    'render_data',
]

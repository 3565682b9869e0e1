"""
Simple in-memory cache for generation results
"""

import hashlib
import json
import time
from threading import Lock
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from ..config import Settings


@runtime_checkable
class CacheBackend(Protocol):
    """Anything with get/set can back the generation cache."""

    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any) -> None: ...


def make_key(**parts: Any) -> str:
    """Deterministic cache key from request parameters."""
    payload = json.dumps(parts, sort_keys=True, default=str)
    return hashlib.sha256(payload.encode()).hexdigest()


class PromptCache:
    """Thread-safe in-memory cache with optional TTL"""

    def __init__(self, default_ttl: Optional[int] = None):  # None = never expire
        self.cache: Dict[str, tuple[Any, Optional[float]]] = {}
        self.lock = Lock()
        self.default_ttl = default_ttl
        self.hits = 0
        self.misses = 0

    @classmethod
    def from_settings(cls, settings: Settings) -> "PromptCache":
        return cls(default_ttl=settings.cache_ttl)

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache if not expired"""
        with self.lock:
            if key in self.cache:
                value, expiry = self.cache[key]
                if expiry is None or time.time() < expiry:
                    self.hits += 1
                    return value
                # Clean up expired entry
                del self.cache[key]
            self.misses += 1
            return None

    def set(self, key: str, value: Any, ttl: Optional[int] = None):
        """Set value in cache with TTL (seconds)"""
        ttl = ttl if ttl is not None else self.default_ttl
        expiry = time.time() + ttl if ttl is not None else None
        with self.lock:
            self.cache[key] = (value, expiry)

    def delete(self, key: str):
        """Delete entry from cache"""
        with self.lock:
            self.cache.pop(key, None)

    def clear(self):
        """Clear all cache entries"""
        with self.lock:
            self.cache.clear()

    def cleanup_expired(self):
        """Remove all expired entries"""
        now = time.time()
        with self.lock:
            expired_keys = [
                k for k, (_, expiry) in self.cache.items()
                if expiry is not None and now >= expiry
            ]
            for key in expired_keys:
                del self.cache[key]

    def __len__(self) -> int:
        with self.lock:
            return len(self.cache)

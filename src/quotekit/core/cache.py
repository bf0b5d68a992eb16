"""In-process TTL cache used for quote session state."""

import time
from typing import Any

from beartype import beartype
from pydantic import BaseModel, ConfigDict, Field


@beartype
class CacheEntry(BaseModel):
    """Cache entry with value and expiry metadata."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_assignment=True,
        str_strip_whitespace=True,
        validate_default=True,
    )

    value: Any = Field(..., description="Cached value")
    ttl_seconds: int = Field(default=300, ge=0, description="Time to live in seconds")
    expires_at: float = Field(..., description="Monotonic deadline of the entry")


@beartype
class CacheStore(BaseModel):
    """Internal cache storage."""

    model_config = ConfigDict(
        frozen=False,  # Mutable for cache operations
        extra="forbid",
        validate_assignment=True,
        str_strip_whitespace=True,
        validate_default=True,
    )

    entries: dict[str, CacheEntry] = Field(
        default_factory=dict, description="Cache entries"
    )


class Cache:
    """Key/value cache with per-entry expiry.

    A ttl of 0 keeps the entry until it is deleted.
    """

    def __init__(self) -> None:
        """Initialize an empty cache."""
        self._store = CacheStore()

    @beartype
    async def get(self, key: str) -> Any | None:
        """Get value from cache, dropping it if expired."""
        entry = self._store.entries.get(key)
        if entry is None:
            return None
        if entry.ttl_seconds and time.monotonic() >= entry.expires_at:
            del self._store.entries[key]
            return None
        return entry.value

    @beartype
    async def set(self, key: str, value: Any, ttl_seconds: int = 300) -> None:
        """Set value in cache, sweeping out expired entries first."""
        now = time.monotonic()
        self._purge_expired(now)
        entry = CacheEntry(
            value=value,
            ttl_seconds=ttl_seconds,
            expires_at=now + ttl_seconds,
        )
        self._store.entries[key] = entry

    def _purge_expired(self, now: float) -> None:
        expired = [
            key
            for key, entry in self._store.entries.items()
            if entry.ttl_seconds and now >= entry.expires_at
        ]
        for key in expired:
            del self._store.entries[key]

    @beartype
    async def delete(self, key: str) -> bool:
        """Remove a key; returns whether it existed."""
        return self._store.entries.pop(key, None) is not None

    @beartype
    async def clear(self) -> None:
        """Drop every entry."""
        self._store.entries.clear()


_cache: Cache | None = None


@beartype
def get_cache() -> Cache:
    """Get cache instance."""
    global _cache
    if _cache is None:
        _cache = Cache()
    return _cache

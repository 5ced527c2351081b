"""TTL cache for price records.

Backends are plain key -> string stores with per-entry expiry. PriceCache
layers the cache-or-fetch policy on top: live entries short-circuit the
upstream call, successes are stored for ``ttl_seconds``, and failures are
never stored so the next request retries immediately.

Concurrent read-modify-write is not guarded. A lost update costs at most one
redundant upstream fetch.
"""

from __future__ import annotations

import hashlib
import logging
import threading
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol

import redis
from pydantic import ValidationError

from .models import PriceRecord

if TYPE_CHECKING:
    from .config import Settings

logger = logging.getLogger(__name__)

KEY_PREFIX = "cryptoticker:price:"


def cache_key(symbol: str, currency: str) -> str:
    """Deterministic key for a normalized (symbol, currency) pair."""
    digest = hashlib.md5(f"{symbol.upper()}_{currency.upper()}".encode()).hexdigest()
    return KEY_PREFIX + digest


class CacheBackend(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str, ttl_seconds: int) -> None: ...


class MemoryCache:
    """In-process backend: key -> (expires_epoch, value)."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._entries: dict[str, tuple[float, str]] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def get(self, key: str) -> str | None:
        """Return the value if not expired. Expired entries stay until overwritten."""
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() < expires_at:
            return value
        return None

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            self._entries[key] = (self._clock() + ttl_seconds, value)


class RedisCache:
    """Redis backend shared by every worker process; Redis handles expiry."""

    def __init__(self, client: redis.Redis):
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> RedisCache:
        return cls(redis.from_url(url))

    def get(self, key: str) -> str | None:
        """Return the stored value; an unreachable Redis counts as a miss."""
        try:
            raw = self._client.get(key)
        except redis.RedisError as e:
            logger.warning(f"Redis get failed for {key}: {e}")
            return None
        if raw is None:
            return None
        if isinstance(raw, bytes):
            return raw.decode("utf-8")
        return raw

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            self._client.set(key, value, ex=ttl_seconds)
        except redis.RedisError as e:
            logger.warning(f"Redis set failed for {key}: {e}")


def build_cache_backend(settings: Settings) -> CacheBackend:
    """Redis when ``cache_url`` is configured, otherwise in-process memory."""
    if settings.cache_url:
        logger.info("Using Redis price cache")
        return RedisCache.from_url(settings.cache_url)
    return MemoryCache()


class PriceCache:
    """Cache-or-fetch wrapper around a backend."""

    def __init__(self, backend: CacheBackend | None = None):
        self.backend = backend if backend is not None else MemoryCache()

    def get(self, symbol: str, currency: str) -> PriceRecord | None:
        """Return the live record for the pair, or None."""
        key = cache_key(symbol, currency)
        raw = self.backend.get(key)
        if raw is None:
            return None
        try:
            return PriceRecord.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable cache entry {key}: {e.error_count()} errors")
            return None

    def set(self, record: PriceRecord, ttl_seconds: int) -> None:
        key = cache_key(record.symbol, record.currency)
        self.backend.set(key, record.model_dump_json(), ttl_seconds)

    def get_or_fetch(
        self,
        symbol: str,
        currency: str,
        ttl_seconds: int,
        fetch_fn: Callable[[], PriceRecord],
    ) -> PriceRecord:
        """Return the cached record, or call ``fetch_fn`` once and cache its result.

        Exceptions from ``fetch_fn`` propagate and leave the backend untouched.
        """
        cached = self.get(symbol, currency)
        if cached is not None:
            logger.debug(f"Cache hit for {symbol}/{currency}")
            return cached

        logger.debug(f"Cache miss for {symbol}/{currency}")
        record = fetch_fn()
        self.set(record, ttl_seconds)
        return record

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Protocol

from pydantic import ValidationError
from redis import Redis
from redis.exceptions import RedisError

from priceticker.config.settings import MIN_CACHE_TTL_SECONDS, Settings
from priceticker.schemas.price import PricePayload

LOGGER = logging.getLogger(__name__)


def clamp_ttl(ttl_seconds: int | float) -> int:
    return max(MIN_CACHE_TTL_SECONDS, int(ttl_seconds))


class CacheStore(Protocol):
    """Key/value store for price payloads with time-based expiry."""

    def get(self, key: str) -> PricePayload | None:
        ...

    def set(self, key: str, value: PricePayload, ttl_seconds: int | None = None) -> None:
        ...


class InMemoryCache:
    """Process-local store. Expired entries are dropped lazily on read."""

    def __init__(
        self, ttl_seconds: int, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self.ttl_seconds = clamp_ttl(ttl_seconds)
        self._clock = clock
        self._entries: dict[str, tuple[PricePayload, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> PricePayload | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: PricePayload, ttl_seconds: int | None = None) -> None:
        ttl = clamp_ttl(ttl_seconds if ttl_seconds is not None else self.ttl_seconds)
        with self._lock:
            self._entries[key] = (value, self._clock() + ttl)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class RedisCache:
    """Shared store backed by Redis SETEX; Redis errors degrade to misses."""

    def __init__(
        self, redis_url: str, ttl_seconds: int, client: Redis | None = None
    ) -> None:
        self.redis_url = redis_url
        self.ttl_seconds = clamp_ttl(ttl_seconds)
        self._client = client

    def _get_client(self) -> Redis:
        if self._client is None:
            self._client = Redis.from_url(self.redis_url)
        return self._client

    def get(self, key: str) -> PricePayload | None:
        try:
            raw = self._get_client().get(key)
        except RedisError as exc:
            LOGGER.warning("Redis read failed for %s: %s", key, exc)
            return None

        if not raw:
            return None

        try:
            return PricePayload.model_validate_json(raw)
        except ValidationError:
            LOGGER.warning("Discarding undecodable cache entry %s", key)
            return None

    def set(self, key: str, value: PricePayload, ttl_seconds: int | None = None) -> None:
        ttl = clamp_ttl(ttl_seconds if ttl_seconds is not None else self.ttl_seconds)
        try:
            self._get_client().setex(key, ttl, value.model_dump_json(by_alias=True))
        except RedisError as exc:
            LOGGER.warning("Redis write failed for %s: %s", key, exc)


def build_cache(config: Settings) -> CacheStore:
    if config.cache_backend == "redis":
        return RedisCache(config.redis_url, config.cache_ttl)
    return InMemoryCache(config.cache_ttl)

from __future__ import annotations

import hashlib
import json
import logging

from priceticker.cache import CacheStore, build_cache
from priceticker.config.settings import Settings
from priceticker.providers.base import PriceProvider
from priceticker.providers.remote import RemotePriceProvider
from priceticker.schemas.price import PricePayload, PriceResult

LOGGER = logging.getLogger(__name__)

DEFAULT_KEY_PREFIX = "priceticker"


def build_cache_key(id: str, currency: str, prefix: str = DEFAULT_KEY_PREFIX) -> str:
    encoded = json.dumps([id.lower(), currency.lower()])
    digest = hashlib.md5(encoded.encode("utf-8")).hexdigest()
    return f"{prefix}_{digest}"


class PriceService:
    """Cache-aside read-through over a price provider.

    Only successful payloads are written, so a failed fetch is retried on the
    next call instead of being pinned for the TTL window.
    """

    def __init__(
        self,
        provider: PriceProvider,
        cache: CacheStore,
        key_prefix: str = DEFAULT_KEY_PREFIX,
    ) -> None:
        self.provider = provider
        self.cache = cache
        self.key_prefix = key_prefix

    def cache_key(self, id: str, currency: str) -> str:
        return build_cache_key(id, currency, self.key_prefix)

    def get_price(self, id: str, currency: str) -> PriceResult:
        key = self.cache_key(id, currency)

        cached = self.cache.get(key)
        if cached is not None:
            LOGGER.debug("Cache hit for %s/%s", id, currency)
            return cached

        LOGGER.debug("Cache miss for %s/%s", id, currency)
        result = self.provider.get_price(id, currency)

        if isinstance(result, PricePayload):
            self.cache.set(key, result)
        return result


def build_price_service(config: Settings) -> PriceService:
    provider = RemotePriceProvider(config.base_url, timeout=config.request_timeout_seconds)
    return PriceService(provider, build_cache(config), key_prefix=config.cache_key_prefix)

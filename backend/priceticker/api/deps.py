from __future__ import annotations

import threading

from priceticker.config.settings import Settings, settings
from priceticker.services.price_service import PriceService, build_price_service

_service: PriceService | None = None
_service_lock = threading.Lock()


def get_settings() -> Settings:
    return settings


def get_price_service() -> PriceService:
    """FastAPI dependency; one service (and cache) per process."""
    global _service
    if _service is None:
        with _service_lock:
            if _service is None:
                _service = build_price_service(get_settings())
    return _service

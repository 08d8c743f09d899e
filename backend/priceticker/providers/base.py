"""Interface for upstream price sources."""

from __future__ import annotations

from typing import Protocol

from priceticker.schemas.price import PriceResult


class PriceProvider(Protocol):
    def get_price(self, id: str, currency: str) -> PriceResult:
        """Fetch one asset price. Failures come back as ``ErrorPayload``."""
        ...

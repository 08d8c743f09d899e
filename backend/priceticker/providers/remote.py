from __future__ import annotations

import datetime
import json
import logging
import math
import socket
from http.client import HTTPException
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from priceticker.schemas.price import ErrorPayload, PricePayload, PriceResult

LOGGER = logging.getLogger(__name__)

MISSING_BASE_URL = "Missing API base URL in settings."
UPSTREAM_ERROR = "Upstream API error."
MALFORMED_RESPONSE = "Malformed upstream response."
INVALID_BASE_URL = "Invalid API base URL in settings."

_PRICE_PATH = "/price/"
DEFAULT_TIMEOUT_SECONDS = 8.0


def _now_iso() -> str:
    return datetime.datetime.now(datetime.UTC).isoformat(timespec="seconds")


def _transport_message(exc: BaseException) -> str:
    reason = getattr(exc, "reason", None)
    message = str(reason if reason is not None else exc).strip()
    return message or exc.__class__.__name__


class RemotePriceProvider:
    """Reads ``{base_url}/price/{id}`` and normalizes the JSON body.

    Every call is a single round-trip. There is no caching and no retry here.
    """

    def __init__(self, base_url: str, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.base_url = (base_url or "").strip().rstrip("/")
        self.timeout = timeout

    def build_url(self, id: str) -> str:
        return f"{self.base_url}{_PRICE_PATH}{quote(id, safe='')}"

    def get_price(self, id: str, currency: str) -> PriceResult:
        if not self.base_url:
            return ErrorPayload(message=MISSING_BASE_URL)

        try:
            request = Request(self.build_url(id), headers={"Accept": "application/json"})
            with urlopen(request, timeout=self.timeout) as response:
                status = response.status
                body = response.read().decode("utf-8")
        except HTTPError as exc:
            LOGGER.warning("Upstream returned HTTP %s for %s", exc.code, id)
            return ErrorPayload(message=UPSTREAM_ERROR)
        except (URLError, HTTPException, TimeoutError, socket.timeout, OSError) as exc:
            LOGGER.warning("Upstream transport error for %s: %s", id, exc)
            return ErrorPayload(message=_transport_message(exc))
        except UnicodeDecodeError:
            LOGGER.warning("Upstream body for %s is not UTF-8", id)
            return ErrorPayload(message=MALFORMED_RESPONSE)
        except ValueError as exc:
            LOGGER.warning("Cannot request upstream URL for %s: %s", id, exc)
            return ErrorPayload(message=INVALID_BASE_URL)

        if status != 200 or not body.strip():
            LOGGER.warning("Upstream returned status %s with %d bytes for %s", status, len(body), id)
            return ErrorPayload(message=UPSTREAM_ERROR)

        try:
            data = json.loads(body)
        except json.JSONDecodeError:
            LOGGER.warning("Upstream body for %s is not JSON", id)
            return ErrorPayload(message=MALFORMED_RESPONSE)

        payload = normalize_payload(data, currency)
        if payload is None:
            LOGGER.warning("Upstream body for %s lacks id or price", id)
            return ErrorPayload(message=MALFORMED_RESPONSE)
        return payload


def normalize_payload(data: object, currency: str) -> PricePayload | None:
    """Map an upstream object onto ``PricePayload``; ``None`` if it is unusable."""
    if not isinstance(data, dict):
        return None
    asset_id = data.get("id")
    raw_price = data.get("price")
    if not asset_id or raw_price is None or isinstance(raw_price, bool):
        return None
    try:
        price = float(raw_price)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(price):
        return None

    name = data.get("name")
    symbol = data.get("symbol")
    upstream_currency = data.get("currency")
    cached_at = data.get("cachedAt")
    return PricePayload(
        id=str(asset_id),
        name=str(name) if name is not None else "",
        symbol=str(symbol).upper() if symbol is not None else "",
        price=price,
        currency=str(upstream_currency if upstream_currency is not None else currency).upper(),
        cached_at=str(cached_at) if cached_at is not None else _now_iso(),
    )

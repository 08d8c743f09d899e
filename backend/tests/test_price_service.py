from priceticker.cache import InMemoryCache
from priceticker.config.settings import Settings
from priceticker.providers.remote import RemotePriceProvider
from priceticker.schemas.price import ErrorPayload, PricePayload, PriceResult
from priceticker.services.price_service import PriceService, build_cache_key, build_price_service


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class FakeProvider:
    def __init__(self, results: list[PriceResult]) -> None:
        self.results = list(results)
        self.calls: list[tuple[str, str]] = []

    def get_price(self, id: str, currency: str) -> PriceResult:
        self.calls.append((id, currency))
        return self.results.pop(0)


def build_payload(price: float = 67000.5) -> PricePayload:
    return PricePayload(
        id="bitcoin",
        name="",
        symbol="BTC",
        price=price,
        currency="USD",
        cached_at="2026-01-01T00:00:00+00:00",
    )


def build_service(results: list[PriceResult], ttl: int = 60) -> tuple[PriceService, FakeProvider, InMemoryCache, FakeClock]:
    clock = FakeClock()
    cache = InMemoryCache(ttl_seconds=ttl, clock=clock)
    provider = FakeProvider(results)
    return PriceService(provider, cache), provider, cache, clock


def test_success_is_cached_and_served_without_upstream() -> None:
    payload = build_payload()
    service, provider, cache, _ = build_service([payload])

    first = service.get_price("bitcoin", "usd")
    second = service.get_price("bitcoin", "usd")

    assert first == payload
    assert second == payload
    assert provider.calls == [("bitcoin", "usd")]
    assert cache.get(build_cache_key("bitcoin", "usd")) == payload


def test_case_variants_share_one_entry() -> None:
    service, provider, _, _ = build_service([build_payload()])

    service.get_price("bitcoin", "usd")
    service.get_price("BitCoin", "USD")

    assert len(provider.calls) == 1


def test_expired_entry_triggers_new_fetch() -> None:
    service, provider, _, clock = build_service([build_payload(1.0), build_payload(2.0)], ttl=30)

    service.get_price("bitcoin", "USD")
    clock.now += 30
    result = service.get_price("bitcoin", "USD")

    assert len(provider.calls) == 2
    assert isinstance(result, PricePayload)
    assert result.price == 2.0


def test_error_is_not_cached_and_next_call_retries() -> None:
    error = ErrorPayload(message="Upstream API error.")
    payload = build_payload()
    service, provider, cache, _ = build_service([error, payload])

    assert service.get_price("bitcoin", "USD") == error
    assert len(cache) == 0

    assert service.get_price("bitcoin", "USD") == payload
    assert len(provider.calls) == 2
    assert len(cache) == 1


def test_zero_ttl_still_caches_for_minimum_window() -> None:
    service, provider, _, clock = build_service([build_payload(), build_payload()], ttl=0)

    service.get_price("bitcoin", "USD")
    clock.now += 0.5
    service.get_price("bitcoin", "USD")
    assert len(provider.calls) == 1

    clock.now += 0.5
    service.get_price("bitcoin", "USD")
    assert len(provider.calls) == 2


def test_build_price_service_wires_configuration() -> None:
    config = Settings(
        _env_file=None,
        base_url=" https://api.example.com/ ",
        cache_ttl=0,
        request_timeout_seconds=3,
        cache_key_prefix="ticker",
    )

    service = build_price_service(config)

    assert isinstance(service.provider, RemotePriceProvider)
    assert service.provider.base_url == "https://api.example.com"
    assert service.provider.timeout == 3
    assert isinstance(service.cache, InMemoryCache)
    assert service.cache.ttl_seconds == 1
    assert service.cache_key("bitcoin", "usd").startswith("ticker_")


def test_missing_base_url_is_returned_and_not_cached() -> None:
    service = build_price_service(Settings(_env_file=None, base_url=""))

    result = service.get_price("bitcoin", "USD")

    assert result == ErrorPayload(message="Missing API base URL in settings.")
    assert len(service.cache) == 0

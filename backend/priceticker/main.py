from contextlib import asynccontextmanager

from fastapi import FastAPI

from priceticker.api.deps import get_price_service, get_settings
from priceticker.api.routes import router
from priceticker.config.settings import Settings, settings
from priceticker.logging_conf import setup_logging
from priceticker.services.price_service import build_price_service

API_PREFIX = "/crypto-ticker/v1"


def create_app(config: Settings | None = None) -> FastAPI:
    log_level = (config or settings).log_level

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(log_level)
        yield

    app = FastAPI(title="Price Ticker", lifespan=lifespan)
    app.include_router(router, prefix=API_PREFIX)

    if config is not None:
        service = build_price_service(config)
        app.dependency_overrides[get_settings] = lambda: config
        app.dependency_overrides[get_price_service] = lambda: service
    return app


app = create_app()

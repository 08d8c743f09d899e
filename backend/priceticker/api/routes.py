from fastapi import APIRouter, Depends, HTTPException, Query, status

from priceticker.api.deps import get_price_service, get_settings
from priceticker.config.settings import Settings
from priceticker.schemas.price import to_response
from priceticker.services.price_service import PriceService

router = APIRouter()


def _resolve_currency(currency: str | None, config: Settings) -> str:
    cleaned = (currency or "").strip()
    return (cleaned or config.default_ccy).upper()


@router.get("/price")
def get_price_endpoint(
    id: str = Query(default=""),
    currency: str | None = Query(default=None),
    service: PriceService = Depends(get_price_service),
    config: Settings = Depends(get_settings),
) -> dict:
    asset_id = id.strip()
    if not asset_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Missing "id" parameter.',
        )
    # Domain errors travel in the body with a 200 status.
    result = service.get_price(asset_id, _resolve_currency(currency, config))
    return to_response(result)


from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class PricePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = ""
    symbol: str = ""
    price: float
    currency: str
    cached_at: str = Field(alias="cachedAt")


class ErrorPayload(BaseModel):
    error: Literal[True] = True
    message: str


PriceResult = Union[PricePayload, ErrorPayload]


def to_response(result: PriceResult) -> dict:
    return result.model_dump(by_alias=True)

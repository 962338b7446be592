import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, Field


class SalesRecord(BaseModel):
    order_id: str
    seller: str | None = None
    article_name: str | None = None
    category: str | None = None
    quantity: int | None = None
    total_article_price: Decimal | None = None
    datetime: dt.datetime
    seller_category: str | None = Field("", description="'' when the deployment has no such column")
    buyer_nipt: str | None = Field("", description="'' when the deployment has no such column")


class SalesRows(BaseModel):
    rows: list[SalesRecord]


class Health(BaseModel):
    ok: bool
    service: str


class ErrorBody(BaseModel):
    error: str

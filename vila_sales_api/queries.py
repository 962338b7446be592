from datetime import datetime
from typing import Iterable

from sqlalchemy import Select, String, literal_column, select
from sqlalchemy.orm import Session

from vila_sales_api.models import sales

# JSON field order of every returned row
SALES_FIELDS = (
    "order_id",
    "seller",
    "article_name",
    "category",
    "quantity",
    "total_article_price",
    "datetime",
    "seller_category",
    "buyer_nipt",
)


def sales_projection(blank_columns: Iterable[str] = ()) -> list:
    """Columns selected by both endpoints, labelled with the JSON field names.

    Fields listed in ``blank_columns`` are emitted as ``''`` for deployments
    whose table does not carry them.
    """
    blank = set(blank_columns)
    cols = []
    for name in SALES_FIELDS:
        if name in blank:
            cols.append(literal_column("''", String).label(name))
        else:
            cols.append(sales.c[name].label(name))
    return cols


def _ordered(stmt: Select, limit: int) -> Select:
    # order_id breaks ties so identical requests return identical pages
    return stmt.order_by(sales.c.datetime.asc(), sales.c.order_id.asc()).limit(limit)


def select_since(since: datetime, limit: int, projection: list) -> Select:
    stmt = select(*projection).where(sales.c.datetime > since)
    return _ordered(stmt, limit)


def select_range(start: datetime, end: datetime, limit: int, projection: list) -> Select:
    stmt = select(*projection).where(
        sales.c.datetime >= start,
        sales.c.datetime < end,
    )
    return _ordered(stmt, limit)


def fetch_rows(db: Session, stmt: Select) -> list[dict]:
    return [dict(row) for row in db.execute(stmt).mappings().all()]

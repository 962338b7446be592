# vila_sales_api/routers/sales.py
from datetime import datetime
import logging
import re

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vila_sales_api.core.config import Settings, current_settings
from vila_sales_api.db import get_db
from vila_sales_api.queries import fetch_rows, sales_projection, select_range, select_since
from vila_sales_api.schemas import ErrorBody, SalesRows

_LEADING_INT = re.compile(r"\s*[+-]?\d+")

router = APIRouter()
logger = logging.getLogger("sales")

ERROR_RESPONSES = {
    400: {"model": ErrorBody, "description": "Missing or malformed parameter"},
    401: {"model": ErrorBody, "description": "Missing or wrong x-api-key"},
    500: {"model": ErrorBody, "description": "Database failure"},
}


# -------- parsing helpers --------
def _parse_timestamp(s: str) -> datetime | None:
    """ISO-8601 -> datetime, None when unparseable. Accepts a trailing Z."""
    s = s.strip()
    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        return None


def _parse_limit(raw: str | None, default: int, ceiling: int) -> int:
    """Integer limit clamped to ``ceiling``; anything unusable means ``default``.

    Reads the leading integer like ``parseInt`` does, so ``"12abc"`` is 12.
    """
    if raw is None:
        return default
    m = _LEADING_INT.match(raw)
    if m is None:
        return default
    value = int(m.group())
    if value < 1:
        return default
    return min(value, ceiling)


def _bad_request(msg: str):
    return HTTPException(status_code=400, detail=msg)


def _run(db: Session, stmt, op: str, **context) -> dict:
    try:
        rows = fetch_rows(db, stmt)
    except SQLAlchemyError:
        # full driver error stays in the log, never in the response
        logger.exception("%s_query_failed", op, extra={"op": op, **context})
        raise HTTPException(status_code=500, detail="internal_error")
    logger.info("%s_served", op, extra={"op": op, "row_count": len(rows), **context})
    return {"rows": rows}


# -------- incremental: everything after a timestamp (exclusive) --------
@router.get("/sales/since", tags=["Sales"], summary="Rows strictly after a timestamp",
            responses={200: {"model": SalesRows}, **ERROR_RESPONSES})
def sales_since(
    since: str | None = Query(None, description="ISO-8601 timestamp, exclusive"),
    limit: str | None = Query(None, description="Row cap, clamped to SINCE_MAX_LIMIT"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(current_settings),
):
    if not since:
        raise _bad_request("missing 'since' query param (ISO timestamp)")
    since_ts = _parse_timestamp(since)
    if since_ts is None:
        raise _bad_request("invalid 'since' query param (ISO timestamp)")

    n = _parse_limit(limit, settings.SINCE_DEFAULT_LIMIT, settings.SINCE_MAX_LIMIT)
    stmt = select_since(since_ts, n, sales_projection(settings.blank_columns))
    return _run(db, stmt, "since", since=since, limit=n)


# -------- range: [from, to), upper bound exclusive --------
@router.get("/sales/range", tags=["Sales"], summary="Rows in [from, to)",
            responses={200: {"model": SalesRows}, **ERROR_RESPONSES})
def sales_range(
    from_: str | None = Query(None, alias="from", description="ISO-8601 timestamp, inclusive"),
    to: str | None = Query(None, description="ISO-8601 timestamp, exclusive"),
    limit: str | None = Query(None, description="Row cap, clamped to RANGE_MAX_LIMIT"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(current_settings),
):
    if not from_ or not to:
        raise _bad_request("missing 'from' or 'to' query param (ISO)")
    start, end = _parse_timestamp(from_), _parse_timestamp(to)
    bad = [name for name, ts in (("from", start), ("to", end)) if ts is None]
    if bad:
        raise _bad_request(f"invalid {' and '.join(repr(b) for b in bad)} query param (ISO)")

    n = _parse_limit(limit, settings.RANGE_DEFAULT_LIMIT, settings.RANGE_MAX_LIMIT)
    stmt = select_range(start, end, n, sales_projection(settings.blank_columns))
    return _run(db, stmt, "range", start=from_, end=to, limit=n)

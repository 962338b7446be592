"""Shared fixtures: settings, an in-memory sales store and a test client."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.pool import StaticPool

from vila_sales_api.core.config import Settings
from vila_sales_api.main import create_app
from vila_sales_api.models import metadata, sales

API_KEY = "test-key"


@pytest.fixture
def settings():
    return Settings(_env_file=None, DATABASE_URL="sqlite://", API_KEY=API_KEY)


@pytest.fixture
def engine():
    """SQLite stand-in for the sales database, shared across threads."""
    eng = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def query_log(engine):
    """Every SELECT the app sends to the store."""
    log = []

    @event.listens_for(engine, "before_cursor_execute")
    def _record(conn, cursor, statement, parameters, context, executemany):
        if statement.lstrip().upper().startswith("SELECT"):
            log.append((statement, parameters))

    yield log
    event.remove(engine, "before_cursor_execute", _record)


@pytest.fixture
def make_sale():
    """Factory fixture: call with an order id and a datetime, plus overrides."""
    def _make(order_id, when, **overrides):
        row = {
            "order_id": order_id,
            "seller": "Vila Store",
            "article_name": f"Article {order_id}",
            "category": "Home",
            "quantity": 1,
            "total_article_price": 12.5,
            "datetime": when,
            "seller_category": "Retail",
            "buyer_nipt": "L12345678A",
        }
        row.update(overrides)
        return row
    return _make


@pytest.fixture
def seed(engine):
    def _seed(*rows):
        with engine.begin() as conn:
            conn.execute(sales.insert(), list(rows))
    return _seed


@pytest.fixture
def app(settings, engine):
    return create_app(settings, engine=engine)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def auth():
    return {"x-api-key": API_KEY}


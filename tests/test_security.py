from fastapi.testclient import TestClient
import pytest
from starlette.requests import Request

from vila_sales_api.core.security import ApiKeyAuth
from vila_sales_api.main import create_app

SINCE = {"since": "2024-01-01T00:00:00Z"}
RANGE = {"from": "2024-01-01T00:00:00Z", "to": "2024-02-01T00:00:00Z"}


def _request(headers: dict) -> Request:
    raw = [(k.lower().encode(), v.encode()) for k, v in headers.items()]
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw})


class TestApiKeyAuth:
    def test_exact_match(self):
        assert ApiKeyAuth("s3cret")(_request({"x-api-key": "s3cret"})) is True

    @pytest.mark.parametrize("headers", [
        {},
        {"x-api-key": ""},
        {"x-api-key": "S3CRET"},
        {"x-api-key": "s3cret "},
        {"authorization": "s3cret"},
    ])
    def test_rejects(self, headers):
        assert ApiKeyAuth("s3cret")(_request(headers)) is False


@pytest.mark.parametrize("path, params", [
    ("/api/sales/since", SINCE),
    ("/api/sales/range", RANGE),
])
@pytest.mark.parametrize("headers", [
    {},
    {"x-api-key": "wrong"},
    {"x-api-key": ""},
])
def test_unauthorized_before_any_query(client, query_log, path, params, headers):
    r = client.get(path, params=params, headers=headers)
    assert r.status_code == 401
    assert r.json() == {"error": "unauthorized"}
    assert query_log == []


def test_header_name_is_case_insensitive(client):
    r = client.get("/api/sales/since", params=SINCE, headers={"X-API-Key": "test-key"})
    assert r.status_code == 200


def test_unauthorized_precedes_validation(client, query_log):
    r = client.get("/api/sales/since")
    assert r.status_code == 401


def test_authenticator_is_replaceable(settings, engine, query_log):
    def bearer(request):
        return request.headers.get("authorization") == "Bearer token-1"

    client = TestClient(create_app(settings, engine=engine, authenticator=bearer))

    assert client.get("/api/sales/since", params=SINCE,
                      headers={"x-api-key": "test-key"}).status_code == 401
    assert query_log == []
    r = client.get("/api/sales/since", params=SINCE, headers={"authorization": "Bearer token-1"})
    assert r.status_code == 200
    assert len(query_log) == 1


@pytest.mark.parametrize("method, path", [
    ("GET", "/api/sales/nope"),
    ("GET", "/api/anything"),
    ("GET", "/api"),
    ("POST", "/api/sales/since"),
    ("DELETE", "/api/sales/range"),
])
def test_whole_prefix_is_gated(client, method, path):
    r = client.request(method, path)
    assert r.status_code == 401
    assert r.json() == {"error": "unauthorized"}


def test_routing_errors_only_after_key(client, auth):
    assert client.get("/api/sales/nope", headers=auth).status_code == 404
    assert client.post("/api/sales/since", headers=auth).status_code == 405


def test_prefix_match_is_by_segment(client):
    r = client.get("/apiary")
    assert r.status_code == 404

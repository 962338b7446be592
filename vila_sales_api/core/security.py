# vila_sales_api/core/security.py
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.security.api_key import APIKeyHeader
from starlette.middleware.base import BaseHTTPMiddleware

API_KEY_HEADER = "x-api-key"

# only here so /docs shows the header; the check itself runs in ApiKeyMiddleware
api_key_header = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


class ApiKeyAuth:
    """Accepts a request when its key header equals the shared secret."""

    def __init__(self, api_key: str, header_name: str = API_KEY_HEADER):
        self.api_key = api_key
        self.header_name = header_name

    def __call__(self, request: Request) -> bool:
        supplied = request.headers.get(self.header_name)
        return bool(supplied) and supplied == self.api_key


def under_prefix(path: str, prefix: str) -> bool:
    prefix = prefix.rstrip("/")
    return path == prefix or path.startswith(prefix + "/")


class ApiKeyMiddleware(BaseHTTPMiddleware):
    """Rejects every request under ``prefix`` that the app's authenticator refuses.

    Runs before routing, so unknown paths and wrong methods under the prefix
    get the same 401 as real endpoints.
    """

    def __init__(self, app, prefix: str):
        super().__init__(app)
        self.prefix = prefix

    async def dispatch(self, request: Request, call_next):
        if under_prefix(request.url.path, self.prefix):
            authenticate = request.app.state.authenticator
            if not authenticate(request):
                return JSONResponse(
                    {"error": "unauthorized"},
                    status_code=status.HTTP_401_UNAUTHORIZED,
                )
        return await call_next(request)

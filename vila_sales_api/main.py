# vila_sales_api/main.py
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request, Security
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.engine import Engine
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from vila_sales_api.core.config import Settings, get_settings
from vila_sales_api.core.security import ApiKeyAuth, ApiKeyMiddleware, api_key_header
from vila_sales_api.db import create_db_engine, make_session_factory
from vila_sales_api.routers import sales, system

logger = logging.getLogger("vila_sales_api")

tags_metadata = [
    {"name": "System", "description": "Service liveness."},
    {"name": "Sales", "description": "Time-filtered reads of the sales table (x-api-key required)."},
]

# helmet-style defaults; no CSP so /docs can still load its assets
SECURITY_HEADERS = {
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Frame-Options": "SAMEORIGIN",
    "X-Permitted-Cross-Domain-Policies": "none",
    "X-XSS-Protection": "0",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    if app.state.owns_engine:
        app.state.engine.dispose()
        logger.info("engine disposed")


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse({"error": exc.detail}, status_code=exc.status_code,
                            headers=getattr(exc, "headers", None))


def create_app(
    settings: Settings | None = None,
    engine: Engine | None = None,
    authenticator=None,
) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = FastAPI(
        title=settings.SERVICE_NAME,
        version=settings.APP_VERSION,
        description=settings.APP_DESCRIPTION,
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )

    # the pool is built once here and only reached through get_db
    app.state.settings = settings
    app.state.owns_engine = engine is None
    app.state.engine = engine if engine is not None else create_db_engine(settings)
    app.state.session_factory = make_session_factory(app.state.engine)
    app.state.authenticator = authenticator or ApiKeyAuth(settings.API_KEY)

    # last added runs first: CORS -> security headers -> key gate -> routes
    app.add_middleware(ApiKeyMiddleware, prefix=settings.API_PREFIX)

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("unhandled_error", extra={"path": request.url.path})
            response = JSONResponse({"error": "internal_error"}, status_code=500)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _install_error_handlers(app)

    # Redirects "/" -> "/docs"
    @app.get("/", include_in_schema=False)
    def root():
        return RedirectResponse(url="/docs")

    app.include_router(system.router)
    app.include_router(
        sales.router,
        prefix=settings.API_PREFIX,
        dependencies=[Security(api_key_header)],
    )
    for r in app.routes:
        path = getattr(r, "path", None)
        if path is None:
            continue
        logger.debug("route %s %s", path, sorted(getattr(r, "methods", None) or []))
    return app


def run() -> None:
    settings = get_settings()
    app = create_app(settings)
    logger.info("API listening on port %s", settings.PORT)
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()

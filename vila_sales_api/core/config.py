# vila_sales_api/core/config.py
import sys
from functools import lru_cache

from fastapi import Request
from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# fields that may be served as '' when the table lacks the column
OPTIONAL_SALES_FIELDS = ("seller_category", "buyer_nipt")
REQUIRED_ENV = ("DATABASE_URL", "API_KEY")


class Settings(BaseSettings):
    SERVICE_NAME: str = "vila-sales-api"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = "Read-only sales feed for incremental sync."
    API_PREFIX: str = "/api"

    HOST: str = "0.0.0.0"
    PORT: int = 10000
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: str = "*"

    API_KEY: str = Field(min_length=1)

    # Postgres
    DATABASE_URL: str = Field(min_length=1)
    DATABASE_SSLMODE: str = "require"
    DATABASE_TIMEZONE: str = Field("UTC", pattern=r"^[A-Za-z0-9_/+-]+$")

    SINCE_DEFAULT_LIMIT: int = Field(50000, ge=1)
    SINCE_MAX_LIMIT: int = Field(100000, ge=1)
    RANGE_DEFAULT_LIMIT: int = Field(100000, ge=1)
    RANGE_MAX_LIMIT: int = Field(200000, ge=1)

    SALES_BLANK_COLUMNS: str = ""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator("SALES_BLANK_COLUMNS")
    @classmethod
    def known_optional_fields(cls, v):
        names = {p.strip().lower() for p in v.split(",") if p.strip()}
        unknown = names.difference(OPTIONAL_SALES_FIELDS)
        if unknown:
            raise ValueError(
                f"only {', '.join(OPTIONAL_SALES_FIELDS)} may be blank, got {sorted(unknown)}"
            )
        return ",".join(sorted(names))

    @model_validator(mode="after")
    def defaults_within_ceiling(self):
        if self.SINCE_DEFAULT_LIMIT > self.SINCE_MAX_LIMIT:
            raise ValueError("SINCE_DEFAULT_LIMIT must be <= SINCE_MAX_LIMIT")
        if self.RANGE_DEFAULT_LIMIT > self.RANGE_MAX_LIMIT:
            raise ValueError("RANGE_DEFAULT_LIMIT must be <= RANGE_MAX_LIMIT")
        return self

    @property
    def blank_columns(self) -> frozenset[str]:
        return frozenset(p for p in self.SALES_BLANK_COLUMNS.split(",") if p)

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def sqlalchemy_url(self) -> str:
        # Render and Heroku hand out postgres://, which SQLAlchemy no longer accepts
        url = self.DATABASE_URL
        if url.startswith("postgres://"):
            url = "postgresql+psycopg2://" + url[len("postgres://"):]
        return url


def _describe(err: dict) -> str:
    name = str(err["loc"][0]) if err["loc"] else "settings"
    if name in REQUIRED_ENV and err["type"] in ("missing", "string_too_short"):
        return f"Missing {name}. Set it in .env for local dev and in the service environment for prod."
    return f"Invalid {name}: {err['msg']}"


def load_settings(**overrides) -> Settings:
    """Build the settings or terminate the process.

    A missing ``DATABASE_URL`` or ``API_KEY`` (or any other invalid value) is
    reported on stderr, one line per problem, and the process exits with 1.
    """
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        for err in exc.errors():
            print(_describe(err), file=sys.stderr)
        sys.exit(1)


@lru_cache
def get_settings() -> Settings:
    return load_settings()


def current_settings(request: Request) -> Settings:
    return request.app.state.settings

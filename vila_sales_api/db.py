import logging

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker

from vila_sales_api.core.config import Settings

logger = logging.getLogger("db")


def create_db_engine(settings: Settings) -> Engine:
    url = make_url(settings.sqlalchemy_url)
    connect_args = {}
    if url.get_backend_name() == "postgresql":
        # libpq "require" encrypts but does not verify the server certificate
        if "sslmode" not in url.query:
            connect_args["sslmode"] = settings.DATABASE_SSLMODE
        # aware cut-offs bind as timestamptz; a naive "Datetime" column is read in this zone
        connect_args["options"] = f"-c timezone={settings.DATABASE_TIMEZONE}"

    engine = create_engine(
        url,
        connect_args=connect_args,
        pool_pre_ping=True,
        pool_recycle=3600,
        echo=False,
    )
    logger.info("engine created for %s", url.render_as_string(hide_password=True))
    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


# dependency for FastAPI
def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine, make_url

from .core.config import DatabaseSettings

logger = logging.getLogger(__name__)

DRIVER = "postgresql+psycopg"


def build_url(settings: DatabaseSettings) -> URL:
    """Return the connection URL for ``settings``.

    Resolution order:
      1. ``DATABASE_URL`` (``settings.url``); a bare ``postgres(ql)`` scheme is
         pinned to the psycopg driver
      2. The individual ``DB_*`` values against PostgreSQL via psycopg
    """
    if settings.url:
        url = make_url(settings.url)
        if url.drivername in ("postgres", "postgresql"):
            url = url.set(drivername=DRIVER)
        return url

    return URL.create(
        DRIVER,
        username=settings.user,
        password=settings.password or None,
        host=settings.host,
        port=settings.port,
        database=settings.name,
        query={"sslmode": settings.ssl_mode} if settings.ssl_mode else {},
    )


def get_engine(settings: DatabaseSettings) -> Engine:
    """Return a pooled SQLAlchemy Engine for ``settings``.

    The pool never holds more than ``max_connections`` connections.
    """
    url = build_url(settings)
    logger.info("Creating database engine for %s", url.render_as_string(hide_password=True))

    if url.get_backend_name() == "sqlite":
        return create_engine(url)

    return create_engine(
        url,
        pool_size=settings.max_connections,
        max_overflow=0,
        pool_pre_ping=True,
    )

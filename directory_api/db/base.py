"""Database engine configuration for Directory API."""

from typing import Optional

from sqlalchemy.engine.url import URL, make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from ..config import Settings

ASYNC_DRIVER = "postgresql+psycopg"


def _ensure_async_driver(url: URL) -> URL:
    """Force the async psycopg driver for the PostgreSQL engine."""

    # postgres:// is the scheme most hosting providers hand out
    if url.drivername in ("postgres", "postgresql"):
        url = url.set(drivername=ASYNC_DRIVER)
    elif url.drivername.startswith("postgresql+") and url.drivername != ASYNC_DRIVER:
        # Normalize sync driver variants (psycopg2, pg8000, ...) to psycopg
        url = url.set(drivername=ASYNC_DRIVER)
    elif not url.drivername.startswith("postgresql"):
        raise ValueError(
            f"Unsupported database driver '{url.drivername}': a PostgreSQL URL is required"
        )

    return url


def get_database_url(raw_url: str) -> str:
    """Return a database URL with a guaranteed async PostgreSQL driver."""

    url = make_url(raw_url)
    # Use render_as_string with hide_password=False to preserve the actual password
    return _ensure_async_driver(url).render_as_string(hide_password=False)


def create_engine(settings: Settings, database_url: Optional[str] = None) -> AsyncEngine:
    """
    Create the pooled async engine used by every directory operation.

    The pool has a fixed maximum size and no overflow. Connections are
    opened lazily, so an idle service holds none, and are recycled after
    ``pool_idle_timeout`` seconds. Waiting longer than
    ``pool_acquire_timeout`` for a free connection raises instead of
    blocking forever.
    """
    return create_async_engine(
        get_database_url(database_url or settings.database_url),
        pool_size=settings.pool_max_size,
        max_overflow=0,
        pool_timeout=settings.pool_acquire_timeout,
        pool_recycle=settings.pool_idle_timeout,
        pool_pre_ping=True,
        echo=settings.debug,
    )

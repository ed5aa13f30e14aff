"""
Database engine configuration.

The engine is built lazily so that file-only conversions never need a
DATABASE_URL.
"""

from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from legfed.core.settings import settings

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def get_engine(database_url: Optional[str] = None) -> Engine:
    """
    Get the SQLAlchemy engine, creating it on first use.

    Args:
        database_url: Override for settings.database_url

    Returns:
        Engine instance

    Raises:
        RuntimeError: no database URL is configured
    """
    global _engine, _session_factory
    if database_url is not None:
        return create_engine(database_url, pool_pre_ping=True)
    if _engine is None:
        if not settings.database_url:
            raise RuntimeError("DATABASE_URL is not set")
        _engine = create_engine(settings.database_url, pool_pre_ping=True)
        _session_factory = sessionmaker(bind=_engine, autoflush=False)
    return _engine


def SessionLocal() -> Session:
    """Open a session on the configured database."""
    get_engine()
    return _session_factory()


def table_name(table: str) -> str:
    """Prefix a table name with DB_SCHEMA when one is configured."""
    if settings.db_schema:
        return f"{settings.db_schema}.{table}"
    return table

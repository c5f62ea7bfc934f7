"""Async database engine factory."""

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool


def _is_memory_sqlite(url: str) -> bool:
    if not url.startswith("sqlite"):
        return False
    path = url.split("://", 1)[-1]
    return ":memory:" in path or path in ("", "/")


def create_engine_for_url(database_url: str) -> AsyncEngine:
    """Create an async engine suited to the backend in *database_url*.

    In-memory SQLite must share one connection, otherwise every pooled
    connection would see its own empty database.
    """
    if _is_memory_sqlite(database_url):
        return create_async_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if database_url.startswith("sqlite"):
        return create_async_engine(database_url)
    return create_async_engine(
        database_url,
        pool_size=20,
        max_overflow=10,
        pool_pre_ping=True,
    )

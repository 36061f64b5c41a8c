import os
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import NullPool, StaticPool


engine: Optional[AsyncEngine] = None
AsyncSessionLocal: Optional[sessionmaker] = None
Base = declarative_base()

_ASYNC_DRIVERS = {
    "postgres://": "postgresql+asyncpg://",
    "postgresql://": "postgresql+asyncpg://",
}


def _normalize_url(database_url: str) -> str:
    """Point bare Postgres URLs (as hosting providers hand them out) at asyncpg."""

    for scheme, async_scheme in _ASYNC_DRIVERS.items():
        if database_url.startswith(scheme):
            return async_scheme + database_url[len(scheme):]
    return database_url


def _engine_options(database_url: str) -> dict[str, Any]:
    if not database_url.startswith("sqlite"):
        return {"pool_pre_ping": True}
    if ":memory:" in database_url:
        # Every session must see the same in-memory database.
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {"poolclass": NullPool}


def get_engine() -> AsyncEngine:
    """Return the engine for ``DATABASE_URL``, creating it on first call.

    Nothing touches the database at import time, so tests and the Alembic
    env can set ``DATABASE_URL`` before the first session is opened.
    """

    global engine, AsyncSessionLocal

    if engine is not None:
        return engine

    raw_url = os.getenv("DATABASE_URL")
    if not raw_url:
        raise RuntimeError("DATABASE_URL environment variable is required")

    database_url = _normalize_url(raw_url)
    engine = create_async_engine(database_url, echo=False, **_engine_options(database_url))
    AsyncSessionLocal = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    return engine


async def get_session() -> AsyncSession:
    if AsyncSessionLocal is None:
        get_engine()

    assert AsyncSessionLocal is not None  # for type checkers
    async with AsyncSessionLocal() as session:
        yield session

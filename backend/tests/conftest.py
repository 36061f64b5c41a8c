import asyncio
import builtins
import os
import sys
from types import SimpleNamespace

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Importing padel_api.main validates CORS settings at import time.
os.environ.setdefault("ALLOWED_ORIGINS", "http://localhost:3000")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from padel_api.cache import group_streaks_cache  # noqa: E402
from padel_api.db import get_session  # noqa: E402
from padel_api.exceptions import DomainException  # noqa: E402
from padel_api.main import (  # noqa: E402
    domain_exception_handler,
    http_exception_handler,
)
from padel_api.models import Group, Match, MatchResult, Partnership, Player  # noqa: E402
from padel_api.rate_limit import RateLimiterStore  # noqa: E402
from padel_api.routers import groups, partnerships, rate_limits  # noqa: E402

TABLES = (Group, Player, Match, MatchResult, Partnership)


def create_table(sync_conn, table):
    """Create a table if it is missing, without failing when it already exists."""

    table.create(bind=sync_conn, checkfirst=True)


# Expose for test modules that call run_sync(create_table, ...)
builtins.create_table = create_table


def build_app(store: RateLimiterStore) -> FastAPI:
    app = FastAPI()
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.include_router(groups.router)
    app.include_router(partnerships.router)
    app.include_router(rate_limits.router)
    app.state.rate_limiter = store
    return app


@pytest.fixture()
def api():
    """A bare app over a private in-memory database.

    Rate limiting is disabled; tests that exercise it swap in their own store
    via ``api.app.state.rate_limiter``.
    """

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async_session_maker = sessionmaker(
        engine, expire_on_commit=False, class_=AsyncSession
    )

    async def init_models():
        async with engine.begin() as conn:
            for model in TABLES:
                await conn.run_sync(create_table, model.__table__)

    asyncio.run(init_models())
    asyncio.run(group_streaks_cache.clear())

    async def override_get_session():
        async with async_session_maker() as session:
            yield session

    def seed(*objects) -> None:
        async def _seed():
            async with async_session_maker() as session:
                session.add_all(objects)
                await session.commit()

        asyncio.run(_seed())

    def drop_table(model) -> None:
        async def _drop():
            async with engine.begin() as conn:
                await conn.run_sync(lambda sync_conn: model.__table__.drop(sync_conn))

        asyncio.run(_drop())

    app = build_app(RateLimiterStore(disabled=True))
    app.dependency_overrides[get_session] = override_get_session

    with TestClient(app) as client:
        yield SimpleNamespace(client=client, app=app, seed=seed, drop_table=drop_table)

    app.dependency_overrides.clear()
    asyncio.run(engine.dispose())

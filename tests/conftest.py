"""
Shared pytest fixtures for the Dust & Gold tests.

- In-memory SQLite database (aiosqlite) with the get_db dependency overridden
- httpx.AsyncClient driving the ASGI app
- User/token factory
- Mock upstream transport for the metadata providers
"""
import os

# Settings are read at import time, so configure before importing the app
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("OMDB_API_KEY", "test-omdb-key")
os.environ.setdefault("LASTFM_API_KEY", "test-lastfm-key")
os.environ.pop("REDIS_URL", None)

from typing import Callable

import httpx
import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from dust_gold.core.security import create_access_token
from dust_gold.database import Base, get_db
from dust_gold.main import app
from dust_gold.models import User
from dust_gold.services.http_client import HTTPClientManager


# =============================================================================
# Database
# =============================================================================


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Let SQLAlchemy own BEGIN so SAVEPOINTs behave
    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


# =============================================================================
# API client
# =============================================================================


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory) -> Callable:
    """
    Factory that stores a user and returns (user, auth headers).

        user, headers = await make_user("alice", username="alice")
    """
    async def _make_user(user_id: str, username: str | None = None, name: str | None = None):
        user = User(
            id=user_id,
            name=name or user_id.title(),
            email=f"{user_id}@example.com",
            username=username,
        )
        async with session_factory() as session:
            session.add(user)
            await session.commit()
            await session.refresh(user)

        headers = {"Authorization": f"Bearer {create_access_token(user_id)}"}
        return user, headers

    return _make_user


# =============================================================================
# Upstream providers
# =============================================================================


@pytest_asyncio.fixture
async def mock_upstream():
    """
    Route provider HTTP calls to a handler instead of the network.

        mock_upstream(lambda request: httpx.Response(200, json={...}))
    """
    def _install(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        mock_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        HTTPClientManager.set_client(mock_client)
        return mock_client

    yield _install

    await HTTPClientManager.close()

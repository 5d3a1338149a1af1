"""Shared pytest fixtures: a throwaway SQLite database per test."""

from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import timedelta
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from backend.app.api import deps
from backend.app.db.base import get_db
from backend.app.db.init_db import init_models
from backend.app.db.session import create_session_factory
from backend.app.main import app
from backend.app.models import Catalog
from backend.app.security.hashing import Md5LegacyHasher
from backend.app.security.session import SessionAuthenticator
from backend.app.services.catalogs import CatalogStore
from backend.app.services.items import ItemStore

from tests._db import PASSWORD_A, PASSWORD_B


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    await init_models(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest.fixture
async def db(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def hasher() -> Md5LegacyHasher:
    """Fast deterministic digests; the salted scheme has its own tests."""
    return Md5LegacyHasher()


@pytest.fixture
async def catalogs(session_factory, hasher) -> tuple[Catalog, Catalog]:
    """Two catalogs, A and B, with passwords PASSWORD_A and PASSWORD_B."""
    async with session_factory() as session:
        store = CatalogStore(session, hasher)
        a = await store.create_catalog("Catalog A", PASSWORD_A)
        b = await store.create_catalog("Catalog B", PASSWORD_B)
    return a, b


@pytest.fixture
def item_store(db: AsyncSession) -> ItemStore:
    return ItemStore(db, timeout=5.0)


@pytest.fixture
def authenticator() -> SessionAuthenticator:
    return SessionAuthenticator(secret="test-signing-secret", ttl=timedelta(minutes=60))


@pytest.fixture
async def client(session_factory, authenticator, hasher) -> AsyncIterator[AsyncClient]:
    """HTTP client wired to the test database, signing secret and hasher."""

    async def _get_db() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[deps.get_session_authenticator] = lambda: authenticator
    app.dependency_overrides[deps.get_password_hasher_dep] = lambda: hasher
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


"""Pytest fixtures for the accounts backend."""

import os

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("CREATE_TABLES_ON_STARTUP", "false")

from collections.abc import AsyncIterator, Iterator  # noqa: E402
from pathlib import Path  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from api.deps import get_db  # noqa: E402
from app import create_app  # noqa: E402
from core.config import settings  # noqa: E402
from db import init_db  # noqa: E402
from helpers import DummyMinio  # noqa: E402
from services import storage  # noqa: E402


@pytest_asyncio.fixture()
async def test_engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """Create an async engine bound to a fresh file-backed SQLite database."""
    database_url = f"sqlite+aiosqlite:///{tmp_path / 'backend-test.db'}"
    engine = create_async_engine(
        database_url,
        connect_args={"check_same_thread": False},
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_maker(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Return a session factory bound to the test engine."""
    return async_sessionmaker(test_engine, expire_on_commit=False)


@pytest.fixture()
def app(session_maker: async_sessionmaker[AsyncSession]) -> Iterator[FastAPI]:
    """Create the FastAPI app with a test database dependency override."""
    application = create_app()

    async def override_get_db() -> AsyncIterator[AsyncSession]:
        async with session_maker() as session:
            yield session

    application.dependency_overrides[get_db] = override_get_db
    yield application


@pytest_asyncio.fixture()
async def async_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Return an HTTPX async client bound to the FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest_asyncio.fixture()
async def db_session(session_maker: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    """Provide a raw database session to tests."""
    async with session_maker() as session:
        yield session


@pytest.fixture()
def fake_storage(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> DummyMinio:
    """Route every storage call to an in-memory client and spool into tmp_path."""
    client = DummyMinio()
    monkeypatch.setattr(storage, "get_minio_client", lambda: client)
    monkeypatch.setattr(settings, "upload_tmp_dir", tmp_path / "uploads")
    return client


"""Pytest configuration and fixtures."""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["OPENAI_API_KEY"] = ""

from typing import AsyncGenerator, Dict

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.auth import models as _auth_models  # noqa: F401
from app.auth.context import UserContext
from app.auth.models import User
from app.core.dependencies import get_card_store
from app.database import Base, get_db
from app.flashcards import models as _flashcard_models  # noqa: F401
from app.flashcards.generator import get_card_generator
from app.flashcards.store import CardStore
from app.main import app
from app.rate_limit import limiter
from app.study.registry import StudySessionRegistry, get_session_registry
from tests.fakes import FakeCardGenerator, FakeCardStore

PASSWORD = "secret123"


@pytest.fixture
async def engine(tmp_path):
    """A fresh SQLite database file per test."""
    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def card_store(session_factory) -> CardStore:
    return CardStore(session_factory)


@pytest.fixture
async def user(session_factory) -> User:
    """A user row, for tests that go through the Card Store directly."""
    async with session_factory() as session:
        row = User(
            id="user-1",
            email="learner@example.com",
            hashed_password="not-a-real-hash",
            is_active=True,
        )
        session.add(row)
        await session.commit()
    return row


@pytest.fixture
def context() -> UserContext:
    return UserContext(user_id="user-1", email="learner@example.com")


@pytest.fixture
def fake_store() -> FakeCardStore:
    return FakeCardStore()


@pytest.fixture
def fake_generator() -> FakeCardGenerator:
    return FakeCardGenerator()


@pytest.fixture
def registry() -> StudySessionRegistry:
    return StudySessionRegistry()


@pytest.fixture
async def client(session_factory, fake_generator, registry) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app, wired to the test database and fake generator."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_card_store] = lambda: CardStore(session_factory)
    app.dependency_overrides[get_card_generator] = lambda: fake_generator
    app.dependency_overrides[get_session_registry] = lambda: registry
    limiter.enabled = False

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()
    limiter.enabled = True


async def register(client: AsyncClient, email: str = "learner@example.com") -> Dict[str, str]:
    """Register a user and return bearer auth headers."""
    response = await client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": PASSWORD},
    )
    assert response.status_code == 201, response.text
    token = response.json()["tokens"]["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def auth_headers(client) -> Dict[str, str]:
    return await register(client)

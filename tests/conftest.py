"""Pytest configuration and fixtures with per-test database isolation."""

import os
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from dotenv import load_dotenv

# ============================================================================
# Load Test Environment Variables
# ============================================================================

# Settings are read at import time, so .env.test must be loaded before any
# herald_service import
env_test_path = Path(__file__).parent.parent / ".env.test"
if env_test_path.exists():
    load_dotenv(env_test_path, override=True)
else:
    os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from herald_service.auth import issue_token  # noqa: E402
from herald_service.config import settings  # noqa: E402
from herald_service.database import Base, get_db, get_session_factory  # noqa: E402
from herald_service.main import app  # noqa: E402
from herald_service.models import Category, Profile  # noqa: E402
from herald_service.tasks import task_registry  # noqa: E402
from tests.helpers import ProfileFactory  # noqa: E402


# ============================================================================
# Database Fixtures (Per-Test Isolation)
# ============================================================================


@pytest.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory SQLite database per test.

    StaticPool keeps the single connection alive so every session (test,
    request and background task) sees the same database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record) -> None:  # type: ignore[no-untyped-def]
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging and inspecting test data.

    Commit setup data before calling the API; requests use their own
    sessions on the same database.
    """
    async with session_factory() as session:
        yield session


# ============================================================================
# Isolation of Process-Wide State
# ============================================================================


@pytest.fixture(autouse=True)
def reset_task_registry() -> None:
    """Start every test with an empty task registry."""
    task_registry.reset()


@pytest.fixture(autouse=True)
def fast_rss(monkeypatch: pytest.MonkeyPatch) -> None:
    """No politeness delays in tests."""
    monkeypatch.setattr(settings, "rss_item_delay_seconds", 0.0)
    monkeypatch.setattr(settings, "rss_source_delay_seconds", 0.0)


@pytest.fixture
def media_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Store uploads in a temporary directory."""
    path = tmp_path / "media"
    path.mkdir()
    monkeypatch.setattr(settings, "media_base_path", str(path))
    return path


# ============================================================================
# HTTP Client Fixtures
# ============================================================================


@pytest.fixture
async def async_client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """Async test client bound to the per-test database.

    ``get_db`` is overridden with a session from the test engine that
    commits on success like the real dependency; background tasks get the
    test session factory.
    """

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        # Remove only our overrides (don't use .clear())
        app.dependency_overrides.pop(get_db, None)
        app.dependency_overrides.pop(get_session_factory, None)


# ============================================================================
# Data Fixtures
# ============================================================================


@pytest.fixture
def create_profile(db_session: AsyncSession) -> ProfileFactory:
    """Factory creating a committed profile and returning (profile, token)."""
    counter = {"n": 0}

    async def factory(role: str = "user", email: str | None = None, **fields) -> tuple[Profile, str]:  # type: ignore[no-untyped-def]
        counter["n"] += 1
        profile = Profile(
            email=email or f"{role}{counter['n']}@example.com",
            full_name=fields.pop("full_name", f"Test {role.title()} {counter['n']}"),
            role=role,
            is_verified=True,
            **fields,
        )
        token = issue_token(profile)
        db_session.add(profile)
        await db_session.commit()
        return profile, token

    return factory


@pytest.fixture
async def admin(create_profile: ProfileFactory) -> tuple[Profile, str]:
    return await create_profile("admin")


@pytest.fixture
async def editor(create_profile: ProfileFactory) -> tuple[Profile, str]:
    return await create_profile("editor")


@pytest.fixture
async def author(create_profile: ProfileFactory) -> tuple[Profile, str]:
    return await create_profile("author")


@pytest.fixture
async def reader(create_profile: ProfileFactory) -> tuple[Profile, str]:
    return await create_profile("user")


@pytest.fixture
async def categories(db_session: AsyncSession) -> list[Category]:
    """Three committed categories."""
    items = [
        Category(
            name="Technology",
            slug="technology",
            keywords=["software", "robotics"],
        ),
        Category(name="Sports", slug="sports", keywords=["rugby", "cricket"]),
        Category(name="Local News", slug="local-news", keywords=["council"]),
    ]
    db_session.add_all(items)
    await db_session.commit()
    return items

"""Shared test fixtures.

Every test that touches the database gets its own SQLite file, so the suite
runs without a PostgreSQL or Redis server. Redis-backed features (rate
limiting, pub/sub) are disabled when Redis is not initialized.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from dataclasses import dataclass
from datetime import date

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from guardian.auth.jwt import create_access_token
from guardian.clock import get_today, utcnow
from guardian.config import get_settings
from guardian.database import close_db, create_schema, get_session, init_db
from guardian.db.models import User
from guardian.dependencies import get_redis_dep
from guardian.progress.ledger import create_progress
from guardian.referrals.codes import generate_unique_referral_code

TODAY = date(2026, 3, 10)


@dataclass
class FakeClock:
    """Mutable 'today' handed to the app through the get_today dependency."""

    today: date = TODAY


@pytest.fixture(autouse=True)
def _test_settings(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.setenv("CG_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'guardian.db'}")
    monkeypatch.setenv("CG_LOG_FORMAT", "console")
    monkeypatch.setenv("CG_JWT_SECRET", "test-secret-0123456789abcdef0123456789")
    monkeypatch.setenv("CG_FRONTEND_BASE_URL", "https://guardian.test")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[None, None]:
    """Fresh schema with the mission and badge catalogs seeded."""
    from guardian.main import seed_catalog

    await init_db(get_settings().database_url)
    await create_schema()
    await seed_catalog()
    yield
    await close_db()


@pytest_asyncio.fixture
async def db_session(database: None) -> AsyncGenerator[AsyncSession, None]:
    """A direct database session for calling services and making assertions."""
    async for session in get_session():
        yield session
        break


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest_asyncio.fixture
async def client(database: None, clock: FakeClock) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app with today pinned to the fake clock."""
    from guardian.main import create_app

    app = create_app()

    async def _today() -> date:
        return clock.today

    async def _no_redis() -> AsyncGenerator[object, None]:
        yield None

    app.dependency_overrides[get_today] = _today
    app.dependency_overrides[get_redis_dep] = _no_redis

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


UserFactory = Callable[..., Awaitable[User]]


@pytest_asyncio.fixture
async def make_user(db_session: AsyncSession) -> UserFactory:
    """Create a bare account with a zeroed ledger (no signup hooks)."""
    counter = 0

    async def _make(email: str | None = None, name: str | None = None) -> User:
        nonlocal counter
        counter += 1
        user = User(
            email=email or f"user{counter}@example.com",
            name=name,
            referral_code=await generate_unique_referral_code(db_session),
            created_at=utcnow(),
        )
        db_session.add(user)
        await db_session.flush()
        await create_progress(db_session, user.id)
        await db_session.commit()
        return user

    return _make


def auth_headers(user_id: int) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture
def headers_for() -> Callable[[int], dict[str, str]]:
    return auth_headers

"""Shared test configuration and fixtures.

Uses a transactional rollback strategy per test for full isolation:
- Each test gets its own transaction that rolls back after the test.
- ``TEST_DATABASE_URL`` selects the database; it defaults to an in-memory
  SQLite database so the suite runs without a Postgres instance.
"""

import os
import uuid
from collections.abc import AsyncGenerator
from datetime import date, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from tourdesk.config import settings
from tourdesk.database import Base, get_db
from tourdesk.main import app

# ---------------------------------------------------------------------------
# Test database engine
# ---------------------------------------------------------------------------

_test_db_url = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")


def _make_engine():
    if _test_db_url.startswith("sqlite"):
        # One shared connection so the in-memory database survives between checkouts.
        return create_async_engine(_test_db_url, echo=False, poolclass=StaticPool)
    return create_async_engine(_test_db_url, echo=False, pool_pre_ping=True)


# ---------------------------------------------------------------------------
# Session-scoped: create / drop all tables once per test session
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def test_engine():
    """Create a session-scoped engine tied to the session event loop."""
    engine = _make_engine()
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def setup_test_db(test_engine):
    """Create all tables at the start of the session and drop them at the end."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


# ---------------------------------------------------------------------------
# Per-test: transactional rollback for isolation
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture(loop_scope="session")
async def db_session(test_engine, setup_test_db) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session wrapped in a transaction that always rolls back."""
    async with test_engine.connect() as connection:
        transaction = await connection.begin()
        session = AsyncSession(bind=connection, expire_on_commit=False)

        try:
            yield session
        finally:
            await session.close()
            await transaction.rollback()


@pytest_asyncio.fixture(loop_scope="session")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to use the test DB session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Settings toggles
# ---------------------------------------------------------------------------


@pytest.fixture
def strict_pricing(monkeypatch: pytest.MonkeyPatch) -> None:
    """Reject offers with a missing price for a booked category."""
    monkeypatch.setattr(settings, "pricing_strict_mode", True)


@pytest.fixture
def auto_sold_out(monkeypatch: pytest.MonkeyPatch) -> None:
    """Mark full periods sold out automatically."""
    monkeypatch.setattr(settings, "auto_sold_out", True)


# ---------------------------------------------------------------------------
# Convenience fixtures: tour and period helpers
# ---------------------------------------------------------------------------

OFFER_PAYLOAD = {
    "price_adult": "29,900",
    "discount_adult": "1000",
    "price_single": "6500",
    "price_child_bed": "28900",
    "price_child_nobed": "26900",
    "discount_child_nobed": "500",
    "price_infant": "7900",
}


def future_date(days: int = 60) -> date:
    return date.today() + timedelta(days=days)


@pytest_asyncio.fixture(loop_scope="session")
async def test_tour(client: AsyncClient) -> dict:
    """Create and return a 5-day test tour via the API."""
    unique = uuid.uuid4().hex[:6].upper()
    response = await client.post(
        "/api/v1/tours",
        json={
            "tour_code": f"JP-{unique}",
            "title": "Tokyo Fuji 5D3N",
            "description": "A test tour for automated tests.",
            "duration_days": 5,
            "duration_nights": 3,
        },
    )
    assert response.status_code == 201, f"Failed to create test tour: {response.text}"
    return response.json()


@pytest_asyncio.fixture(loop_scope="session")
async def test_period(client: AsyncClient, test_tour: dict) -> dict:
    """Create and return a priced period on the test tour via the API."""
    response = await client.post(
        f"/api/v1/tours/{test_tour['id']}/periods",
        json={
            "start_date": future_date(60).isoformat(),
            "capacity": 20,
            **OFFER_PAYLOAD,
        },
    )
    assert response.status_code == 201, f"Failed to create test period: {response.text}"
    return response.json()


@pytest_asyncio.fixture(loop_scope="session")
async def many_periods(client: AsyncClient, test_tour: dict) -> list[dict]:
    """Create five weekly periods on the test tour."""
    periods = []
    for week in range(5):
        response = await client.post(
            f"/api/v1/tours/{test_tour['id']}/periods",
            json={
                "start_date": future_date(30 + 7 * week).isoformat(),
                "capacity": 25,
                **OFFER_PAYLOAD,
            },
        )
        assert response.status_code == 201, response.text
        periods.append(response.json())
    return periods

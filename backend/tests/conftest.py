"""
Pytest fixtures for the ledger database, the hold store, and the API client.

The ledger runs on a throwaway SQLite file per test (TEST_DATABASE_URL can
point at PostgreSQL instead). Holds and sessions live in the in-memory
store driven by a manual clock, so TTL expiry is tested by moving time
forward rather than sleeping.
"""

import os

os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from reservation_core.api.deps import get_kv_store
from reservation_core.core.security import ROLE_ADMIN, create_access_token
from reservation_core.db.base import Base
from reservation_core.db.session import get_db
from reservation_core.infrastructure.memory_store import MemoryStore
from reservation_core.main import app
from reservation_core.models.seat import SeatStatus, ShowSeat
from reservation_core.services.checkout_service import CheckoutSessions
from reservation_core.services.hold_service import HoldManager
from reservation_core.services.seat_service import create_show_seats

SHOW_A = 7
SHOW_B = 9


class ManualClock:
    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def store(clock: ManualClock) -> MemoryStore:
    return MemoryStore(clock=clock)


@pytest.fixture
def holds(store: MemoryStore) -> HoldManager:
    return HoldManager(store, ttl_seconds=300)


@pytest.fixture
def sessions(store: MemoryStore, holds: HoldManager) -> CheckoutSessions:
    return CheckoutSessions(store, holds, ttl_seconds=300)


@pytest_asyncio.fixture(scope="function")
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    """Create tables, yield a session factory, then drop tables for isolation."""
    url = os.environ.get("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}"
    engine = create_async_engine(url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seeded(session_factory) -> None:
    """Show 7 with A1-A3, show 9 with B1-B2, all available."""
    async with session_factory() as session:
        await create_show_seats(session, SHOW_A, ["A1", "A2", "A3"])
        await create_show_seats(session, SHOW_B, ["B1", "B2"])
        await session.commit()


async def set_seat_status(session_factory, show_id: int, label: str, status: SeatStatus) -> None:
    """Out-of-band ledger write, standing in for an admin tool or a competing sale."""
    async with session_factory() as session:
        await session.execute(
            update(ShowSeat)
            .where(ShowSeat.show_id == show_id, ShowSeat.seat_label == label)
            .values(status=status.value)
        )
        await session.commit()


@pytest_asyncio.fixture(scope="function")
async def client(session_factory, store) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client with the ledger and the store swapped for the test ones."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_kv_store] = lambda: store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def headers_for(claimant_id: str, role: str = "user") -> dict:
    token = create_access_token(data={"sub": claimant_id, "role": role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def x_headers() -> dict:
    return headers_for("user-x")


@pytest.fixture
def y_headers() -> dict:
    return headers_for("user-y")


@pytest.fixture
def admin_headers() -> dict:
    return headers_for("admin-1", role=ROLE_ADMIN)

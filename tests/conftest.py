"""
Shared test fixtures for the manager portal test suite.

Each test gets three fresh in-memory stores (aiosqlite + AsyncSession),
a pinned clock and a fake identity provider, all wired in through
``app.dependency_overrides``.
"""

import os
import sys
from datetime import datetime, timezone
from typing import AsyncGenerator

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["ACCOUNTS_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SALES_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ATTENDANCE_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["ADMIN_EMAILS"] = "boss@example.com; Chief@Example.com"
os.environ["RATE_LIMIT_ENABLED"] = "false"
# CORS fix (JSON format)
os.environ["CORS_ORIGINS"] = '["*"]'

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (AsyncEngine, AsyncSession,
                                    async_sessionmaker, create_async_engine)
from sqlalchemy.pool import StaticPool

from portal.api.v1.deps import get_now
from portal.core.exceptions import Unauthenticated
from portal.core.security import create_session_token
from portal.db.base import AttendanceBase, Base, SalesBase
from portal.db.session import (get_accounts_db, get_attendance_db,
                               get_sales_db)
from portal.main import app
from portal.models.account import Account
from portal.schemas.account import IdentityClaim
from portal.services.identity import get_identity_provider

# 2024-01-15 12:00 local: attendance day 2024-01-15, sales shift starting 08:00.
FIXED_NOW = datetime(2024, 1, 15, 4, 0, tzinfo=timezone.utc)

ADMIN_EMAIL = "boss@example.com"
MANAGER_EMAIL = "manager@example.com"
PENDING_EMAIL = "pending@example.com"


def _memory_engine() -> AsyncEngine:
    return create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


def auth_headers(email: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_session_token(email)}"}


class FakeIdentityProvider:
    """Stands in for Google: every code signs in ``claim`` except ``"bad"``."""

    def __init__(self) -> None:
        self.claim = IdentityClaim(email="newbie@example.com", display_name="New Bie")
        self.codes: list[str] = []

    def authorization_url(self, state: str) -> str:
        return f"https://idp.test/auth?state={state}"

    async def exchange_code(self, code: str) -> IdentityClaim:
        self.codes.append(code)
        if code == "bad":
            raise Unauthenticated("Sign-in with Google failed")
        return self.claim


@pytest.fixture
async def stores() -> AsyncGenerator[dict[str, async_sessionmaker[AsyncSession]], None]:
    """Fresh accounts, sales and attendance stores with their tables created."""
    engines = {
        "accounts": (_memory_engine(), Base),
        "sales": (_memory_engine(), SalesBase),
        "attendance": (_memory_engine(), AttendanceBase),
    }
    for engine, base in engines.values():
        async with engine.begin() as conn:
            await conn.run_sync(base.metadata.create_all)

    yield {
        name: async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        for name, (engine, _) in engines.items()
    }

    for engine, _ in engines.values():
        await engine.dispose()


@pytest.fixture
async def accounts_db(stores) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw accounts-store session for seeding and assertions."""
    async with stores["accounts"]() as session:
        yield session


@pytest.fixture
async def sales_db(stores) -> AsyncGenerator[AsyncSession, None]:
    async with stores["sales"]() as session:
        yield session


@pytest.fixture
async def attendance_db(stores) -> AsyncGenerator[AsyncSession, None]:
    async with stores["attendance"]() as session:
        yield session


@pytest.fixture
def identity_provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
async def async_client(stores, identity_provider) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app and the per-test stores."""

    def _session_dep(name: str):
        async def _override() -> AsyncGenerator[AsyncSession, None]:
            async with stores[name]() as session:
                yield session

        return _override

    app.dependency_overrides[get_accounts_db] = _session_dep("accounts")
    app.dependency_overrides[get_sales_db] = _session_dep("sales")
    app.dependency_overrides[get_attendance_db] = _session_dep("attendance")
    app.dependency_overrides[get_now] = lambda: FIXED_NOW
    app.dependency_overrides[get_identity_provider] = lambda: identity_provider

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ── Callers ─────────────────────────────────────────────────────────
async def _add_account(db: AsyncSession, email: str, role: str, status: str) -> Account:
    account = Account(email=email, name=email.split("@")[0], role=role, status=status)
    db.add(account)
    await db.commit()
    await db.refresh(account)
    return account


@pytest.fixture
def admin_headers() -> dict[str, str]:
    """Allow-listed admin; deliberately has no row in the accounts store."""
    return auth_headers(ADMIN_EMAIL)


@pytest.fixture
async def manager_headers(accounts_db) -> dict[str, str]:
    """Approved non-admin account."""
    await _add_account(accounts_db, MANAGER_EMAIL, "manager", "approved")
    return auth_headers(MANAGER_EMAIL)


@pytest.fixture
async def pending_headers(accounts_db) -> dict[str, str]:
    await _add_account(accounts_db, PENDING_EMAIL, "user", "pending")
    return auth_headers(PENDING_EMAIL)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def make_headers():
    """Factory for bearer headers of an arbitrary email."""
    return auth_headers

"""
Async SQLAlchemy engines & session factories, one per store (asyncpg driver).
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (AsyncEngine, AsyncSession,
                                    async_sessionmaker, create_async_engine)

from portal.core.config import settings


def _make_engine(url: str) -> AsyncEngine:
    engine_args = {
        "echo": False,
        "pool_pre_ping": True,
    }
    if "postgresql" in url:
        engine_args.update(
            {
                "pool_size": 10,
                "max_overflow": 5,
                "pool_recycle": 300,
            }
        )
    return create_async_engine(url, **engine_args)


accounts_engine = _make_engine(settings.ACCOUNTS_DATABASE_URL)
sales_engine = _make_engine(settings.SALES_DATABASE_URL)
attendance_engine = _make_engine(settings.ATTENDANCE_DATABASE_URL)


def _session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


accounts_session_factory = _session_factory(accounts_engine)
sales_session_factory = _session_factory(sales_engine)
attendance_session_factory = _session_factory(attendance_engine)


async def get_accounts_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yields a session on the accounts (website) store."""
    async with accounts_session_factory() as session:
        yield session


async def get_sales_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yields a session on the sales store."""
    async with sales_session_factory() as session:
        yield session


async def get_attendance_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yields a session on the attendance store."""
    async with attendance_session_factory() as session:
        yield session


async def dispose_engines() -> None:
    for engine in (accounts_engine, sales_engine, attendance_engine):
        await engine.dispose()

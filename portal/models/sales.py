"""
Sales store models (read-only): written by the sales bot.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, Column, DateTime, Integer, Numeric, String

from portal.db.base import SalesBase


class Sale(SalesBase):
    __tablename__ = "sales"

    id: int = Column(Integer, primary_key=True)  # type: ignore[assignment]
    team: str = Column(String(200), nullable=False, index=True)  # type: ignore[assignment]
    page: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    chat_id: int | None = Column(BigInteger, nullable=True)  # type: ignore[assignment]
    amount: float = Column(Numeric(12, 2), nullable=False)  # type: ignore[assignment]
    ts: datetime = Column(DateTime(timezone=True), nullable=False, index=True)  # type: ignore[assignment]


class SalesTeam(SalesBase):
    __tablename__ = "teams"

    id: int = Column(Integer, primary_key=True)  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]


class PageGoal(SalesBase):
    __tablename__ = "page_goals"

    id: int = Column(Integer, primary_key=True)  # type: ignore[assignment]
    team: str | None = Column(String(200), nullable=True)  # type: ignore[assignment]
    page: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    goal: float = Column(Numeric(12, 2), nullable=False)  # type: ignore[assignment]


class ShiftGoal(SalesBase):
    __tablename__ = "shift_goals"

    id: int = Column(Integer, primary_key=True)  # type: ignore[assignment]
    page: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    goal: float = Column(Numeric(12, 2), nullable=False)  # type: ignore[assignment]

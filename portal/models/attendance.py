"""
Attendance store model (read-only): clock-ins written by the attendance bot.
"""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import (BigInteger, Boolean, Column, Date, DateTime, Index,
                        Integer, String)

from portal.db.base import AttendanceBase


class ClockIn(AttendanceBase):
    __tablename__ = "attendance_clockins"
    __table_args__ = (Index("ix_clockins_day_shift", "attendance_day", "shift"),)

    id: int = Column(Integer, primary_key=True)  # type: ignore[assignment]
    attendance_day: date = Column(Date, nullable=False)  # type: ignore[assignment]
    shift: str = Column(String(20), nullable=False)  # type: ignore[assignment]  # prime | midshift | closing
    page_key: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    is_cover: bool = Column(Boolean, nullable=False, default=False)  # type: ignore[assignment]
    user_name: str | None = Column(String(200), nullable=True)  # type: ignore[assignment]
    chat_id: int | None = Column(BigInteger, nullable=True)  # type: ignore[assignment]
    tg_username: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    display_name: str | None = Column(String(200), nullable=True)  # type: ignore[assignment]
    ph_ts: datetime = Column(DateTime(timezone=True), nullable=False)  # type: ignore[assignment]

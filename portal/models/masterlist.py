"""
Masterlist slot model: the saved main chatter for each page and shift.

Used as the fallback when nobody has clocked in for that slot today.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (CheckConstraint, Column, DateTime, Integer, String,
                        UniqueConstraint)

from portal.db.base import Base


class MasterlistSlot(Base):
    __tablename__ = "masterlist_slots"
    __table_args__ = (
        UniqueConstraint("page_key", "shift", name="uq_masterlist_page_shift"),
        CheckConstraint(
            "shift IN ('prime', 'midshift', 'closing')", name="ck_masterlist_shift"
        ),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    page_key: str = Column(String(100), nullable=False, index=True)  # type: ignore[assignment]
    shift: str = Column(String(20), nullable=False)  # type: ignore[assignment]
    main_tg_username: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]  # without "@"
    main_display_name: str | None = Column(String(200), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

"""
Page model: admin-curated catalog of pages shown in the portal.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, String

from portal.db.base import Base


class Page(Base):
    __tablename__ = "pages"

    tag: str = Column(String(100), primary_key=True)  # type: ignore[assignment]  # normalized, no "#"
    label: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    is_active: bool = Column(Boolean, nullable=False, default=True, server_default="true")  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

"""
Roster models: teams and the pages each team covers.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from portal.db.base import Base


class RosterTeam(Base):
    __tablename__ = "roster_teams"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    name: str = Column(String(200), unique=True, nullable=False)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    pages = relationship(
        "RosterTeamPage",
        back_populates="team",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class RosterTeamPage(Base):
    __tablename__ = "roster_team_pages"

    team_id: int = Column(  # type: ignore[assignment]
        Integer,
        ForeignKey("roster_teams.id", ondelete="CASCADE"),
        primary_key=True,
    )
    page_key: str = Column(String(100), primary_key=True)  # type: ignore[assignment]
    page_label: str = Column(String(200), nullable=False)  # type: ignore[assignment]

    team = relationship("RosterTeam", back_populates="pages")

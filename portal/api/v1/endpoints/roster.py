"""
Roster endpoints: teams and the pages each team covers.

Any approved caller may edit the roster.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Path
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from portal.api.v1.deps import require_approved
from portal.core.access import Caller
from portal.core.exceptions import InvalidInput, NotFound
from portal.core.pages import EXPECTED_PAGES
from portal.db.session import get_accounts_db
from portal.models.roster import RosterTeam, RosterTeamPage
from portal.schemas.common import SuccessResponse
from portal.schemas.roster import (BulkPagesRequest, BulkPagesResponse,
                                   ClearPagesResponse, TeamCreate, TeamList,
                                   TeamPage, TeamPageCreate, TeamPageList,
                                   TeamRead)

router = APIRouter(prefix="/roster", tags=["roster"])
logger = logging.getLogger(__name__)


async def _get_team_or_404(db: AsyncSession, team_id: int) -> RosterTeam:
    team = await db.get(RosterTeam, team_id)
    if team is None:
        raise NotFound("Team not found")
    return team


async def _list_pages(db: AsyncSession, team_id: int) -> list[TeamPage]:
    result = await db.execute(
        select(RosterTeamPage)
        .where(RosterTeamPage.team_id == team_id)
        .order_by(RosterTeamPage.page_label.asc(), RosterTeamPage.page_key.asc())
    )
    return [TeamPage.model_validate(p) for p in result.scalars().all()]


async def _upsert_pages(db: AsyncSession, team_id: int, pages: dict[str, str]) -> None:
    """Insert pages or relabel the ones the team already has."""
    result = await db.execute(
        select(RosterTeamPage).where(
            RosterTeamPage.team_id == team_id,
            RosterTeamPage.page_key.in_(list(pages)),
        )
    )
    existing = {p.page_key: p for p in result.scalars().all()}
    for key, label in pages.items():
        if key in existing:
            existing[key].page_label = label
        else:
            db.add(RosterTeamPage(team_id=team_id, page_key=key, page_label=label))
    await db.commit()


# ── Teams ───────────────────────────────────────────────────────────
@router.get("/teams", response_model=TeamList)
async def list_teams(
    db: AsyncSession = Depends(get_accounts_db),
    _caller: Caller = Depends(require_approved),
) -> TeamList:
    result = await db.execute(select(RosterTeam).order_by(RosterTeam.name.asc()))
    return TeamList(teams=[TeamRead.model_validate(t) for t in result.scalars().all()])


@router.post("/teams", response_model=TeamRead)
async def create_team(
    body: TeamCreate,
    db: AsyncSession = Depends(get_accounts_db),
    caller: Caller = Depends(require_approved),
) -> TeamRead:
    """Create a team; an existing team with the same name is returned as is."""
    result = await db.execute(select(RosterTeam).where(RosterTeam.name == body.name))
    team = result.scalar_one_or_none()
    if team is None:
        try:
            team = RosterTeam(name=body.name)
            db.add(team)
            await db.commit()
            await db.refresh(team)
            logger.info("Roster team '%s' created by %s", team.name, caller.email)
        except IntegrityError:
            await db.rollback()
            result = await db.execute(select(RosterTeam).where(RosterTeam.name == body.name))
            team = result.scalar_one()
    return TeamRead.model_validate(team)


@router.delete("/teams/{team_id}", response_model=SuccessResponse)
async def delete_team(
    team_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_accounts_db),
    caller: Caller = Depends(require_approved),
) -> SuccessResponse:
    """Delete a team together with its pages."""
    team = await _get_team_or_404(db, team_id)
    # Explicit so it also holds on stores without enforced foreign keys.
    await db.execute(delete(RosterTeamPage).where(RosterTeamPage.team_id == team_id))
    await db.delete(team)
    await db.commit()
    logger.info("Roster team %s deleted by %s", team_id, caller.email)
    return SuccessResponse(message="Team deleted")


# ── Team pages ──────────────────────────────────────────────────────
@router.get("/teams/{team_id}/pages", response_model=TeamPageList)
async def list_team_pages(
    team_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_accounts_db),
    _caller: Caller = Depends(require_approved),
) -> TeamPageList:
    """Pages of a team. A team with no pages is seeded with the expected pages."""
    await _get_team_or_404(db, team_id)
    pages = await _list_pages(db, team_id)
    if not pages:
        await _upsert_pages(db, team_id, dict(EXPECTED_PAGES))
        logger.info("Seeded team %s with %d default pages", team_id, len(EXPECTED_PAGES))
        pages = await _list_pages(db, team_id)
    return TeamPageList(pages=pages)


@router.post("/teams/{team_id}/pages", response_model=SuccessResponse)
async def add_team_page(
    body: TeamPageCreate,
    team_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_accounts_db),
    _caller: Caller = Depends(require_approved),
) -> SuccessResponse:
    await _get_team_or_404(db, team_id)
    await _upsert_pages(db, team_id, {body.page_key: body.page_label})
    return SuccessResponse(message="Page saved")


@router.post("/teams/{team_id}/pages/bulk", response_model=BulkPagesResponse)
async def bulk_add_team_pages(
    body: BulkPagesRequest,
    team_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_accounts_db),
    _caller: Caller = Depends(require_approved),
) -> BulkPagesResponse:
    """Add or relabel many pages at once; entries missing a key or label are skipped."""
    await _get_team_or_404(db, team_id)

    pages: dict[str, str] = {}
    for item in body.pages:
        key = (item.page_key or "").strip().lower()
        label = (item.page_label or "").strip()
        if key and label:
            pages[key] = label
    if not pages:
        raise InvalidInput("No valid pages provided")

    await _upsert_pages(db, team_id, pages)
    return BulkPagesResponse(success=True, inserted=len(pages))


@router.delete("/teams/{team_id}/pages/{page_key}", response_model=SuccessResponse)
async def remove_team_page(
    page_key: str,
    team_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_accounts_db),
    _caller: Caller = Depends(require_approved),
) -> SuccessResponse:
    await _get_team_or_404(db, team_id)
    key = page_key.strip().lower()
    if not key:
        raise InvalidInput("page_key is required")
    await db.execute(
        delete(RosterTeamPage).where(
            RosterTeamPage.team_id == team_id, RosterTeamPage.page_key == key
        )
    )
    await db.commit()
    return SuccessResponse(message="Page removed")


@router.delete("/teams/{team_id}/pages", response_model=ClearPagesResponse)
async def clear_team_pages(
    team_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_accounts_db),
    caller: Caller = Depends(require_approved),
) -> ClearPagesResponse:
    """Remove every page of a team."""
    await _get_team_or_404(db, team_id)
    result = await db.execute(
        delete(RosterTeamPage).where(RosterTeamPage.team_id == team_id)
    )
    await db.commit()
    removed = result.rowcount or 0
    logger.info("Cleared %d pages from team %s (%s)", removed, team_id, caller.email)
    return ClearPagesResponse(success=True, removed=removed)

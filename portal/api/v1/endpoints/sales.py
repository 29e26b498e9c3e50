"""
Sales endpoints: shift, window and daily aggregates from the sales store.

All operations require an approved caller. Monetary values are summed in
the store, default to 0 and are rounded to cents.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, timedelta

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.api.v1.deps import get_now, require_approved
from portal.core.access import Caller
from portal.core.business_day import local_date, local_day_start, sales_shift
from portal.core.config import settings
from portal.core.exceptions import InvalidInput
from portal.db.session import get_sales_db
from portal.models.sales import PageGoal, Sale, SalesTeam, ShiftGoal
from portal.schemas.sales import (DailyTotal, PageTotal, SalesOverviewResponse,
                                  SalesPageRow, SalesPagesResponse,
                                  SalesShiftResponse, SalesSummaryResponse,
                                  ShiftBlock, TeamNames, WindowTotals)

router = APIRouter(tags=["sales"])

WINDOW_DAYS = (15, 30)
DAILY_SERIES_DAYS = 30


def _money(value: object) -> float:
    return round(float(value or 0), 2)


def _require_team(team: str) -> str:
    team = team.strip()
    if not team:
        raise InvalidInput("team is required")
    return team


def _require_window(days: int) -> int:
    if days not in WINDOW_DAYS:
        raise InvalidInput("days must be 15 or 30")
    return days


# ── Queries ─────────────────────────────────────────────────────────
async def _total_since(db: AsyncSession, team: str, since: datetime) -> float:
    result = await db.execute(
        select(func.coalesce(func.sum(Sale.amount), 0)).where(
            Sale.team == team, Sale.ts >= since
        )
    )
    return _money(result.scalar_one())


async def _totals_by_page(db: AsyncSession, team: str, since: datetime) -> list[PageTotal]:
    total = func.coalesce(func.sum(Sale.amount), 0)
    result = await db.execute(
        select(Sale.page, total)
        .where(Sale.team == team, Sale.ts >= since)
        .group_by(Sale.page)
    )
    rows = [PageTotal(page=page, total=_money(t)) for page, t in result.all()]
    rows.sort(key=lambda r: (-r.total, r.page))
    return rows


async def _page_goals(db: AsyncSession, team: str) -> dict[str, float]:
    result = await db.execute(
        select(PageGoal.page, PageGoal.goal).where(PageGoal.team == team)
    )
    return {page: _money(goal) for page, goal in result.all()}


async def _shift_goals(db: AsyncSession) -> dict[str, float]:
    # Shift goals are global, not per team.
    result = await db.execute(select(ShiftGoal.page, ShiftGoal.goal))
    return {page: _money(goal) for page, goal in result.all()}


def _count_red_pages(by_page: list[PageTotal], goals: dict[str, float]) -> int:
    """Pages below the red threshold of their shift goal; pages without a goal never count."""
    red = 0
    for row in by_page:
        goal = goals.get(row.page, 0)
        if goal <= 0:
            continue
        if row.total / goal * 100 < settings.RED_PAGE_THRESHOLD_PCT:
            red += 1
    return red


async def _shift_block(db: AsyncSession, team: str, now: datetime) -> ShiftBlock:
    shift = sales_shift(now)
    by_page = await _totals_by_page(db, team, shift.start)
    goals = await _shift_goals(db)
    return ShiftBlock(
        date=shift.date,
        start_hour=shift.start_hour,
        start_utc=shift.start,
        total=_money(sum(r.total for r in by_page)),
        by_page=by_page,
        goals=goals,
        red_pages=_count_red_pages(by_page, goals),
    )


# ── Endpoints ───────────────────────────────────────────────────────
@router.get("/teams", response_model=TeamNames)
async def list_sales_teams(
    db: AsyncSession = Depends(get_sales_db),
    _caller: Caller = Depends(require_approved),
) -> TeamNames:
    """Distinct team names known to the sales store."""
    result = await db.execute(
        select(SalesTeam.name).distinct().order_by(SalesTeam.name.asc())
    )
    return TeamNames(teams=[str(n) for n in result.scalars().all()])


@router.get("/sales/shift", response_model=SalesShiftResponse)
async def sales_current_shift(
    team: str = Query(...),
    db: AsyncSession = Depends(get_sales_db),
    now: datetime = Depends(get_now),
    _caller: Caller = Depends(require_approved),
) -> SalesShiftResponse:
    """Totals of the current 8-hour sales shift with red-page count."""
    team = _require_team(team)
    return SalesShiftResponse(
        team=team,
        shift=await _shift_block(db, team, now),
        page_goals=await _page_goals(db, team),
    )


@router.get("/sales/summary", response_model=SalesSummaryResponse)
async def sales_summary(
    team: str = Query(...),
    days: int = Query(15),
    db: AsyncSession = Depends(get_sales_db),
    now: datetime = Depends(get_now),
    _caller: Caller = Depends(require_approved),
) -> SalesSummaryResponse:
    team = _require_team(team)
    days = _require_window(days)

    total_sales = await _total_since(db, team, now - timedelta(days=days))
    goal_result = await db.execute(
        select(func.coalesce(func.sum(PageGoal.goal), 0)).where(PageGoal.team == team)
    )
    return SalesSummaryResponse(
        team=team,
        days=days,
        total_sales=total_sales,
        total_goal=_money(goal_result.scalar_one()),
    )


@router.get("/sales/pages", response_model=SalesPagesResponse)
async def sales_pages(
    team: str = Query(...),
    days: int = Query(15),
    db: AsyncSession = Depends(get_sales_db),
    now: datetime = Depends(get_now),
    _caller: Caller = Depends(require_approved),
) -> SalesPagesResponse:
    """Per-page totals and goals over the window, plus today's (local) total.

    Rows cover every page that has either sales or a goal.
    """
    team = _require_team(team)
    days = _require_window(days)
    since = now - timedelta(days=days)

    totals = {r.page: r.total for r in await _totals_by_page(db, team, since)}
    goals = await _page_goals(db, team)

    rows = [
        SalesPageRow(page=page, total=totals.get(page, 0.0), goal=goals.get(page, 0.0))
        for page in set(totals) | set(goals)
    ]
    rows.sort(key=lambda r: (-r.total, r.page))

    return SalesPagesResponse(
        team=team,
        days=days,
        total=await _total_since(db, team, since),
        today_total=await _total_since(db, team, local_day_start(now)),
        rows=rows,
    )


@router.get("/sales/overview", response_model=SalesOverviewResponse)
async def sales_overview(
    team: str = Query(...),
    db: AsyncSession = Depends(get_sales_db),
    now: datetime = Depends(get_now),
    _caller: Caller = Depends(require_approved),
) -> SalesOverviewResponse:
    """Shift block, 15/30-day per-page totals and the 30-day daily series."""
    team = _require_team(team)
    goals = await _page_goals(db, team)

    windows: dict[int, WindowTotals] = {}
    for days in WINDOW_DAYS:
        by_page = await _totals_by_page(db, team, now - timedelta(days=days))
        windows[days] = WindowTotals(
            days=days,
            total=_money(sum(r.total for r in by_page)),
            by_page=by_page,
            goals=goals,
        )

    # Bucketed by local calendar day in Python.
    result = await db.execute(
        select(Sale.ts, Sale.amount).where(
            Sale.team == team, Sale.ts >= now - timedelta(days=DAILY_SERIES_DAYS)
        )
    )
    buckets: dict[date, float] = defaultdict(float)
    for ts, amount in result.all():
        buckets[local_date(ts)] += float(amount or 0)
    daily = [DailyTotal(day=d, total=_money(t)) for d, t in sorted(buckets.items())]

    return SalesOverviewResponse(
        team=team,
        shift=await _shift_block(db, team, now),
        days15=windows[15],
        days30=windows[30],
        daily=daily,
    )

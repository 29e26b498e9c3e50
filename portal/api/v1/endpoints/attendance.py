"""
Attendance endpoints: clock-in counts and missing pages per attendance day.

The attendance day rolls over at 06:00 local time. Page keys from the
attendance store are normalized before they are matched against the
expected pages, so ``#Bri_Free/OFTV`` and ``brifreeoftv`` count together.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.api.v1.deps import get_now, require_approved
from portal.core.access import Caller
from portal.core.business_day import (ATTENDANCE_SHIFTS, attendance_date,
                                      attendance_day_start, is_late, to_local)
from portal.core.pages import EXPECTED_PAGES, normalize_tag
from portal.db.session import get_attendance_db
from portal.models.attendance import ClockIn
from portal.schemas.attendance import (AttendanceDetailResponse,
                                       AttendancePagesResponse,
                                       AttendanceStatusResponse,
                                       AttendanceSummaryResponse,
                                       AttendanceTableResponse,
                                       AttendanceTotals, ClockEntry, LateEntry,
                                       PageStatusRow, ShiftPageCount,
                                       SlotClocks)

router = APIRouter(prefix="/attendance", tags=["attendance"])

# (shift, normalized page key) -> [clocked, covers]
Counts = dict[tuple[str, str], list[int]]


async def _count_clockins(
    db: AsyncSession, day: date, shift: str | None = None
) -> Counts:
    clocked = func.sum(case((ClockIn.is_cover.is_(False), 1), else_=0))
    covers = func.sum(case((ClockIn.is_cover.is_(True), 1), else_=0))
    stmt = (
        select(ClockIn.shift, ClockIn.page_key, clocked, covers)
        .where(ClockIn.attendance_day == day)
        .group_by(ClockIn.shift, ClockIn.page_key)
    )
    if shift is not None:
        stmt = stmt.where(ClockIn.shift == shift)

    counts: Counts = defaultdict(lambda: [0, 0])
    for sh, page_key, c, cv in (await db.execute(stmt)).all():
        entry = counts[(str(sh).lower(), normalize_tag(page_key))]
        entry[0] += int(c or 0)
        entry[1] += int(cv or 0)
    return counts


def _status_rows(counts: Counts, shift: str) -> list[PageStatusRow]:
    """One row per expected page; ``shift="all"`` sums the three shifts."""
    shifts = ATTENDANCE_SHIFTS if shift == "all" else (shift,)
    rows = []
    for key, label in EXPECTED_PAGES.items():
        clocked = sum(counts.get((sh, key), (0, 0))[0] for sh in shifts)
        covers = sum(counts.get((sh, key), (0, 0))[1] for sh in shifts)
        rows.append(
            PageStatusRow(
                page_key=key,
                page_label=label,
                shift=shift,
                clocked=clocked,
                covers=covers,
                status="missing" if clocked == 0 and covers == 0 else "clocked",
            )
        )
    return rows


@router.get("/summary", response_model=AttendanceSummaryResponse)
async def attendance_summary(
    db: AsyncSession = Depends(get_attendance_db),
    now: datetime = Depends(get_now),
    _caller: Caller = Depends(require_approved),
) -> AttendanceSummaryResponse:
    """Main and cover clock-ins for the current attendance day."""
    day = attendance_date(now)
    counts = await _count_clockins(db, day)
    return AttendanceSummaryResponse(
        attendance_day=day.isoformat(),
        clocked_in=sum(c[0] for c in counts.values()),
        covers=sum(c[1] for c in counts.values()),
    )


@router.get("/table", response_model=AttendanceTableResponse)
async def attendance_table(
    db: AsyncSession = Depends(get_attendance_db),
    now: datetime = Depends(get_now),
    _caller: Caller = Depends(require_approved),
) -> AttendanceTableResponse:
    """Counts per (shift, page) for the current attendance day."""
    day = attendance_date(now)
    counts = await _count_clockins(db, day)
    rows = [
        ShiftPageCount(shift=sh, page_key=key, clocked=c[0], covers=c[1])
        for (sh, key), c in sorted(counts.items())
    ]
    return AttendanceTableResponse(
        attendance_day=day.isoformat(),
        totals=AttendanceTotals(
            clocked_in=sum(r.clocked for r in rows),
            covers=sum(r.covers for r in rows),
        ),
        rows=rows,
    )


@router.get("/pages", response_model=AttendancePagesResponse)
async def attendance_pages(
    shift: Literal["prime", "midshift", "closing"] = Query("prime"),
    day: Optional[date] = Query(None, description="YYYY-MM-DD; defaults to the current attendance day"),
    db: AsyncSession = Depends(get_attendance_db),
    now: datetime = Depends(get_now),
    _caller: Caller = Depends(require_approved),
) -> AttendancePagesResponse:
    """Every expected page for one shift, marked clocked or missing."""
    day = day or attendance_date(now)
    rows = _status_rows(await _count_clockins(db, day, shift), shift)
    return AttendancePagesResponse(
        day=day.isoformat(),
        shift=shift,
        on_shift=sum(r.clocked for r in rows),
        covers=sum(r.covers for r in rows),
        rows=rows,
    )


@router.get("/status", response_model=AttendanceStatusResponse)
async def attendance_status(
    shift: Literal["prime", "midshift", "closing", "all"] = Query("all"),
    db: AsyncSession = Depends(get_attendance_db),
    now: datetime = Depends(get_now),
    _caller: Caller = Depends(require_approved),
) -> AttendanceStatusResponse:
    """Expected, clocked and missing page counts for the current attendance day.

    With ``shift=all`` a page counts as clocked if anyone clocked in on it
    during any shift.
    """
    day = attendance_date(now)
    counts = await _count_clockins(db, day, None if shift == "all" else shift)
    rows = _status_rows(counts, shift)
    missing = [r for r in rows if r.status == "missing"]
    return AttendanceStatusResponse(
        shift=shift,
        attendance_day=day.isoformat(),
        attendance_day_start_utc=attendance_day_start(now),
        expected_count=len(rows),
        clocked_count=len(rows) - len(missing),
        missing_count=len(missing),
        missing_pages=missing,
        rows=rows,
    )


@router.get("/detail", response_model=AttendanceDetailResponse)
async def attendance_detail(
    day: Optional[date] = Query(None, description="YYYY-MM-DD; defaults to the current attendance day"),
    db: AsyncSession = Depends(get_attendance_db),
    now: datetime = Depends(get_now),
    _caller: Caller = Depends(require_approved),
) -> AttendanceDetailResponse:
    """Who clocked in per shift and page, with late clock-ins flagged."""
    day = day or attendance_date(now)
    result = await db.execute(
        select(ClockIn)
        .where(ClockIn.attendance_day == day)
        .order_by(ClockIn.shift, ClockIn.page_key, ClockIn.is_cover, ClockIn.user_name)
    )

    data: dict[str, dict[str, SlotClocks]] = {}
    for row in result.scalars().all():
        shift = str(row.shift).lower()
        slot = data.setdefault(shift, {}).setdefault(normalize_tag(row.page_key), SlotClocks())
        name = row.user_name or row.display_name or "Unknown"
        time_str = to_local(row.ph_ts).strftime("%I:%M %p")

        target = slot.covers if row.is_cover else slot.users
        target.append(ClockEntry(name=name, time=time_str))
        if is_late(shift, row.ph_ts):
            slot.late.append(LateEntry(name=name, time=time_str, is_cover=bool(row.is_cover)))

    return AttendanceDetailResponse(day=day.isoformat(), data=data)

"""
Masterlist endpoints: who holds each page and shift, and chatter tiers.

The live masterlist prefers today's attendance (a main chatter over a
cover) and falls back to the saved slot when nobody has clocked in.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from portal.api.v1.deps import get_now, require_approved
from portal.core.access import Caller
from portal.core.business_day import ATTENDANCE_SHIFTS, attendance_date
from portal.core.pages import EXPECTED_PAGES, normalize_tag
from portal.core.tiers import assign_tiers
from portal.db.session import (get_accounts_db, get_attendance_db,
                               get_sales_db)
from portal.models.attendance import ClockIn
from portal.models.masterlist import MasterlistSlot
from portal.models.sales import Sale
from portal.schemas.masterlist import (MasterlistPage, MasterlistResponse,
                                       SlotList, SlotPerson, SlotRead,
                                       SlotUpsert, TierRow, TiersResponse)

router = APIRouter(prefix="/masterlist", tags=["masterlist"])
logger = logging.getLogger(__name__)

_NON_WORD_RE = re.compile(r"[^\w]")
_EMBEDDED_HANDLE_RE = re.compile(r"@\w+")
_SPACES_RE = re.compile(r"\s+")


def _clean_username(value: str | None) -> str:
    """``"@@jo.hn "`` -> ``"john"``."""
    s = (value or "").strip().lstrip("@")
    return _NON_WORD_RE.sub("", s)


def _clean_display_name(value: str | None) -> str:
    s = _EMBEDDED_HANDLE_RE.sub("", (value or "").strip())
    return _SPACES_RE.sub(" ", s).strip()


def _handle(username: str) -> str:
    return f"@{username}" if username else ""


# ── Masterlist ──────────────────────────────────────────────────────
def _live_person(row: ClockIn) -> SlotPerson:
    username = (row.tg_username or "").strip().lstrip("@")
    display = (
        (row.display_name or "").strip()
        or (row.user_name or "").strip()
        or _handle(username)
        or "Unknown"
    )
    return SlotPerson(
        display_name=display,
        username=_handle(username),
        is_cover=bool(row.is_cover),
        source="attendance",
    )


def _saved_person(slot: MasterlistSlot) -> SlotPerson | None:
    username = (slot.main_tg_username or "").strip().lstrip("@")
    display = (slot.main_display_name or "").strip()
    if not display and not username:
        return None
    return SlotPerson(
        display_name=display or _handle(username),
        username=_handle(username),
        is_cover=False,
        source="saved",
    )


@router.get("", response_model=MasterlistResponse)
async def read_masterlist(
    accounts_db: AsyncSession = Depends(get_accounts_db),
    attendance_db: AsyncSession = Depends(get_attendance_db),
    now: datetime = Depends(get_now),
    _caller: Caller = Depends(require_approved),
) -> MasterlistResponse:
    day = attendance_date(now)

    saved: dict[tuple[str, str], SlotPerson] = {}
    for slot in (await accounts_db.execute(select(MasterlistSlot))).scalars().all():
        person = _saved_person(slot)
        if person is not None:
            saved[(normalize_tag(slot.page_key), slot.shift)] = person

    result = await attendance_db.execute(
        select(ClockIn)
        .where(ClockIn.attendance_day == day)
        .order_by(ClockIn.ph_ts.asc(), ClockIn.id.asc())
    )
    live: dict[tuple[str, str], SlotPerson] = {}
    for row in result.scalars().all():
        key = (normalize_tag(row.page_key), str(row.shift).lower())
        existing = live.get(key)
        # Earliest main wins; a cover only holds the slot until a main shows up.
        if existing is None or (existing.is_cover and not row.is_cover):
            live[key] = _live_person(row)

    pages = []
    for page_key, label in EXPECTED_PAGES.items():
        slots = {
            shift: live.get((page_key, shift)) or saved.get((page_key, shift))
            for shift in ATTENDANCE_SHIFTS
        }
        pages.append(MasterlistPage(page_key=page_key, page_label=label, **slots))

    return MasterlistResponse(attendance_day=day.isoformat(), pages=pages)


# ── Saved slots ─────────────────────────────────────────────────────
@router.get("/slots", response_model=SlotList)
async def list_slots(
    db: AsyncSession = Depends(get_accounts_db),
    _caller: Caller = Depends(require_approved),
) -> SlotList:
    result = await db.execute(
        select(MasterlistSlot).order_by(MasterlistSlot.page_key, MasterlistSlot.shift)
    )
    return SlotList(slots=[SlotRead.model_validate(s) for s in result.scalars().all()])


async def _get_slot(db: AsyncSession, page_key: str, shift: str) -> MasterlistSlot | None:
    result = await db.execute(
        select(MasterlistSlot).where(
            MasterlistSlot.page_key == page_key, MasterlistSlot.shift == shift
        )
    )
    return result.scalar_one_or_none()


@router.post("/slots", response_model=SlotRead)
async def upsert_slot(
    body: SlotUpsert,
    db: AsyncSession = Depends(get_accounts_db),
    caller: Caller = Depends(require_approved),
) -> SlotRead:
    """Save the main chatter for a page and shift (insert or overwrite)."""
    slot = await _get_slot(db, body.page_key, body.shift)
    if slot is None:
        try:
            slot = MasterlistSlot(
                page_key=body.page_key,
                shift=body.shift,
                main_tg_username=body.main_tg_username,
                main_display_name=body.main_display_name,
            )
            db.add(slot)
            await db.commit()
        except IntegrityError:
            await db.rollback()
            slot = await _get_slot(db, body.page_key, body.shift)
            if slot is None:
                raise
    if slot.main_tg_username != body.main_tg_username or slot.main_display_name != body.main_display_name:
        slot.main_tg_username = body.main_tg_username
        slot.main_display_name = body.main_display_name
        await db.commit()
    await db.refresh(slot)

    logger.info("Masterlist slot %s/%s saved by %s", slot.page_key, slot.shift, caller.email)
    return SlotRead.model_validate(slot)


# ── Tiers ───────────────────────────────────────────────────────────
@router.get("/tiers", response_model=TiersResponse)
async def chatter_tiers(
    days: int = Query(30, ge=1, le=365),
    team: Optional[str] = Query(None),
    sales_db: AsyncSession = Depends(get_sales_db),
    attendance_db: AsyncSession = Depends(get_attendance_db),
    now: datetime = Depends(get_now),
    _caller: Caller = Depends(require_approved),
) -> TiersResponse:
    """Rank chatters by daily average sales over the window and assign tiers 5..1.

    Names come from each chatter's latest clock-in; chatters who never
    clocked in are shown as ``Chatter <id>``.
    """
    team = (team or "").strip() or None

    total = func.coalesce(func.sum(Sale.amount), 0)
    stmt = (
        select(Sale.chat_id, total)
        .where(Sale.ts >= now - timedelta(days=days), Sale.chat_id.is_not(None))
        .group_by(Sale.chat_id)
        .order_by(total.desc(), Sale.chat_id.asc())
    )
    if team:
        stmt = stmt.where(Sale.team == team)
    totals = [(int(cid), round(float(t or 0), 2)) for cid, t in (await sales_db.execute(stmt)).all()]
    if not totals:
        return TiersResponse(days=days, team=team, tiers=[])

    identities: dict[int, tuple[str, str]] = {}
    result = await attendance_db.execute(
        select(ClockIn)
        .where(ClockIn.chat_id.in_([cid for cid, _ in totals]))
        .order_by(ClockIn.ph_ts.desc(), ClockIn.id.desc())
    )
    for row in result.scalars().all():
        if row.chat_id in identities:
            continue  # latest only
        username = _clean_username(row.tg_username)
        display = _clean_display_name(row.display_name) or _clean_display_name(row.user_name)
        identities[row.chat_id] = (display or username, username)

    tiers = []
    ranked = assign_tiers(totals, key=lambda item: item[1] / days)
    for (cid, total_sales), tier in ranked:
        display, username = identities.get(cid, ("", ""))
        tiers.append(
            TierRow(
                chatter_id=str(cid),
                display_name=display or f"Chatter {cid}",
                username=_handle(username),
                total_sales=total_sales,
                daily_average=round(total_sales / days, 2),
                tier=tier,
            )
        )

    note = None
    if not identities:
        note = "No clock-ins matched these chatters, so names are not available yet."
    return TiersResponse(days=days, team=team, tiers=tiers, note=note)

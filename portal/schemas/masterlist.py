"""Pydantic schemas for the masterlist and chatter tiers."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, field_validator

from portal.core.business_day import ATTENDANCE_SHIFTS


class SlotPerson(BaseModel):
    display_name: str
    username: str
    is_cover: bool
    source: Literal["attendance", "saved"]


class MasterlistPage(BaseModel):
    page_key: str
    page_label: str
    prime: SlotPerson | None = None
    midshift: SlotPerson | None = None
    closing: SlotPerson | None = None


class MasterlistResponse(BaseModel):
    attendance_day: str
    pages: list[MasterlistPage]


class SlotRead(BaseModel):
    id: int
    page_key: str
    shift: str
    main_tg_username: str | None
    main_display_name: str | None

    model_config = {"from_attributes": True}


class SlotList(BaseModel):
    slots: list[SlotRead]


class SlotUpsert(BaseModel):
    page_key: str
    shift: str
    main_tg_username: str | None = None
    main_display_name: str | None = None

    @field_validator("page_key")
    @classmethod
    def _page_key(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("page_key is required")
        return v

    @field_validator("shift")
    @classmethod
    def _shift(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ATTENDANCE_SHIFTS:
            raise ValueError("shift must be prime|midshift|closing")
        return v

    @field_validator("main_tg_username")
    @classmethod
    def _username(cls, v: str | None) -> str | None:
        v = (v or "").strip().lstrip("@")
        return v or None

    @field_validator("main_display_name")
    @classmethod
    def _display(cls, v: str | None) -> str | None:
        v = (v or "").strip()
        return v or None


class TierRow(BaseModel):
    chatter_id: str
    display_name: str
    username: str
    total_sales: float
    daily_average: float
    tier: int


class TiersResponse(BaseModel):
    days: int
    team: str | None
    tiers: list[TierRow]
    note: str | None = None

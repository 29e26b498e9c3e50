"""Pydantic schemas for attendance aggregations."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

PageStatus = Literal["clocked", "missing"]


class AttendanceSummaryResponse(BaseModel):
    attendance_day: str
    clocked_in: int
    covers: int


class ShiftPageCount(BaseModel):
    shift: str
    page_key: str
    clocked: int
    covers: int


class AttendanceTotals(BaseModel):
    clocked_in: int
    covers: int


class AttendanceTableResponse(BaseModel):
    attendance_day: str
    totals: AttendanceTotals
    rows: list[ShiftPageCount]


class PageStatusRow(BaseModel):
    page_key: str
    page_label: str
    shift: str
    clocked: int
    covers: int
    status: PageStatus


class AttendancePagesResponse(BaseModel):
    day: str
    shift: str
    on_shift: int
    covers: int
    rows: list[PageStatusRow]


class AttendanceStatusResponse(BaseModel):
    shift: str
    attendance_day: str
    attendance_day_start_utc: datetime
    expected_count: int
    clocked_count: int
    missing_count: int
    missing_pages: list[PageStatusRow]
    rows: list[PageStatusRow]


class ClockEntry(BaseModel):
    name: str
    time: str


class LateEntry(ClockEntry):
    is_cover: bool


class SlotClocks(BaseModel):
    users: list[ClockEntry] = []
    covers: list[ClockEntry] = []
    late: list[LateEntry] = []


class AttendanceDetailResponse(BaseModel):
    day: str
    # shift -> page_key -> clock-ins
    data: dict[str, dict[str, SlotClocks]]

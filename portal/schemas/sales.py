"""Pydantic schemas for sales aggregations."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel


class TeamNames(BaseModel):
    teams: list[str]


class PageTotal(BaseModel):
    page: str
    total: float


class ShiftBlock(BaseModel):
    date: str
    start_hour: int
    start_utc: datetime
    total: float
    by_page: list[PageTotal]
    goals: dict[str, float]
    red_pages: int = 0


class SalesShiftResponse(BaseModel):
    team: str
    shift: ShiftBlock
    page_goals: dict[str, float]


class SalesSummaryResponse(BaseModel):
    team: str
    days: int
    total_sales: float
    total_goal: float


class SalesPageRow(BaseModel):
    page: str
    total: float
    goal: float


class SalesPagesResponse(BaseModel):
    team: str
    days: int
    total: float
    today_total: float
    rows: list[SalesPageRow]


class WindowTotals(BaseModel):
    days: int
    total: float
    by_page: list[PageTotal]
    goals: dict[str, float]


class DailyTotal(BaseModel):
    day: date
    total: float


class SalesOverviewResponse(BaseModel):
    team: str
    shift: ShiftBlock
    days15: WindowTotals
    days30: WindowTotals
    daily: list[DailyTotal]

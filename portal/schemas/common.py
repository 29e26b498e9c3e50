"""Pydantic schemas shared across endpoints."""

from __future__ import annotations

from pydantic import BaseModel


class SuccessResponse(BaseModel):
    success: bool = True
    message: str | None = None


class LogoutResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    accounts: bool
    sales: bool
    attendance: bool

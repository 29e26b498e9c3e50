"""Pydantic schemas for accounts and the approval workflow."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, field_validator

from portal.core.access import AccessLevel, ApprovalStatus, Role


class IdentityClaim(BaseModel):
    """What the identity provider tells us about the person signing in."""

    email: str
    display_name: str | None = None

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("Invalid email address")
        return v


class AccountRead(BaseModel):
    id: int
    email: str
    name: str | None
    role: Role
    status: ApprovalStatus
    created_at: datetime | None
    last_login_at: datetime | None = None

    model_config = {"from_attributes": True}


class AccountList(BaseModel):
    rows: list[AccountRead]


class ApprovalRequest(BaseModel):
    id: int
    action: Literal["approve", "reject"]
    role: Role | None = None


class ApprovalResponse(BaseModel):
    success: bool
    account: AccountRead


class MeResponse(BaseModel):
    email: str
    name: str | None
    role: Role
    status: ApprovalStatus
    access: AccessLevel

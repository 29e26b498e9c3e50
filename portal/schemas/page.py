"""Pydantic schemas for the page catalog."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, field_validator

from portal.core.pages import normalize_tag


class PageRead(BaseModel):
    tag: str
    label: str
    is_active: bool
    created_at: datetime | None
    updated_at: datetime | None

    model_config = {"from_attributes": True}


class PageList(BaseModel):
    rows: list[PageRead]


class PageCreate(BaseModel):
    tag: str
    label: str

    @field_validator("tag")
    @classmethod
    def _tag(cls, v: str) -> str:
        v = normalize_tag(v)
        if len(v) < 2:
            raise ValueError("Invalid tag")
        return v

    @field_validator("label")
    @classmethod
    def _label(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Label is required")
        return v


class PageUpdate(BaseModel):
    label: str | None = None
    is_active: bool | None = None

    @field_validator("label")
    @classmethod
    def _label(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Label must not be empty")
        return v

"""Pydantic schemas for roster teams and team pages."""

from __future__ import annotations

from pydantic import BaseModel, field_validator


class TeamRead(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class TeamList(BaseModel):
    teams: list[TeamRead]


class TeamCreate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name is required")
        if len(v) > 200:
            raise ValueError("name must not exceed 200 characters")
        return v


class TeamPage(BaseModel):
    page_key: str
    page_label: str

    model_config = {"from_attributes": True}


class TeamPageList(BaseModel):
    pages: list[TeamPage]


class TeamPageCreate(BaseModel):
    page_key: str
    page_label: str

    @field_validator("page_key")
    @classmethod
    def _key(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("page_key is required")
        return v

    @field_validator("page_label")
    @classmethod
    def _label(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("page_label is required")
        return v


class BulkPageItem(BaseModel):
    # Loose on purpose: blank entries are skipped rather than rejected.
    page_key: str | None = None
    page_label: str | None = None


class BulkPagesRequest(BaseModel):
    pages: list[BulkPageItem]


class BulkPagesResponse(BaseModel):
    success: bool
    inserted: int


class ClearPagesResponse(BaseModel):
    success: bool
    removed: int

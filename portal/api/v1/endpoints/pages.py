"""
Page catalog endpoints.

- GET is open to any approved caller.
- POST / PATCH / DELETE require an approved admin.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.api.v1.deps import require_admin, require_approved
from portal.core.access import Caller
from portal.core.exceptions import InvalidInput, NotFound
from portal.core.pages import normalize_tag
from portal.db.session import get_accounts_db
from portal.models.page import Page
from portal.schemas.common import SuccessResponse
from portal.schemas.page import PageCreate, PageList, PageRead, PageUpdate

router = APIRouter(prefix="/pages", tags=["pages"])
logger = logging.getLogger(__name__)


async def _get_page_or_404(db: AsyncSession, tag: str) -> Page:
    key = normalize_tag(tag)
    if not key:
        raise InvalidInput("Missing tag")
    page = await db.get(Page, key)
    if page is None:
        raise NotFound("Page not found")
    return page


@router.get("", response_model=PageList)
async def list_pages(
    db: AsyncSession = Depends(get_accounts_db),
    _caller: Caller = Depends(require_approved),
) -> PageList:
    result = await db.execute(select(Page).order_by(func.lower(Page.tag).asc()))
    return PageList(rows=[PageRead.model_validate(p) for p in result.scalars().all()])


@router.post("", response_model=PageRead)
async def create_page(
    body: PageCreate,
    db: AsyncSession = Depends(get_accounts_db),
    admin: Caller = Depends(require_admin),
) -> PageRead:
    """Create a page, or relabel and reactivate it when the tag already exists."""
    page = await db.get(Page, body.tag)
    if page is None:
        page = Page(tag=body.tag, label=body.label, is_active=True)
        db.add(page)
    else:
        page.label = body.label
        page.is_active = True
    await db.commit()
    await db.refresh(page)
    logger.info("Page '%s' saved by %s", page.tag, admin.email)
    return PageRead.model_validate(page)


@router.patch("/{tag}", response_model=PageRead)
async def update_page(
    tag: str,
    body: PageUpdate,
    db: AsyncSession = Depends(get_accounts_db),
    admin: Caller = Depends(require_admin),
) -> PageRead:
    """Partial update of ``label`` and/or ``is_active``."""
    update_data = body.model_dump(exclude_unset=True, exclude_none=True)
    if not update_data:
        raise InvalidInput("Nothing to update")

    page = await _get_page_or_404(db, tag)
    for field, value in update_data.items():
        setattr(page, field, value)
    await db.commit()
    await db.refresh(page)
    logger.info("Page '%s' updated by %s: %s", page.tag, admin.email, sorted(update_data))
    return PageRead.model_validate(page)


@router.delete("/{tag}", response_model=SuccessResponse)
async def delete_page(
    tag: str,
    db: AsyncSession = Depends(get_accounts_db),
    admin: Caller = Depends(require_admin),
) -> SuccessResponse:
    page = await _get_page_or_404(db, tag)
    await db.delete(page)
    await db.commit()
    logger.info("Page '%s' deleted by %s", page.tag, admin.email)
    return SuccessResponse(message="Page deleted")

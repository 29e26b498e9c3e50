"""
Public health check: connectivity of the three stores.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from portal.db.session import (get_accounts_db, get_attendance_db,
                               get_sales_db)
from portal.schemas.common import HealthResponse

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


async def _ping(name: str, db: AsyncSession) -> bool:
    try:
        await db.execute(select(1))
        return True
    except SQLAlchemyError as e:
        logger.error("Health check %s store failure: %s", name, e)
        return False


@router.get("/health", response_model=HealthResponse)
async def health(
    accounts_db: AsyncSession = Depends(get_accounts_db),
    sales_db: AsyncSession = Depends(get_sales_db),
    attendance_db: AsyncSession = Depends(get_attendance_db),
) -> HealthResponse:
    return HealthResponse(
        accounts=await _ping("accounts", accounts_db),
        sales=await _ping("sales", sales_db),
        attendance=await _ping("attendance", attendance_db),
    )

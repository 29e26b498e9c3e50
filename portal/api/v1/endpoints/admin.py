"""
Admin endpoints: account listing and the approval workflow.

All operations require an approved admin.
"""

from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.api.v1.deps import require_admin
from portal.core.access import Caller
from portal.db.session import get_accounts_db
from portal.models.account import Account
from portal.schemas.account import (AccountList, AccountRead, ApprovalRequest,
                                    ApprovalResponse)
from portal.services.accounts import apply_approval

router = APIRouter(prefix="/admin", tags=["admin"])
logger = logging.getLogger(__name__)


@router.get("/users", response_model=AccountList)
async def list_users(
    status: Literal["pending", "approved", "rejected", "all"] = Query("pending"),
    db: AsyncSession = Depends(get_accounts_db),
    _admin: Caller = Depends(require_admin),
) -> AccountList:
    """List accounts, newest first, optionally filtered by approval status."""
    stmt = select(Account).order_by(Account.created_at.desc(), Account.id.desc())
    if status != "all":
        stmt = stmt.where(Account.status == status)
    result = await db.execute(stmt)
    return AccountList(rows=[AccountRead.model_validate(a) for a in result.scalars().all()])


@router.post("/users/approve", response_model=ApprovalResponse)
async def approve_user(
    body: ApprovalRequest,
    db: AsyncSession = Depends(get_accounts_db),
    admin: Caller = Depends(require_admin),
) -> ApprovalResponse:
    """Approve or reject an account.

    Approving may also grant a role; an existing admin role is never
    lowered. Rejected accounts stay in the store with ``status=rejected``.
    """
    account = await apply_approval(db, body.id, body.action, body.role)
    logger.info("Admin %s applied '%s' to account %s", admin.email, body.action, body.id)
    return ApprovalResponse(success=True, account=AccountRead.model_validate(account))

"""
Account store operations.

All writes to ``web_users`` go through :func:`upsert_account`, which owns
the merge rule: the admin role is sticky and is never lowered by a later
write.
"""

from __future__ import annotations

import logging
from collections.abc import Collection
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.access import (ApprovalStatus, Role, SessionClaims,
                                is_allow_listed, merge_role)
from portal.core.exceptions import NotFound
from portal.models.account import Account
from portal.schemas.account import IdentityClaim

logger = logging.getLogger(__name__)


async def get_account_by_email(db: AsyncSession, email: str) -> Account | None:
    result = await db.execute(select(Account).where(Account.email == email.strip().lower()))
    return result.scalar_one_or_none()


def _apply(
    account: Account,
    *,
    name: str | None,
    role: Role | None,
    status: ApprovalStatus | None,
    login_at: datetime | None,
) -> None:
    if name:
        account.name = name
    account.role = merge_role(account.role, role).value
    if status is not None:
        account.status = status.value
    if login_at is not None:
        account.last_login_at = login_at


async def upsert_account(
    db: AsyncSession,
    email: str,
    *,
    name: str | None = None,
    role: Role | None = None,
    status: ApprovalStatus | None = None,
    login_at: datetime | None = None,
) -> Account:
    """Insert or update the account for *email*.

    On insert, missing ``role``/``status`` fall back to user/pending. On
    update only the given fields change, ``name`` is kept when the new one
    is empty, and the role goes through :func:`merge_role`.
    """
    email = email.strip().lower()
    account = await get_account_by_email(db, email)

    if account is None:
        try:
            account = Account(
                email=email,
                name=name or None,
                role=(role or Role.USER).value,
                status=(status or ApprovalStatus.PENDING).value,
                last_login_at=login_at,
            )
            db.add(account)
            await db.commit()
            await db.refresh(account)
            logger.info("Account created: %s (role=%s)", email, account.role)
            return account
        except IntegrityError:
            # Another request inserted the same email first.
            await db.rollback()
            account = await get_account_by_email(db, email)
            if account is None:
                raise

    _apply(account, name=name, role=role, status=status, login_at=login_at)
    await db.commit()
    await db.refresh(account)
    return account


async def record_sign_in(
    db: AsyncSession,
    claim: IdentityClaim,
    admin_emails: Collection[str],
    now: datetime | None = None,
) -> Account:
    """Persist a sign-in: create the account on first visit, refresh ``last_login_at``.

    Allow-listed emails are stored as approved admins.
    """
    login_at = now or datetime.now(timezone.utc)
    if is_allow_listed(claim.email, admin_emails):
        account = await upsert_account(
            db,
            claim.email,
            name=claim.display_name,
            role=Role.ADMIN,
            status=ApprovalStatus.APPROVED,
            login_at=login_at,
        )
    else:
        account = await upsert_account(
            db, claim.email, name=claim.display_name, login_at=login_at
        )
    logger.info("Sign-in recorded for %s (status=%s)", account.email, account.status)
    return account


async def apply_approval(
    db: AsyncSession,
    account_id: int,
    action: str,
    role: Role | None = None,
) -> Account:
    """Approve or reject an account. Rejection keeps the row with status=rejected."""
    account = await db.get(Account, account_id)
    if account is None:
        raise NotFound("Account not found")

    if action == "approve":
        status = ApprovalStatus.APPROVED
    else:
        status = ApprovalStatus.REJECTED
        role = None

    updated = await upsert_account(db, account.email, role=role, status=status)
    logger.info(
        "Account %s %sd (role=%s)", updated.email, action, updated.role
    )
    return updated


async def load_claims(
    db: AsyncSession,
    email: str,
    name: str | None,
    admin_emails: Collection[str],
) -> SessionClaims:
    """Build the caller's claims; the allow-list short-circuits the store lookup."""
    email = email.strip().lower()
    if is_allow_listed(email, admin_emails):
        return SessionClaims(
            email=email,
            display_name=name,
            role=Role.ADMIN,
            status=ApprovalStatus.APPROVED,
        )

    account = await get_account_by_email(db, email)
    if account is None:
        return SessionClaims(email=email, display_name=name)
    return SessionClaims(
        email=email,
        display_name=account.name or name,
        role=Role(account.role),
        status=ApprovalStatus(account.status),
    )

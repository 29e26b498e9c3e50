"""
Approval-gated access control.

``classify`` turns session claims into one of four access levels. The
static admin allow-list is checked first and wins over whatever the
accounts store says.
"""

from __future__ import annotations

import enum
from collections.abc import Collection
from dataclasses import dataclass

from portal.core.exceptions import AwaitingApproval, Forbidden, Unauthenticated


class Role(str, enum.Enum):
    USER = "user"
    MANAGER = "manager"
    ADMIN = "admin"


class ApprovalStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AccessLevel(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    PENDING_APPROVAL = "pending_approval"
    APPROVED_USER = "approved_user"
    APPROVED_ADMIN = "approved_admin"


@dataclass(frozen=True)
class SessionClaims:
    email: str
    display_name: str | None = None
    role: Role = Role.USER
    status: ApprovalStatus = ApprovalStatus.PENDING


@dataclass(frozen=True)
class Caller:
    """Identity of the request's caller, passed explicitly into handlers."""

    claims: SessionClaims
    level: AccessLevel

    @property
    def email(self) -> str:
        return self.claims.email

    @property
    def is_admin(self) -> bool:
        return self.level is AccessLevel.APPROVED_ADMIN


def is_allow_listed(email: str | None, admin_emails: Collection[str]) -> bool:
    return bool(email) and email.strip().lower() in admin_emails


def classify(claims: SessionClaims | None, admin_emails: Collection[str]) -> AccessLevel:
    if claims is None or not claims.email:
        return AccessLevel.UNAUTHENTICATED
    if is_allow_listed(claims.email, admin_emails):
        return AccessLevel.APPROVED_ADMIN
    if claims.status is not ApprovalStatus.APPROVED:
        return AccessLevel.PENDING_APPROVAL
    if claims.role is Role.ADMIN:
        return AccessLevel.APPROVED_ADMIN
    return AccessLevel.APPROVED_USER


def enforce(level: AccessLevel, *, admin: bool = False) -> None:
    """Raise the error matching *level* unless it may proceed."""
    if level is AccessLevel.UNAUTHENTICATED:
        raise Unauthenticated()
    if level is AccessLevel.PENDING_APPROVAL:
        raise AwaitingApproval()
    if admin and level is not AccessLevel.APPROVED_ADMIN:
        raise Forbidden()


def merge_role(current: Role | str | None, requested: Role | str | None) -> Role:
    """Role to persist when *requested* is written over *current*.

    Admin is sticky: once granted, a routine write never lowers it.
    """
    current_role = Role(current) if current else None
    if current_role is Role.ADMIN:
        return Role.ADMIN
    if requested:
        return Role(requested)
    return current_role or Role.USER

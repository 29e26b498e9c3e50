"""
FastAPI dependencies: caller resolution, access gates, clock.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import Cookie, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.access import AccessLevel, Caller, classify, enforce
from portal.core.business_day import utc_now
from portal.core.config import settings
from portal.core.exceptions import Unauthenticated
from portal.core.security import SESSION_COOKIE, decode_session_token
from portal.db.session import get_accounts_db
from portal.services.accounts import load_claims

# auto_error=False so a missing header falls through to the cookie
bearer_scheme = HTTPBearer(auto_error=False)


def get_now() -> datetime:
    """Current instant; overridden in tests to pin the clock."""
    return utc_now()


def _extract_token(
    credentials: Optional[HTTPAuthorizationCredentials],
    cookie_value: Optional[str],
) -> str | None:
    # Priority: Header > Cookie
    if credentials and credentials.credentials:
        return credentials.credentials
    if cookie_value:
        if cookie_value.startswith("Bearer "):
            return cookie_value.split(" ", 1)[1]
        return cookie_value
    return None


async def get_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session_token: Optional[str] = Cookie(default=None, alias=SESSION_COOKIE),
    db: AsyncSession = Depends(get_accounts_db),
) -> Caller:
    """Resolve the caller from the session token. Never raises for pending users."""
    token = _extract_token(credentials, session_token)
    payload = decode_session_token(token) if token else None
    if payload is None:
        raise Unauthenticated()

    claims = await load_claims(
        db, str(payload["sub"]), payload.get("name"), settings.admin_emails
    )
    level = classify(claims, settings.admin_emails)
    if level is AccessLevel.UNAUTHENTICATED:
        raise Unauthenticated()
    return Caller(claims=claims, level=level)


async def require_approved(caller: Caller = Depends(get_caller)) -> Caller:
    """Approved users and admins only."""
    enforce(caller.level)
    return caller


async def require_admin(caller: Caller = Depends(get_caller)) -> Caller:
    """Approved admins only."""
    enforce(caller.level, admin=True)
    return caller

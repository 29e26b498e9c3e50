"""
Auth endpoints: Google sign-in, logout, current caller.
"""

import secrets
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Query, Request, Response
from fastapi.responses import RedirectResponse
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from portal.api.v1.deps import get_caller, get_now
from portal.core.access import Caller
from portal.core.config import settings
from portal.core.exceptions import Unauthenticated
from portal.core.security import (SESSION_COOKIE, STATE_COOKIE,
                                  create_session_token, new_oauth_state)
from portal.db.session import get_accounts_db
from portal.schemas.account import MeResponse
from portal.schemas.common import LogoutResponse
from portal.services.accounts import record_sign_in
from portal.services.identity import (GoogleIdentityProvider,
                                      get_identity_provider)

# Rate limiter: keyed by client IP
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

router = APIRouter(prefix="/auth", tags=["auth"])

_STATE_MAX_AGE = 10 * 60


@router.get("/login")
@limiter.limit("10/minute")
async def login(
    request: Request,
    provider: GoogleIdentityProvider = Depends(get_identity_provider),
) -> RedirectResponse:
    """Start the Google sign-in flow."""
    state = new_oauth_state()
    response = RedirectResponse(provider.authorization_url(state), status_code=302)
    response.set_cookie(
        key=STATE_COOKIE,
        value=state,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        max_age=_STATE_MAX_AGE,
    )
    return response


@router.get("/callback")
@limiter.limit("10/minute")
async def callback(
    request: Request,
    code: str = Query(..., min_length=1),
    state: str = Query(..., min_length=1),
    oauth_state: Optional[str] = Cookie(default=None, alias=STATE_COOKIE),
    provider: GoogleIdentityProvider = Depends(get_identity_provider),
    db: AsyncSession = Depends(get_accounts_db),
    now: datetime = Depends(get_now),
) -> RedirectResponse:
    """Finish sign-in: record the account and hand out a session cookie.

    New accounts start pending; the dashboard stays locked until an admin
    approves them.
    """
    if not oauth_state or not secrets.compare_digest(oauth_state, state):
        raise Unauthenticated("Invalid or expired sign-in state")

    claim = await provider.exchange_code(code)
    account = await record_sign_in(db, claim, settings.admin_emails, now=now)

    token = create_session_token(account.email, account.name)
    response = RedirectResponse(settings.POST_LOGIN_REDIRECT, status_code=302)
    response.set_cookie(
        key=SESSION_COOKIE,
        value=f"Bearer {token}",
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        max_age=settings.SESSION_EXPIRE_MINUTES * 60,
    )
    response.delete_cookie(STATE_COOKIE)
    return response


@router.post("/logout", response_model=LogoutResponse)
async def logout(response: Response) -> LogoutResponse:
    """Clear the session cookie."""
    response.delete_cookie(SESSION_COOKIE)
    return LogoutResponse(message="Logged out")


@router.get("/me", response_model=MeResponse)
async def read_me(caller: Caller = Depends(get_caller)) -> MeResponse:
    """Claims and access level of the caller, including pending accounts."""
    return MeResponse(
        email=caller.claims.email,
        name=caller.claims.display_name,
        role=caller.claims.role,
        status=caller.claims.status,
        access=caller.level,
    )

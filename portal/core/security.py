"""
Session token creation / verification (JWT, HS256).

The token only proves who signed in. Role and approval status are read
fresh from the accounts store on every request.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from portal.core.config import settings

SESSION_COOKIE = "session_token"
STATE_COOKIE = "oauth_state"

_ALGORITHM = settings.ALGORITHM
_SECRET = settings.SECRET_KEY


def create_session_token(
    email: str,
    name: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.SESSION_EXPIRE_MINUTES)
    )
    return jwt.encode(
        {"exp": expire, "sub": email.strip().lower(), "name": name, "type": "session"},
        _SECRET,
        algorithm=_ALGORITHM,
    )


def decode_session_token(token: str) -> dict | None:
    """Return payload dict if the *session* token is valid, else ``None``."""
    try:
        payload = jwt.decode(token, _SECRET, algorithms=[_ALGORITHM])
    except JWTError:
        return None
    if payload.get("type") != "session" or not payload.get("sub"):
        return None
    return payload


def new_oauth_state() -> str:
    return secrets.token_urlsafe(32)

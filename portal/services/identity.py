"""
Google OAuth 2.0 identity provider.

Builds the authorization URL, exchanges the callback code for an access
token and reads the signed-in user's email and name from userinfo.
"""

from __future__ import annotations

import logging
from urllib.parse import urlencode

import httpx

from portal.core.config import settings
from portal.core.exceptions import Unauthenticated
from portal.schemas.account import IdentityClaim

logger = logging.getLogger(__name__)

_GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
_GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
_GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"

_SCOPES = ["openid", "email", "profile"]


class GoogleIdentityProvider:
    def __init__(
        self,
        *,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        timeout: float = 10.0,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._redirect_uri = redirect_uri
        self._timeout = timeout

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self._client_id,
            "redirect_uri": self._redirect_uri,
            "response_type": "code",
            "scope": " ".join(_SCOPES),
            "prompt": "select_account",
            "state": state,
        }
        return f"{_GOOGLE_AUTH_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> IdentityClaim:
        if not self._client_id or not self._client_secret:
            raise Unauthenticated("Identity provider is not configured")
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                token_resp = await client.post(
                    _GOOGLE_TOKEN_URL,
                    data={
                        "client_id": self._client_id,
                        "client_secret": self._client_secret,
                        "code": code,
                        "grant_type": "authorization_code",
                        "redirect_uri": self._redirect_uri,
                    },
                )
                token_resp.raise_for_status()
                access_token = token_resp.json()["access_token"]

                info_resp = await client.get(
                    _GOOGLE_USERINFO_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                info_resp.raise_for_status()
                info = info_resp.json()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Google token exchange failed with HTTP %s", exc.response.status_code
            )
            raise Unauthenticated("Sign-in with Google failed") from exc
        except (httpx.HTTPError, KeyError) as exc:
            logger.error("Google sign-in error: %s", exc)
            raise Unauthenticated("Sign-in with Google failed") from exc

        email = str(info.get("email") or "").strip().lower()
        if not email or info.get("email_verified") is False:
            raise Unauthenticated("Google account has no verified email")
        return IdentityClaim(email=email, display_name=info.get("name"))


def get_identity_provider() -> GoogleIdentityProvider:
    """FastAPI dependency: the configured identity provider."""
    return GoogleIdentityProvider(
        client_id=settings.GOOGLE_CLIENT_ID,
        client_secret=settings.GOOGLE_CLIENT_SECRET,
        redirect_uri=settings.OAUTH_REDIRECT_URL,
    )

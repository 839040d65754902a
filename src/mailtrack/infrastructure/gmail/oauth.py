"""Google OAuth 2.0 endpoints: consent URL, code exchange and token refresh."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import httpx
from loguru import logger

from mailtrack.domain.entities.account import TokenSet
from mailtrack.domain.errors import AuthRevoked, RemoteTransient
from mailtrack.infrastructure.gmail.errors import oauth_error_code, provider_error_message, raise_for_response

AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"

SCOPES = (
    "https://www.googleapis.com/auth/gmail.readonly",
    "https://www.googleapis.com/auth/gmail.send",
    "https://www.googleapis.com/auth/gmail.modify",
)


def _token_set(data: dict[str, Any], refresh_token: str = "") -> TokenSet:
    expires_in = data.get("expires_in")
    expiry = None
    if expires_in is not None:
        expiry = datetime.now(timezone.utc) + timedelta(seconds=int(expires_in))
    return TokenSet(
        access_token=data["access_token"],
        # Refresh responses usually omit the refresh token; keep the old one
        refresh_token=data.get("refresh_token") or refresh_token,
        expiry=expiry,
        scope=data.get("scope", ""),
    )


class GoogleOAuthClient:
    """Thin OAuth client for the installed web application."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        http: Optional[httpx.Client] = None,
        timeout: float = 30.0,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.http = http or httpx.Client(timeout=timeout)

    def authorize_url(self, force_consent: bool = False, state: Optional[str] = None) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "access_type": "offline",
            "scope": " ".join(SCOPES),
            "include_granted_scopes": "true",
        }
        if force_consent:
            params["prompt"] = "consent"
        if state:
            params["state"] = state
        return str(httpx.URL(AUTHORIZE_URL, params=params))

    def exchange_code(self, code: str) -> TokenSet:
        """Trade an authorization code for tokens.

        ``refresh_token`` is empty when Google did not grant one, which
        happens on re-consent without a forced approval prompt.
        """
        response = self._post_token(
            {
                "code": code,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uri": self.redirect_uri,
                "grant_type": "authorization_code",
            }
        )
        raise_for_response(response)
        return _token_set(response.json())

    def refresh(self, account_id: str, refresh_token: str) -> TokenSet:
        if not refresh_token:
            raise AuthRevoked(account_id, "no refresh token stored")

        response = self._post_token(
            {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "refresh_token": refresh_token,
                "grant_type": "refresh_token",
            }
        )

        # invalid_grant is the only per-account revocation signal
        if oauth_error_code(response) == "invalid_grant":
            detail = provider_error_message(response)
            logger.error(f"OAuth token refresh rejected for account {account_id}: {detail}")
            raise AuthRevoked(account_id, detail)
        if not response.is_success:
            logger.error(
                f"OAuth token refresh failed for account {account_id}: "
                f"HTTP {response.status_code} {provider_error_message(response)}"
            )
        raise_for_response(response)

        tokens = _token_set(response.json(), refresh_token=refresh_token)
        logger.debug(f"Refreshed access token for account {account_id}")
        return tokens

    def _post_token(self, data: dict[str, str]) -> httpx.Response:
        try:
            return self.http.post(TOKEN_URL, data=data)
        except httpx.TransportError as e:
            raise RemoteTransient(f"OAuth token endpoint unreachable: {e}") from e

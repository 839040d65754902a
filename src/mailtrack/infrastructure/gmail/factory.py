from __future__ import annotations

from typing import Optional

import httpx

from mailtrack.application.ports.account_store import AccountStore
from mailtrack.domain.entities.account import TokenSet
from mailtrack.domain.errors import AuthRevoked, MailTrackError
from mailtrack.infrastructure.gmail.client import GmailClient
from mailtrack.infrastructure.gmail.oauth import GoogleOAuthClient


class GmailClientFactory:
    """Builds a fresh ``GmailClient`` per call from the stored account.

    Token rotations are written straight back to the account store.
    """

    def __init__(
        self,
        accounts: AccountStore,
        oauth: GoogleOAuthClient,
        http: Optional[httpx.Client] = None,
        expiry_skew_seconds: int = 60,
    ) -> None:
        self.accounts = accounts
        self.oauth = oauth
        self.http = http
        self.expiry_skew_seconds = expiry_skew_seconds

    def get_client(self, account_id: str) -> GmailClient:
        account = self.accounts.get(account_id)
        if account is None:
            raise MailTrackError(f"Unknown account {account_id}")
        if account.is_revoked:
            raise AuthRevoked(account_id, "awaiting re-authorization")

        def persist(tokens: TokenSet) -> None:
            self.accounts.update_tokens(account_id, tokens, account.generation)

        return GmailClient(
            account_id=account_id,
            tokens=account.tokens,
            oauth=self.oauth,
            on_tokens=persist,
            http=self.http,
            expiry_skew_seconds=self.expiry_skew_seconds,
        )

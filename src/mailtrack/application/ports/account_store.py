from __future__ import annotations
from typing import Optional, Protocol

from mailtrack.domain.entities.account import Account, TokenSet


class AccountStore(Protocol):
    """Credential and cursor persistence for linked mailboxes."""

    def get(self, account_id: str) -> Optional[Account]: ...
    def get_by_email(self, email: str) -> Optional[Account]: ...
    def upsert_authorized(self, email: str, kind: str, tokens: TokenSet) -> Account: ...
    def update_tokens(self, account_id: str, tokens: TokenSet, generation: Optional[int] = None) -> None: ...
    # Returns False when ``history_id`` is not ahead of the stored cursor, or when
    # ``generation`` is given and the account was re-authorized since
    def advance_history(self, account_id: str, history_id: int, generation: Optional[int] = None) -> bool: ...
    def mark_revoked(self, account_id: str) -> None: ...
    def list_active(self) -> list[Account]: ...

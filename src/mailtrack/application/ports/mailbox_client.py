from __future__ import annotations
from typing import Any, Optional, Protocol, Sequence

from mailtrack.domain.entities.email_message import RemoteMessage
from mailtrack.domain.entities.history import HistoryRecord, WatchResult


class MailboxClient(Protocol):
    """Authorized mailbox API for a single account.

    Implementations raise ``RemoteNotFound`` for deleted resources,
    ``RemoteError`` for any other provider failure and ``AuthRevoked``
    when the refresh token no longer works.
    """

    def get_profile(self) -> dict[str, Any]: ...
    def list_history(self, start_history_id: int) -> list[HistoryRecord]: ...
    def get_message(self, message_id: str) -> RemoteMessage: ...
    def get_attachment(self, message_id: str, attachment_id: str) -> bytes: ...
    def send_message(self, raw: bytes, thread_id: Optional[str] = None) -> str: ...
    def watch(self, topic_name: str, label_ids: Sequence[str], label_filter_action: str) -> WatchResult: ...
    def stop(self) -> None: ...


class ClientFactory(Protocol):
    def get_client(self, account_id: str) -> MailboxClient: ...

from __future__ import annotations
from typing import Protocol

from mailtrack.domain.entities.email_message import RemoteMessage


class ConversationSync(Protocol):
    # Must be an idempotent upsert keyed on the provider message id
    def sync_conversation(self, account_id: str, message: RemoteMessage) -> None: ...

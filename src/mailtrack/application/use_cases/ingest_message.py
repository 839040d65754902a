"""Materialize a single remote message and hand it to the conversation store."""

from __future__ import annotations

from typing import Optional

from loguru import logger

from mailtrack.application.ports.conversation_sync import ConversationSync
from mailtrack.application.ports.mailbox_client import ClientFactory, MailboxClient
from mailtrack.domain.errors import RemoteError, RemoteNotFound


class IngestMessageUseCase:
    """Fetch a message by id and forward it to ``ConversationSync``.

    Remote failures are confined to the message: a deleted message is
    skipped with a warning, any other provider error is logged and the
    message is skipped without retrying. Retrying is left to notification
    redelivery. ``AuthRevoked`` is not caught since it concerns the whole
    account.
    """

    def __init__(self, clients: ClientFactory, conversations: ConversationSync) -> None:
        self.clients = clients
        self.conversations = conversations

    def ingest(self, account_id: str, message_id: str, client: Optional[MailboxClient] = None) -> bool:
        """Returns True when the message reached the conversation store."""
        client = client or self.clients.get_client(account_id)

        try:
            message = client.get_message(message_id)
        except RemoteNotFound:
            logger.warning(f"Email not found id with {message_id} (account {account_id})")
            return False
        except RemoteError as e:
            logger.error(f"Failed to fetch message {message_id} for account {account_id}: {e.message}")
            return False

        self.conversations.sync_conversation(account_id, message)
        logger.debug(f"Synced message {message_id} (thread {message.thread_id}) for account {account_id}")
        return True

"""Local conversation store fed by message ingestion."""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from loguru import logger

from mailtrack.domain.entities.email_message import RemoteMessage
from mailtrack.infrastructure.sqlite.client import SQLiteClient


@dataclass
class StoredMessage:
    """A synced message row."""

    id: str
    conversation_id: str
    provider_message_id: str
    thread_id: str | None
    sender: str
    subject: str
    text: str
    received_at: str | None
    attachment_ids: list[str]


class SQLiteConversationStore:
    """Idempotent upsert of remote messages, grouped by provider thread."""

    def __init__(self, client: SQLiteClient) -> None:
        self.client = client

    @staticmethod
    def _conversation_id(account_id: str, message: RemoteMessage) -> str:
        return f"{account_id}:{message.thread_id or message.message_id}"

    def sync_conversation(self, account_id: str, message: RemoteMessage) -> None:
        now = datetime.now(timezone.utc).isoformat()
        conversation_id = self._conversation_id(account_id, message)
        received_at = message.date.isoformat() if message.date else None
        recipients = json.dumps({"to": message.to, "cc": message.cc})
        attachments = json.dumps(
            [
                {
                    "attachment_id": a.attachment_id,
                    "filename": a.filename,
                    "mime_type": a.mime_type,
                    "size_bytes": a.size_bytes,
                }
                for a in message.attachments
            ]
        )

        with self.client.connection() as conn:
            conn.execute(
                """INSERT INTO conversations (conversation_id, account_id, thread_id, subject, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?)
                   ON CONFLICT(conversation_id) DO UPDATE SET updated_at = excluded.updated_at""",
                (conversation_id, account_id, message.thread_id, message.subject, now, now),
            )
            conn.execute(
                """INSERT INTO messages
                   (id, conversation_id, account_id, provider_message_id, thread_id, sender, recipients_json,
                    subject, text, html, received_at, attachments_json, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                   ON CONFLICT(account_id, provider_message_id) DO UPDATE SET
                       sender = excluded.sender,
                       recipients_json = excluded.recipients_json,
                       subject = excluded.subject,
                       text = excluded.text,
                       html = excluded.html,
                       received_at = excluded.received_at,
                       attachments_json = excluded.attachments_json,
                       updated_at = excluded.updated_at""",
                (
                    str(uuid.uuid4()),
                    conversation_id,
                    account_id,
                    message.message_id,
                    message.thread_id,
                    message.sender,
                    recipients,
                    message.subject,
                    message.text,
                    message.html,
                    received_at,
                    attachments,
                    now,
                    now,
                ),
            )

        logger.debug(f"Upserted message {message.message_id} into conversation {conversation_id}")

    def get_messages(self, account_id: str) -> list[StoredMessage]:
        """Messages for an account, oldest first."""
        with self.client.connection() as conn:
            rows = conn.execute(
                """SELECT * FROM messages WHERE account_id = ?
                   ORDER BY received_at ASC, created_at ASC""",
                (account_id,),
            ).fetchall()

        return [
            StoredMessage(
                id=row["id"],
                conversation_id=row["conversation_id"],
                provider_message_id=row["provider_message_id"],
                thread_id=row["thread_id"],
                sender=row["sender"],
                subject=row["subject"],
                text=row["text"],
                received_at=row["received_at"],
                attachment_ids=[a["attachment_id"] for a in json.loads(row["attachments_json"])],
            )
            for row in rows
        ]

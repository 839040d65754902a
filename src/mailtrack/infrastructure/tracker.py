"""Wires stores, the Gmail client factory and the sync use cases together."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import httpx
from loguru import logger

from mailtrack.application.locks import AccountLocks
from mailtrack.application.use_cases.fetch_attachment import FetchAttachmentUseCase
from mailtrack.application.use_cases.ingest_message import IngestMessageUseCase
from mailtrack.application.use_cases.send_message import SendMessageUseCase
from mailtrack.application.use_cases.sync_history import HistorySyncUseCase
from mailtrack.application.use_cases.watch_mailbox import WatchMailboxUseCase
from mailtrack.infrastructure.gmail.factory import GmailClientFactory
from mailtrack.infrastructure.gmail.oauth import GoogleOAuthClient
from mailtrack.infrastructure.pubsub.listener import NotificationListener
from mailtrack.infrastructure.settings import Settings, get_settings
from mailtrack.infrastructure.sqlite.accounts import SQLiteAccountStore
from mailtrack.infrastructure.sqlite.client import SQLiteClient
from mailtrack.infrastructure.sqlite.conversations import SQLiteConversationStore


@dataclass
class MailTracker:
    """Everything a process needs to track Gmail accounts."""

    settings: Settings
    accounts: SQLiteAccountStore
    conversations: SQLiteConversationStore
    oauth: GoogleOAuthClient
    clients: GmailClientFactory
    sync: HistorySyncUseCase
    attachments: FetchAttachmentUseCase
    sender: SendMessageUseCase
    watcher: WatchMailboxUseCase

    @property
    def tracking_enabled(self) -> bool:
        return self.settings.tracking_enabled

    def create_listener(self, subscriber=None) -> NotificationListener:
        return NotificationListener(
            sync=self.sync,
            subscription_path=self.settings.subscription_path,
            topic_path=self.settings.topic_path,
            subscriber=subscriber,
            credentials_file=self.settings.google_application_credentials,
            max_messages=self.settings.pubsub_max_messages,
        )


def build_tracker(settings: Optional[Settings] = None, http: Optional[httpx.Client] = None) -> MailTracker:
    settings = settings or get_settings()
    db = SQLiteClient(settings.sqlite_db_path)
    accounts = SQLiteAccountStore(db)
    conversations = SQLiteConversationStore(db)

    oauth = GoogleOAuthClient(
        client_id=settings.google_client_id,
        client_secret=settings.google_client_secret.get_secret_value(),
        redirect_uri=settings.google_redirect_uri,
        http=http,
        timeout=settings.http_timeout_seconds,
    )
    clients = GmailClientFactory(
        accounts,
        oauth,
        http=http,
        expiry_skew_seconds=settings.token_expiry_skew_seconds,
    )
    ingestor = IngestMessageUseCase(clients, conversations)
    sync = HistorySyncUseCase(
        accounts,
        clients,
        ingestor,
        locks=AccountLocks(),
        cursor_commit=settings.cursor_commit,
    )

    if not settings.tracking_enabled:
        logger.warning("Gmail push tracking disabled: Google Pub/Sub settings incomplete")

    return MailTracker(
        settings=settings,
        accounts=accounts,
        conversations=conversations,
        oauth=oauth,
        clients=clients,
        sync=sync,
        attachments=FetchAttachmentUseCase(clients),
        sender=SendMessageUseCase(clients),
        watcher=WatchMailboxUseCase(clients, settings.topic_path),
    )


# Singleton instance
_tracker: MailTracker | None = None


def get_tracker() -> MailTracker:
    """Get or create the process-wide tracker."""
    global _tracker
    if _tracker is None:
        _tracker = build_tracker()
    return _tracker

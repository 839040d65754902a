"""Application layer - sync use cases and the ports they depend on."""

from mailtrack.application.locks import AccountLocks
from mailtrack.application.use_cases.fetch_attachment import FetchAttachmentUseCase
from mailtrack.application.use_cases.ingest_message import IngestMessageUseCase
from mailtrack.application.use_cases.send_message import SendMessageUseCase, build_reply
from mailtrack.application.use_cases.sync_history import HistorySyncUseCase
from mailtrack.application.use_cases.watch_mailbox import WatchMailboxUseCase

__all__ = [
    "AccountLocks",
    "FetchAttachmentUseCase",
    "IngestMessageUseCase",
    "SendMessageUseCase",
    "build_reply",
    "HistorySyncUseCase",
    "WatchMailboxUseCase",
]

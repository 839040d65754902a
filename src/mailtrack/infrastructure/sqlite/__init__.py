"""SQLite infrastructure for credentials, cursors and conversations."""

from mailtrack.infrastructure.sqlite.accounts import SQLiteAccountStore
from mailtrack.infrastructure.sqlite.client import SQLiteClient
from mailtrack.infrastructure.sqlite.conversations import SQLiteConversationStore, StoredMessage

__all__ = [
    "SQLiteClient",
    "SQLiteAccountStore",
    "SQLiteConversationStore",
    "StoredMessage",
]

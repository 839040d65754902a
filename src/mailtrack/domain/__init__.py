"""Domain entities and errors."""

from mailtrack.domain.entities.account import Account, TokenSet
from mailtrack.domain.entities.attachment import AttachmentDescriptor, FetchedAttachment
from mailtrack.domain.entities.email_message import RemoteMessage
from mailtrack.domain.entities.history import HistoryRecord, NotificationEvent, WatchResult
from mailtrack.domain.errors import (
    AttachmentNotFound,
    AuthRevoked,
    ListenerFatal,
    MailTrackError,
    RemoteError,
    RemoteNotFound,
    RemoteTransient,
    SendFailed,
)

__all__ = [
    "Account",
    "TokenSet",
    "AttachmentDescriptor",
    "FetchedAttachment",
    "RemoteMessage",
    "HistoryRecord",
    "NotificationEvent",
    "WatchResult",
    "MailTrackError",
    "AuthRevoked",
    "RemoteError",
    "RemoteNotFound",
    "RemoteTransient",
    "AttachmentNotFound",
    "SendFailed",
    "ListenerFatal",
]

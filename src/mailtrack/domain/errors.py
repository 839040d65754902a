"""Error taxonomy for mailbox tracking.

Per-message and per-record errors are isolated by the use cases that raise
them; ``AuthRevoked`` and ``ListenerFatal`` escalate to the hosting process.
"""

from __future__ import annotations

from typing import Optional


class MailTrackError(Exception):
    """Base class for all mailbox tracking errors."""


class AuthRevoked(MailTrackError):
    """The refresh token was rejected; the account needs re-authorization."""

    def __init__(self, account_id: str, detail: str = "") -> None:
        self.account_id = account_id
        self.detail = detail
        super().__init__(f"Authorization revoked for account {account_id}" + (f": {detail}" if detail else ""))


class RemoteError(MailTrackError):
    """Generic provider failure. ``message`` is the provider's text, verbatim."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class RemoteNotFound(RemoteError):
    """The resource was deleted upstream."""


class RemoteTransient(RemoteError):
    """Rate limiting, server-side or transport failure."""


class AttachmentNotFound(MailTrackError):
    """The attachment id is absent from the message metadata the caller holds."""


class SendFailed(MailTrackError):
    """The provider rejected an outbound message."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ListenerFatal(MailTrackError):
    """The notification subscription failed and the listener stopped."""

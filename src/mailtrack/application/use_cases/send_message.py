"""Outbound replies through the account's authorized client."""

from __future__ import annotations

from email.message import EmailMessage
from email.utils import formatdate, make_msgid
from typing import Optional

from loguru import logger

from mailtrack.application.ports.mailbox_client import ClientFactory
from mailtrack.domain.entities.email_message import RemoteMessage
from mailtrack.domain.errors import RemoteError, SendFailed


def build_reply(
    original: RemoteMessage,
    sender: str,
    body: str,
    html: Optional[str] = None,
) -> bytes:
    """Compose an RFC 5322 reply to ``original`` with threading headers."""
    msg = EmailMessage()
    subject = original.subject or ""
    if not subject.lower().startswith("re:"):
        subject = f"Re: {subject}".strip()

    msg["From"] = sender
    msg["To"] = original.header("Reply-To") or original.sender
    msg["Subject"] = subject
    msg["Date"] = formatdate(localtime=False)
    msg["Message-ID"] = make_msgid(domain=sender.rsplit("@", 1)[-1] if "@" in sender else None)

    if original.rfc822_message_id:
        msg["In-Reply-To"] = original.rfc822_message_id
        references = original.header("References")
        msg["References"] = f"{references} {original.rfc822_message_id}" if references else original.rfc822_message_id

    msg.set_content(body)
    if html:
        msg.add_alternative(html, subtype="html")

    return msg.as_bytes()


class SendMessageUseCase:
    def __init__(self, clients: ClientFactory) -> None:
        self.clients = clients

    def send(self, account_id: str, raw_mime: bytes, thread_id: Optional[str] = None) -> str:
        """Send ``raw_mime`` and return the provider message id.

        Raises ``SendFailed`` carrying the provider's error text unchanged.
        """
        client = self.clients.get_client(account_id)
        try:
            provider_id = client.send_message(raw_mime, thread_id=thread_id)
        except RemoteError as e:
            logger.error(f"Send failed for account {account_id}: {e.message}")
            raise SendFailed(e.message, status_code=e.status_code) from e

        logger.info(f"Sent message {provider_id} for account {account_id} (thread {thread_id})")
        return provider_id

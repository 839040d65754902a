from __future__ import annotations

from typing import Optional

from loguru import logger

from mailtrack.application.ports.mailbox_client import ClientFactory
from mailtrack.domain.entities.attachment import FetchedAttachment
from mailtrack.domain.entities.email_message import RemoteMessage
from mailtrack.domain.errors import AttachmentNotFound


class FetchAttachmentUseCase:
    """Download attachment bytes for a message the caller already holds.

    The descriptor is checked against the supplied message metadata first;
    the provider is only contacted once the attachment id is known.
    """

    def __init__(self, clients: ClientFactory) -> None:
        self.clients = clients

    def fetch(self, account_id: str, message: Optional[RemoteMessage], attachment_id: str) -> FetchedAttachment:
        if message is None or not message.attachments:
            raise AttachmentNotFound("Message metadata with attachments not found")

        descriptor = message.find_attachment(attachment_id)
        if descriptor is None:
            raise AttachmentNotFound(f"Gmail attachment not found id with {attachment_id}")

        client = self.clients.get_client(account_id)
        data = client.get_attachment(message.message_id, attachment_id)
        logger.debug(f"Fetched attachment {descriptor.filename} ({len(data)} bytes) from {message.message_id}")

        return FetchedAttachment(
            filename=descriptor.filename,
            mime_type=descriptor.mime_type,
            data=data,
        )

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from mailtrack.domain.entities.attachment import AttachmentDescriptor


@dataclass(frozen=True)
class RemoteMessage:
    message_id: str
    thread_id: Optional[str]
    headers: tuple[tuple[str, str], ...]
    subject: str
    sender: str
    to: list[str]
    cc: list[str]
    date: Optional[datetime]
    text: str
    html: str = ""
    snippet: str = ""
    label_ids: tuple[str, ...] = ()
    history_id: Optional[int] = None
    rfc822_message_id: str = ""  # Message-Id header, used for reply threading
    attachments: list[AttachmentDescriptor] = field(default_factory=list)

    def header(self, name: str) -> Optional[str]:
        wanted = name.lower()
        for key, value in self.headers:
            if key.lower() == wanted:
                return value
        return None

    def find_attachment(self, attachment_id: str) -> Optional[AttachmentDescriptor]:
        for attachment in self.attachments:
            if attachment.attachment_id == attachment_id:
                return attachment
        return None

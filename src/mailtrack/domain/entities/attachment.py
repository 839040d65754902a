from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class AttachmentDescriptor:
    message_id: str
    attachment_id: str
    filename: str
    mime_type: str = "application/octet-stream"
    size_bytes: int = 0


@dataclass(frozen=True)
class FetchedAttachment:
    filename: str
    mime_type: str
    data: bytes

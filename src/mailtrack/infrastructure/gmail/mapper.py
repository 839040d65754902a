from __future__ import annotations

import base64
from datetime import datetime, timezone
from email.utils import formataddr, getaddresses, parsedate_to_datetime
from typing import Any, Iterator, Optional

from mailtrack.domain.entities.attachment import AttachmentDescriptor
from mailtrack.domain.entities.email_message import RemoteMessage
from mailtrack.domain.entities.history import HistoryRecord


def decode_base64url(data: str) -> bytes:
    # Gmail strips padding
    return base64.urlsafe_b64decode(data + "=" * (-len(data) % 4))


def encode_base64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii")


def _walk(part: dict[str, Any]) -> Iterator[dict[str, Any]]:
    yield part
    for child in part.get("parts") or []:
        yield from _walk(child)


def _body_text(part: dict[str, Any]) -> str:
    data = (part.get("body") or {}).get("data")
    if not data:
        return ""
    return decode_base64url(data).decode("utf-8", errors="replace")


def _addresses(values: list[str]) -> list[str]:
    return [formataddr(pair) for pair in getaddresses(values) if pair[1]]


def _message_date(data: dict[str, Any], date_header: Optional[str]) -> Optional[datetime]:
    internal = data.get("internalDate")
    if internal:
        return datetime.fromtimestamp(int(internal) / 1000, timezone.utc)
    # Date headers can be messy; leave unset when unparseable
    if date_header:
        try:
            return parsedate_to_datetime(date_header)
        except (TypeError, ValueError):
            return None
    return None


def gmail_to_remote_message(data: dict[str, Any]) -> RemoteMessage:
    """Validate a ``users.messages.get(format=full)`` payload."""
    message_id = data.get("id")
    payload = data.get("payload")
    if not message_id or not isinstance(payload, dict):
        raise ValueError(f"Malformed Gmail message: {message_id or '<no id>'}")

    headers = tuple((h.get("name", ""), h.get("value", "")) for h in payload.get("headers") or [])

    def all_values(name: str) -> list[str]:
        return [v for k, v in headers if k.lower() == name]

    def first(name: str) -> str:
        values = all_values(name)
        return values[0].strip() if values else ""

    text = ""
    html = ""
    attachments: list[AttachmentDescriptor] = []
    for part in _walk(payload):
        mime_type = part.get("mimeType", "")
        filename = part.get("filename") or ""
        body = part.get("body") or {}

        if filename and body.get("attachmentId"):
            attachments.append(
                AttachmentDescriptor(
                    message_id=message_id,
                    attachment_id=body["attachmentId"],
                    filename=filename,
                    mime_type=mime_type or "application/octet-stream",
                    size_bytes=int(body.get("size") or 0),
                )
            )
        elif not filename and mime_type == "text/plain" and not text:
            text = _body_text(part).strip()
        elif not filename and mime_type == "text/html" and not html:
            html = _body_text(part)

    history_id = data.get("historyId")

    return RemoteMessage(
        message_id=message_id,
        thread_id=data.get("threadId"),
        headers=headers,
        subject=first("subject"),
        sender=first("from"),
        to=_addresses(all_values("to")),
        cc=_addresses(all_values("cc")),
        date=_message_date(data, first("date") or None),
        text=text,
        html=html,
        snippet=data.get("snippet", ""),
        label_ids=tuple(data.get("labelIds") or ()),
        history_id=int(history_id) if history_id else None,
        rfc822_message_id=first("message-id"),
        attachments=attachments,
    )


def gmail_to_history_record(item: dict[str, Any]) -> HistoryRecord:
    """One ``users.history.list`` entry; message ids deduplicated in order."""
    added = [entry.get("message") or {} for entry in item.get("messagesAdded") or []]
    candidates = added or (item.get("messages") or [])

    seen: dict[str, None] = {}
    for message in candidates:
        mid = message.get("id")
        if mid:
            seen.setdefault(mid, None)

    return HistoryRecord(history_id=int(item["id"]), message_ids=tuple(seen))

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional


@dataclass(frozen=True)
class HistoryRecord:
    # The record id becomes the account's cursor once processed
    history_id: int
    message_ids: tuple[str, ...]


@dataclass(frozen=True)
class NotificationEvent:
    data: bytes
    ack: Callable[[], Any]
    delivery_id: Optional[str] = None


@dataclass(frozen=True)
class WatchResult:
    history_id: Optional[int]
    expiration: Optional[datetime]

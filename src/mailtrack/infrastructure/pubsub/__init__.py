"""Pub/Sub notification intake."""

from mailtrack.infrastructure.pubsub.listener import GmailNotification, NotificationListener

__all__ = [
    "GmailNotification",
    "NotificationListener",
]

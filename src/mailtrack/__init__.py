"""Gmail mailbox tracking: push notifications, history sync and OAuth linking."""

__version__ = "0.1.0"

# src/mailtrack/infrastructure/__init__.py
"""Infrastructure layer - external services, databases, and configuration."""

from mailtrack.infrastructure.settings import Settings, get_settings
from mailtrack.infrastructure.tracker import MailTracker, build_tracker, get_tracker

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Tracker wiring
    "MailTracker",
    "build_tracker",
    "get_tracker",
]

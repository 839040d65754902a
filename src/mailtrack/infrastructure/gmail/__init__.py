"""Gmail provider: OAuth, REST client and payload mapping."""

from mailtrack.infrastructure.gmail.client import GmailClient
from mailtrack.infrastructure.gmail.factory import GmailClientFactory
from mailtrack.infrastructure.gmail.oauth import GoogleOAuthClient

__all__ = [
    "GmailClient",
    "GmailClientFactory",
    "GoogleOAuthClient",
]

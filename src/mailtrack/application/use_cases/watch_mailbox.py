from __future__ import annotations

from loguru import logger

from mailtrack.application.ports.mailbox_client import ClientFactory
from mailtrack.domain.entities.history import WatchResult

# System labels whose activity must not trigger notifications
EXCLUDED_LABELS = (
    "CATEGORY_UPDATES",
    "DRAFT",
    "CATEGORY_PROMOTIONS",
    "CATEGORY_SOCIAL",
    "CATEGORY_FORUMS",
    "TRASH",
    "CHAT",
    "SPAM",
)


class WatchMailboxUseCase:
    """Arm and disarm provider push notifications for an account.

    Watches expire; renewing before ``WatchResult.expiration`` is the
    scheduler's job.
    """

    def __init__(self, clients: ClientFactory, topic_name: str) -> None:
        self.clients = clients
        self.topic_name = topic_name

    def start_watch(self, account_id: str) -> WatchResult:
        client = self.clients.get_client(account_id)
        result = client.watch(self.topic_name, EXCLUDED_LABELS, "exclude")
        logger.info(
            f"Watch started for account {account_id} on {self.topic_name}, "
            f"expires {result.expiration.isoformat() if result.expiration else 'unknown'}"
        )
        return result

    def stop_watch(self, account_id: str) -> bool:
        # Best effort: the account may already be deauthorized
        try:
            self.clients.get_client(account_id).stop()
        except Exception as e:
            logger.warning(f"Failed to stop watch for account {account_id}: {e}")
            return False
        logger.info(f"Watch stopped for account {account_id}")
        return True

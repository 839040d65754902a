"""Gmail tracking worker - listens for push notifications and syncs mailboxes."""

from __future__ import annotations

import signal
import sys

from loguru import logger

from mailtrack.domain.errors import ListenerFatal
from mailtrack.infrastructure import MailTracker, build_tracker, get_settings
from mailtrack.infrastructure.pubsub.listener import NotificationListener


class TrackerWorker:
    """
    Long-running Gmail notification consumer.

    Subscribes to the configured Pub/Sub subscription and hands every
    notification to the history sync. A subscription failure ends the
    process with a non-zero exit code so the supervisor can restart it.
    """

    def __init__(self, tracker: MailTracker, subscriber=None):
        self.tracker = tracker
        self._subscriber = subscriber
        self.listener: NotificationListener | None = None

    def _handle_shutdown(self, signum, frame) -> None:
        """Handle graceful shutdown."""
        logger.info(f"Received signal {signum}, shutting down...")
        if self.listener is not None:
            self.listener.close()

    def run(self) -> int:
        """Run until shutdown or a fatal subscription error."""
        if not self.tracker.tracking_enabled:
            logger.warning(
                "Tracking disabled: set GOOGLE_APPLICATION_CREDENTIALS, GOOGLE_TOPIC, "
                "GOOGLE_SUBSCRIPTION_NAME and GOOGLE_PROJECT_ID to enable it"
            )
            return 0

        signal.signal(signal.SIGTERM, self._handle_shutdown)
        signal.signal(signal.SIGINT, self._handle_shutdown)

        self.listener = self.tracker.create_listener(subscriber=self._subscriber)
        logger.info(f"Tracker worker starting on {self.tracker.settings.subscription_path}")

        try:
            self.listener.run()
        except ListenerFatal as e:
            logger.error(f"Listener stopped: {e}")
            return 1

        logger.info("Worker shutdown complete")
        return 0


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level=level,
    )


def main() -> int:
    """Entry point for the tracker worker."""
    settings = get_settings()
    configure_logging(settings.log_level)

    logger.info("=" * 60)
    logger.info("Mailtrack Gmail Worker")
    logger.info("=" * 60)

    worker = TrackerWorker(build_tracker(settings))
    return worker.run()


if __name__ == "__main__":
    raise SystemExit(main())

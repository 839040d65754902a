"""Start or stop Gmail push watches for linked accounts."""

from __future__ import annotations

import argparse

from loguru import logger

from mailtrack.cli.worker import configure_logging
from mailtrack.domain.errors import MailTrackError
from mailtrack.infrastructure import MailTracker, build_tracker, get_settings


def _select(tracker: MailTracker, email: str | None):
    if email:
        account = tracker.accounts.get_by_email(email)
        return [account] if account else []
    return tracker.accounts.list_active()


def run(tracker: MailTracker, action: str, email: str | None = None) -> int:
    if action == "start" and not tracker.tracking_enabled:
        print("Tracking is disabled: Google Pub/Sub settings are incomplete")
        return 1

    accounts = _select(tracker, email)
    if not accounts:
        print(f"No linked account{' for ' + email if email else 's'}")
        return 1

    failures = 0
    for account in accounts:
        if action == "list":
            print(f"{account.email}\thistoryId={account.history_id}")
        elif action == "start":
            try:
                result = tracker.watcher.start_watch(account.id)
                print(f"{account.email}: watching until {result.expiration}")
            except MailTrackError as e:
                failures += 1
                logger.error(f"Watch failed for {account.email}: {e}")
        else:
            tracker.watcher.stop_watch(account.id)
            print(f"{account.email}: watch stopped")

    return 1 if failures else 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Manage Gmail push watches")
    parser.add_argument("action", choices=["start", "stop", "list"], help="start/renew, stop, or list accounts")
    parser.add_argument("--email", default=None, help="Limit to one mailbox (default: all active accounts)")
    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings.log_level)
    return run(build_tracker(settings), args.action, args.email)


if __name__ == "__main__":
    raise SystemExit(main())

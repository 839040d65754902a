"""Per-account single-flight guard."""

from __future__ import annotations

import threading
from typing import Optional


class AccountLocks:
    """At most one running sync per account, without parking callers.

    A caller that finds its account busy leaves its historyId behind and
    returns at once, so a notification burst for one mailbox never ties up
    the callback threads other accounts need. The running caller picks up
    the highest pending historyId before it lets go of the account.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._running: set[str] = set()
        self._pending: dict[str, int] = {}

    def claim(self, account_id: str, history_id: int) -> bool:
        """Take the account, or queue ``history_id`` for the current holder."""
        with self._guard:
            if account_id in self._running:
                queued = self._pending.get(account_id)
                if queued is None or history_id > queued:
                    self._pending[account_id] = history_id
                return False
            self._running.add(account_id)
            return True

    def next_pending(self, account_id: str) -> Optional[int]:
        """Hand the holder the queued historyId, or release the account if none."""
        with self._guard:
            history_id = self._pending.pop(account_id, None)
            if history_id is None:
                self._running.discard(account_id)
            return history_id

    def release(self, account_id: str) -> None:
        """Release the account and drop anything queued for it."""
        with self._guard:
            self._running.discard(account_id)
            self._pending.pop(account_id, None)

"""Resolve push notifications into new messages using the history cursor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from loguru import logger

from mailtrack.application.locks import AccountLocks
from mailtrack.application.ports.account_store import AccountStore
from mailtrack.application.ports.mailbox_client import ClientFactory
from mailtrack.application.use_cases.ingest_message import IngestMessageUseCase
from mailtrack.domain.errors import AuthRevoked, RemoteNotFound

CursorCommit = Literal["eager", "deferred"]


@dataclass
class SyncResult:
    account_id: str
    history_id: Optional[int]
    records: int = 0
    ingested: int = 0
    failed: int = 0
    seeded: bool = False


class HistorySyncUseCase:
    """Incremental mailbox sync driven by the stored history cursor.

    Flow:
    1. Seed the cursor from the notification when none is stored
    2. List history records strictly after the stored cursor
    3. For each record, in provider order, advance the cursor and ingest
       every message it references

    A failing message is logged and the batch continues. With
    ``cursor_commit="deferred"`` the cursor moves after a record's messages
    were attempted instead of before, so a crash replays that record.
    """

    def __init__(
        self,
        accounts: AccountStore,
        clients: ClientFactory,
        ingestor: IngestMessageUseCase,
        locks: Optional[AccountLocks] = None,
        cursor_commit: CursorCommit = "eager",
    ) -> None:
        self.accounts = accounts
        self.clients = clients
        self.ingestor = ingestor
        self.locks = locks or AccountLocks()
        self.cursor_commit = cursor_commit

    def handle_notification(self, email: str, history_id: int) -> Optional[SyncResult]:
        """Entry point for a decoded notification, keyed by mailbox address."""
        account = self.accounts.get_by_email(email)
        if account is None:
            logger.warning(f"Notification for unknown mailbox {email}, ignoring")
            return None
        return self.sync(account.id, history_id)

    def sync(self, account_id: str, notified_history_id: int) -> Optional[SyncResult]:
        """Sync one account up to the notified historyId.

        Returns None when a sync for the account is already running; the
        running sync takes the historyId over and makes one more pass.
        """
        if not self.locks.claim(account_id, notified_history_id):
            logger.debug(f"Sync already running for account {account_id}, queued historyId {notified_history_id}")
            return None

        history_id = notified_history_id
        try:
            while True:
                result = self._sync(account_id, history_id)
                pending = self.locks.next_pending(account_id)
                if pending is None:
                    return result
                logger.debug(f"Re-syncing account {account_id} for queued historyId {pending}")
                history_id = pending
        except AuthRevoked:
            self.locks.release(account_id)
            self.accounts.mark_revoked(account_id)
            logger.error(f"Authorization revoked for account {account_id}; sync suspended until re-authorized")
            raise
        except Exception:
            self.locks.release(account_id)
            raise

    def _sync(self, account_id: str, notified_history_id: int) -> SyncResult:
        account = self.accounts.get(account_id)
        if account is None:
            logger.warning(f"Account {account_id} no longer exists, skipping sync")
            return SyncResult(account_id=account_id, history_id=None)

        if account.is_revoked:
            logger.warning(f"Account {account.email} is awaiting re-authorization, skipping sync")
            return SyncResult(account_id=account_id, history_id=account.history_id)

        cursor = account.history_id
        if cursor is None:
            self.accounts.advance_history(account_id, notified_history_id, account.generation)
            logger.info(f"Seeded history cursor for {account.email} at {notified_history_id}")
            return SyncResult(account_id=account_id, history_id=notified_history_id, seeded=True)

        client = self.clients.get_client(account_id)
        try:
            records = client.list_history(cursor)
        except RemoteNotFound:
            # startHistoryId fell out of the provider's retention window
            logger.warning(
                f"History cursor {cursor} for {account.email} expired upstream, "
                f"resuming from {notified_history_id}"
            )
            self.accounts.advance_history(account_id, notified_history_id, account.generation)
            current = self.accounts.get(account_id)
            return SyncResult(account_id=account_id, history_id=current.history_id if current else None)

        result = SyncResult(account_id=account_id, history_id=cursor, records=len(records))
        if not records:
            logger.debug(f"No history after {cursor} for {account.email}")
            return result

        logger.info(f"Processing {len(records)} history records after {cursor} for {account.email}")

        for record in records:
            if self.cursor_commit == "eager":
                self._advance(account_id, record.history_id, account.generation, result)

            for message_id in record.message_ids:
                try:
                    if self.ingestor.ingest(account_id, message_id, client):
                        result.ingested += 1
                    else:
                        result.failed += 1
                except AuthRevoked:
                    raise
                except Exception as e:
                    result.failed += 1
                    logger.error(f"Failed to ingest message {message_id} for {account.email}: {e}")

            if self.cursor_commit == "deferred":
                self._advance(account_id, record.history_id, account.generation, result)

        logger.info(
            f"Sync for {account.email} done: cursor={result.history_id}, "
            f"ingested={result.ingested}, failed={result.failed}"
        )
        return result

    def _advance(self, account_id: str, history_id: int, generation: int, result: SyncResult) -> None:
        if self.accounts.advance_history(account_id, history_id, generation):
            result.history_id = history_id

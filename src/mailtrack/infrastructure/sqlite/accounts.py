"""SQLite-backed credential and history cursor store."""

from __future__ import annotations

import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Optional

from loguru import logger

from mailtrack.domain.entities.account import Account, TokenSet
from mailtrack.infrastructure.sqlite.client import SQLiteClient


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    dt = datetime.fromisoformat(value)
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def _row_to_account(row: sqlite3.Row) -> Account:
    return Account(
        id=row["id"],
        email=row["email"],
        kind=row["kind"],
        tokens=TokenSet(
            access_token=row["access_token"],
            refresh_token=row["refresh_token"],
            expiry=_parse_ts(row["expiry"]),
            scope=row["scope"],
        ),
        history_id=row["history_id"],
        revoked_at=_parse_ts(row["revoked_at"]),
        generation=row["auth_generation"],
    )


class SQLiteAccountStore:
    """Accounts keyed by id, unique by mailbox address."""

    def __init__(self, client: SQLiteClient) -> None:
        self.client = client

    def get(self, account_id: str) -> Optional[Account]:
        with self.client.connection() as conn:
            row = conn.execute("SELECT * FROM accounts WHERE id = ?", (account_id,)).fetchone()
        return _row_to_account(row) if row else None

    def get_by_email(self, email: str) -> Optional[Account]:
        with self.client.connection() as conn:
            row = conn.execute(
                "SELECT * FROM accounts WHERE email = ?",
                (email.strip().lower(),),
            ).fetchone()
        return _row_to_account(row) if row else None

    def list_active(self) -> list[Account]:
        with self.client.connection() as conn:
            rows = conn.execute("SELECT * FROM accounts WHERE revoked_at IS NULL ORDER BY email").fetchall()
        return [_row_to_account(row) for row in rows]

    def upsert_authorized(self, email: str, kind: str, tokens: TokenSet) -> Account:
        """Create the account or re-authorize it.

        Re-authorization replaces the tokens, lifts a revocation and clears
        the history cursor so the next notification seeds it afresh. The
        generation bump makes any sync still running for the old grant
        unable to write its cursor back.
        """
        email = email.strip().lower()
        now = _now()
        expiry = tokens.expiry.isoformat() if tokens.expiry else None

        with self.client.connection() as conn:
            conn.execute(
                """INSERT INTO accounts
                   (id, email, kind, access_token, refresh_token, expiry, scope, history_id, revoked_at, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, NULL, NULL, ?, ?)
                   ON CONFLICT(email) DO UPDATE SET
                       kind = excluded.kind,
                       access_token = excluded.access_token,
                       refresh_token = excluded.refresh_token,
                       expiry = excluded.expiry,
                       scope = excluded.scope,
                       history_id = NULL,
                       revoked_at = NULL,
                       auth_generation = accounts.auth_generation + 1,
                       updated_at = excluded.updated_at""",
                (str(uuid.uuid4()), email, kind, tokens.access_token, tokens.refresh_token, expiry, tokens.scope, now, now),
            )
            row = conn.execute("SELECT * FROM accounts WHERE email = ?", (email,)).fetchone()

        logger.info(f"Authorized {kind} account {email}")
        return _row_to_account(row)

    def update_tokens(self, account_id: str, tokens: TokenSet, generation: Optional[int] = None) -> None:
        sql = """UPDATE accounts
                 SET access_token = ?, refresh_token = ?, expiry = ?, scope = ?, updated_at = ?
                 WHERE id = ?"""
        params: tuple = (
            tokens.access_token,
            tokens.refresh_token,
            tokens.expiry.isoformat() if tokens.expiry else None,
            tokens.scope,
            _now(),
            account_id,
        )
        # Rotations from a superseded grant are dropped
        if generation is not None:
            sql += " AND auth_generation = ?"
            params += (generation,)

        with self.client.connection() as conn:
            updated = conn.execute(sql, params).rowcount == 1

        if updated:
            logger.debug(f"Stored rotated tokens for account {account_id}")
        else:
            logger.debug(f"Dropped rotated tokens for account {account_id}; account was re-authorized")

    def advance_history(self, account_id: str, history_id: int, generation: Optional[int] = None) -> bool:
        """Move the cursor forward; never backwards.

        With ``generation`` the write only lands if the account has not been
        re-authorized since that generation was read.
        """
        sql = """UPDATE accounts SET history_id = ?, updated_at = ?
                 WHERE id = ? AND (history_id IS NULL OR history_id < ?)"""
        params: tuple = (history_id, _now(), account_id, history_id)
        if generation is not None:
            sql += " AND auth_generation = ?"
            params += (generation,)

        with self.client.connection() as conn:
            cursor = conn.execute(sql, params)
            advanced = cursor.rowcount == 1

        if advanced:
            logger.debug(f"Advanced history cursor for account {account_id} to {history_id}")
        return advanced

    def mark_revoked(self, account_id: str) -> None:
        with self.client.connection() as conn:
            conn.execute(
                "UPDATE accounts SET revoked_at = ?, updated_at = ? WHERE id = ? AND revoked_at IS NULL",
                (_now(), _now(), account_id),
            )

import threading
import time
from datetime import datetime, timedelta, timezone

import pytest

from mailtrack.domain import (
    AttachmentDescriptor,
    HistoryRecord,
    RemoteMessage,
    TokenSet,
    WatchResult,
)
from mailtrack.infrastructure.sqlite import SQLiteAccountStore, SQLiteClient


def make_message(message_id, thread_id="thread-1", attachments=(), subject="Hello"):
    return RemoteMessage(
        message_id=message_id,
        thread_id=thread_id,
        headers=(("Subject", subject), ("From", "Alice <alice@example.com>")),
        subject=subject,
        sender="Alice <alice@example.com>",
        to=["user@example.com"],
        cc=[],
        date=datetime(2024, 5, 1, tzinfo=timezone.utc),
        text=f"body of {message_id}",
        rfc822_message_id=f"<{message_id}@mail.example.com>",
        attachments=[
            AttachmentDescriptor(message_id=message_id, attachment_id=aid, filename=f"{aid}.pdf")
            for aid in attachments
        ],
    )


class FakeMailboxClient:
    """In-memory mailbox; history entries are returned when newer than the cursor."""

    def __init__(self, history=(), messages=None):
        self.history = list(history)
        self.messages = dict(messages or {})
        self.history_calls = []
        self.message_calls = []
        self.attachment_calls = []
        self.sent = []
        self.watch_calls = []
        self.stopped = 0
        self.attachment_data = b"%PDF-1.4"
        self.list_history_error = None
        self.send_error = None
        self.stop_error = None
        self.delay = 0.0
        self._active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def get_profile(self):
        return {"emailAddress": "user@example.com", "historyId": "1"}

    def list_history(self, start_history_id):
        with self._lock:
            self._active += 1
            self.max_active = max(self.max_active, self._active)
        try:
            self.history_calls.append(start_history_id)
            if self.delay:
                time.sleep(self.delay)
            if self.list_history_error:
                raise self.list_history_error
            return [r for r in self.history if r.history_id > start_history_id]
        finally:
            with self._lock:
                self._active -= 1

    def get_message(self, message_id):
        self.message_calls.append(message_id)
        value = self.messages.get(message_id)
        if isinstance(value, Exception):
            raise value
        return value or make_message(message_id)

    def get_attachment(self, message_id, attachment_id):
        self.attachment_calls.append((message_id, attachment_id))
        return self.attachment_data

    def send_message(self, raw, thread_id=None):
        if self.send_error:
            raise self.send_error
        self.sent.append((raw, thread_id))
        return f"sent-{len(self.sent)}"

    def watch(self, topic_name, label_ids, label_filter_action):
        self.watch_calls.append((topic_name, tuple(label_ids), label_filter_action))
        return WatchResult(history_id=500, expiration=datetime.now(timezone.utc) + timedelta(days=7))

    def stop(self):
        if self.stop_error:
            raise self.stop_error
        self.stopped += 1


class FakeClientFactory:
    def __init__(self, client):
        self.client = client
        self.calls = []

    def get_client(self, account_id):
        self.calls.append(account_id)
        return self.client


class RecordingConversationSync:
    """Idempotent store keyed on (account, message id) that records every call."""

    def __init__(self, on_sync=None):
        self.calls = []
        self.store = {}
        self.on_sync = on_sync

    def sync_conversation(self, account_id, message):
        if self.on_sync:
            self.on_sync(account_id, message)
        self.calls.append(message.message_id)
        self.store[(account_id, message.message_id)] = message


@pytest.fixture
def db(tmp_path):
    return SQLiteClient(tmp_path / "mailtrack.db")


@pytest.fixture
def accounts(db):
    return SQLiteAccountStore(db)


@pytest.fixture
def tokens():
    return TokenSet(
        access_token="access-1",
        refresh_token="refresh-1",
        expiry=datetime.now(timezone.utc) + timedelta(hours=1),
        scope="https://www.googleapis.com/auth/gmail.readonly",
    )


@pytest.fixture
def account(accounts, tokens):
    return accounts.upsert_authorized("user@example.com", "gmail", tokens)


@pytest.fixture
def mailbox():
    return FakeMailboxClient()


@pytest.fixture
def factory(mailbox):
    return FakeClientFactory(mailbox)


@pytest.fixture
def conversations():
    return RecordingConversationSync()


@pytest.fixture
def history():
    def build(*entries):
        return [HistoryRecord(history_id=hid, message_ids=tuple(mids)) for hid, mids in entries]

    return build


@pytest.fixture
def message_factory():
    return make_message


@pytest.fixture
def mailbox_factory():
    return FakeMailboxClient


@pytest.fixture
def client_factory():
    return FakeClientFactory


@pytest.fixture
def conversation_sync_factory():
    return RecordingConversationSync

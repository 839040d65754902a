import json

import pytest
from google.api_core.exceptions import AlreadyExists

from mailtrack.domain import AuthRevoked, ListenerFatal
from mailtrack.infrastructure.pubsub.listener import NotificationListener


class FakeSync:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def handle_notification(self, email, history_id):
        self.calls.append((email, history_id))
        if self.error:
            raise self.error


class FakeMessage:
    def __init__(self, payload, message_id="pm-1"):
        self.data = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
        self.message_id = message_id
        self.acked = 0

    def ack(self):
        self.acked += 1


class FakeFuture:
    def __init__(self, error=None):
        self.error = error
        self.cancelled = False

    def result(self, timeout=None):
        if self.error:
            raise self.error
        return True

    def cancel(self):
        self.cancelled = True


class FakeSubscriber:
    def __init__(self, future=None, exists=False):
        self.future = future or FakeFuture()
        self.exists = exists
        self.created = []
        self.subscribed = []

    def create_subscription(self, request):
        if self.exists:
            raise AlreadyExists("subscription exists")
        self.created.append(request)

    def subscribe(self, subscription, callback, flow_control):
        self.subscribed.append((subscription, callback, flow_control))
        return self.future


def make_listener(sync, subscriber=None):
    return NotificationListener(
        sync=sync,
        subscription_path="projects/p/subscriptions/gmail-sub",
        topic_path="projects/p/topics/gmail",
        subscriber=subscriber or FakeSubscriber(),
        max_messages=5,
    )


def test_notification_is_dispatched_and_acked():
    sync = FakeSync()
    message = FakeMessage({"emailAddress": "user@example.com", "historyId": 9876})

    make_listener(sync).handle_message(message)

    assert sync.calls == [("user@example.com", 9876)]
    assert message.acked == 1


def test_account_email_key_is_accepted():
    sync = FakeSync()
    message = FakeMessage({"accountEmail": "user@example.com", "historyId": "12"})

    make_listener(sync).handle_message(message)

    assert sync.calls == [("user@example.com", 12)]


@pytest.mark.parametrize("error", [RuntimeError("boom"), AuthRevoked("acct-1", "revoked")])
def test_failed_sync_is_still_acked(error):
    message = FakeMessage({"emailAddress": "user@example.com", "historyId": 1})

    make_listener(FakeSync(error=error)).handle_message(message)

    assert message.acked == 1


@pytest.mark.parametrize("payload", [b"not json", {"emailAddress": "user@example.com"}, {"historyId": "x"}])
def test_malformed_payload_is_acked_without_sync(payload):
    sync = FakeSync()
    message = FakeMessage(payload)

    make_listener(sync).handle_message(message)

    assert sync.calls == []
    assert message.acked == 1


def test_start_creates_subscription_and_subscribes():
    subscriber = FakeSubscriber()
    listener = make_listener(FakeSync(), subscriber)

    listener.start()

    assert listener.state == "subscribed"
    assert subscriber.created == [
        {"name": "projects/p/subscriptions/gmail-sub", "topic": "projects/p/topics/gmail"}
    ]
    [(path, callback, flow_control)] = subscriber.subscribed
    assert path == "projects/p/subscriptions/gmail-sub"
    assert callback == listener.handle_message
    assert flow_control.max_messages == 5


def test_existing_subscription_is_reused():
    subscriber = FakeSubscriber(exists=True)
    listener = make_listener(FakeSync(), subscriber)

    listener.start()

    assert listener.state == "subscribed"
    assert len(subscriber.subscribed) == 1


def test_subscription_error_is_fatal_and_unsubscribes():
    future = FakeFuture(error=RuntimeError("stream broken"))
    listener = make_listener(FakeSync(), FakeSubscriber(future=future))

    with pytest.raises(ListenerFatal):
        listener.run()

    assert future.cancelled
    assert listener.state == "closed"


def test_close_ends_run_quietly():
    future = FakeFuture(error=RuntimeError("cancelled"))
    listener = make_listener(FakeSync(), FakeSubscriber(future=future))
    listener.start()
    listener.close()

    listener.run()

    assert listener.state == "closed"
    assert future.cancelled


def test_cannot_restart_closed_listener():
    listener = make_listener(FakeSync())
    listener.start()
    listener.close()

    with pytest.raises(RuntimeError):
        listener.start()

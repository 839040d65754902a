from mailtrack.application.use_cases.watch_mailbox import EXCLUDED_LABELS, WatchMailboxUseCase
from mailtrack.domain import RemoteError


def test_start_watch_excludes_system_labels(factory, mailbox):
    result = WatchMailboxUseCase(factory, "projects/p/topics/gmail").start_watch("acct")

    [(topic, labels, action)] = mailbox.watch_calls
    assert topic == "projects/p/topics/gmail"
    assert action == "exclude"
    assert set(labels) == {
        "CATEGORY_UPDATES",
        "DRAFT",
        "CATEGORY_PROMOTIONS",
        "CATEGORY_SOCIAL",
        "CATEGORY_FORUMS",
        "TRASH",
        "CHAT",
        "SPAM",
    }
    assert labels == EXCLUDED_LABELS
    assert result.expiration is not None


def test_stop_watch_is_best_effort(factory, mailbox):
    mailbox.stop_error = RemoteError("Invalid Credentials", status_code=401)

    assert WatchMailboxUseCase(factory, "t").stop_watch("acct") is False


def test_stop_watch(factory, mailbox):
    assert WatchMailboxUseCase(factory, "t").stop_watch("acct") is True
    assert mailbox.stopped == 1

from mailtrack.cli import serve, watch
from mailtrack.cli.worker import TrackerWorker
from mailtrack.infrastructure import Settings, build_tracker


def make_tracker(tmp_path, **overrides):
    values = {
        "sqlite_db_path": str(tmp_path / "cli.db"),
        "google_application_credentials": None,
        "google_topic": None,
        "google_subscription_name": None,
        "google_project_id": None,
        **overrides,
    }
    return build_tracker(Settings(_env_file=None, **values))


class ExplodingSubscriber:
    def create_subscription(self, request):
        raise AssertionError("tracking is disabled")


def test_worker_exits_cleanly_when_tracking_disabled(tmp_path):
    worker = TrackerWorker(make_tracker(tmp_path), subscriber=ExplodingSubscriber())

    assert worker.run() == 0
    assert worker.listener is None


def test_watch_start_refused_when_tracking_disabled(tmp_path, tokens):
    tracker = make_tracker(tmp_path)
    tracker.accounts.upsert_authorized("user@example.com", "gmail", tokens)

    assert watch.run(tracker, "start") == 1


def test_watch_list_prints_accounts(tmp_path, tokens, capsys):
    tracker = make_tracker(tmp_path)
    account = tracker.accounts.upsert_authorized("user@example.com", "gmail", tokens)
    tracker.accounts.advance_history(account.id, 77)

    assert watch.run(tracker, "list") == 0
    assert "user@example.com\thistoryId=77" in capsys.readouterr().out


def test_watch_unknown_email(tmp_path):
    assert watch.run(make_tracker(tmp_path), "stop", email="ghost@example.com") == 1


def test_serve_binds_configured_address(monkeypatch):
    calls = {}
    monkeypatch.setattr(serve.uvicorn, "run", lambda app, **kwargs: calls.update(app=app, **kwargs))
    monkeypatch.setattr(
        serve, "get_settings", lambda: Settings(_env_file=None, api_host="127.0.0.1", api_port=9100, log_level="WARNING")
    )

    serve.main([])

    assert calls["host"] == "127.0.0.1"
    assert calls["port"] == 9100
    assert calls["log_level"] == "warning"
    assert any(route.path == "/gmailLogin" for route in calls["app"].routes)


def test_serve_flags_override_settings(monkeypatch):
    calls = {}
    monkeypatch.setattr(serve.uvicorn, "run", lambda app, **kwargs: calls.update(**kwargs))
    monkeypatch.setattr(serve, "get_settings", lambda: Settings(_env_file=None))

    serve.main(["--host", "localhost", "--port", "9200"])

    assert (calls["host"], calls["port"]) == ("localhost", 9200)

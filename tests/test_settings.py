import pytest

from mailtrack.infrastructure.settings import Settings

TRACKING = {
    "google_application_credentials": "/secrets/sa.json",
    "google_topic": "gmail-push",
    "google_subscription_name": "gmail-sub",
    "google_project_id": "acme",
}


def test_tracking_enabled_with_all_settings():
    settings = Settings(_env_file=None, **TRACKING)

    assert settings.tracking_enabled is True
    assert settings.topic_path == "projects/acme/topics/gmail-push"
    assert settings.subscription_path == "projects/acme/subscriptions/gmail-sub"


@pytest.mark.parametrize("missing", sorted(TRACKING))
def test_tracking_disabled_when_any_setting_missing(missing):
    values = {**TRACKING, missing: None}

    assert Settings(_env_file=None, **values).tracking_enabled is False


def test_full_resource_paths_are_kept():
    settings = Settings(
        _env_file=None,
        **{**TRACKING, "google_topic": "projects/other/topics/t", "google_subscription_name": "projects/other/subscriptions/s"},
    )

    assert settings.topic_path == "projects/other/topics/t"
    assert settings.subscription_path == "projects/other/subscriptions/s"


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("GOOGLE_TOPIC", "env-topic")
    monkeypatch.setenv("CURSOR_COMMIT", "deferred")

    settings = Settings(_env_file=None)

    assert settings.google_topic == "env-topic"
    assert settings.cursor_commit == "deferred"

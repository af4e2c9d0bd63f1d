"""Tests for configuration management."""

import pytest
from pydantic import ValidationError

from lead_capture.config.settings import (
    ApplicationSettings,
    DevelopmentSettings,
    Environment,
    ProductionSettings,
    QueueBackend,
    QueueSettings,
    RemoteBackend,
    RemoteServiceSettings,
    SubmissionSettings,
    TestingSettings,
    get_settings,
)


class TestSettings:
    """Test settings classes and environment selection."""

    def test_default_settings(self):
        settings = ApplicationSettings()

        assert settings.submission.timeout == 5.0
        assert settings.submission.max_attempts == 3
        assert settings.submission.base_delay == 1.0
        assert settings.queue.key == "lead_submission_queue"
        assert settings.queue.legacy_keys == ["pending_submissions", "contact_submissions"]
        assert settings.reconciliation.settle_delay == 5.0
        assert settings.remote.table == "contact_forms"

    def test_testing_settings(self):
        settings = TestingSettings()

        assert settings.environment == Environment.TESTING
        assert settings.remote.backend == RemoteBackend.MEMORY
        assert settings.queue.backend == QueueBackend.MEMORY
        assert settings.reconciliation.settle_delay == 0.0

    def test_environment_variables(self, monkeypatch):
        monkeypatch.setenv("SUBMISSION_TIMEOUT", "2.5")
        monkeypatch.setenv("SUBMISSION_MAX_ATTEMPTS", "5")

        settings = SubmissionSettings()

        assert settings.timeout == 2.5
        assert settings.max_attempts == 5

    def test_invalid_values(self):
        with pytest.raises(ValidationError):
            SubmissionSettings(timeout=0)
        with pytest.raises(ValidationError):
            QueueSettings(key="../escape")

    def test_placeholder_credentials_not_configured(self):
        assert RemoteServiceSettings().is_configured is False
        assert RemoteServiceSettings(url="", api_key="key").is_configured is False
        assert RemoteServiceSettings(
            url="https://abc.supabase.co", api_key="anon-key"
        ).is_configured is True

    @pytest.mark.parametrize(
        "environment, settings_class",
        [
            ("development", DevelopmentSettings),
            ("testing", TestingSettings),
            ("production", ProductionSettings),
        ],
    )
    def test_get_settings(self, monkeypatch, environment, settings_class):
        monkeypatch.setenv("ENVIRONMENT", environment)

        assert isinstance(get_settings(), settings_class)

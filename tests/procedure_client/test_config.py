"""Unit tests for Settings."""

import pytest

from procedure_client.config import Settings


class TestSettingsDefaults:
    """Tests for default values."""

    def test_defaults(self, monkeypatch):
        for name in ["ENVIRONMENT", "RPC_URL", "RPC_TIMEOUT", "RPC_LOG_REQUESTS"]:
            monkeypatch.delenv(name, raising=False)

        settings = Settings()

        assert settings.ENVIRONMENT == "development"
        assert settings.RPC_TIMEOUT == 30.0
        assert settings.RPC_LOG_REQUESTS is None
        assert settings.SUBSCRIPTION_BASE_DELAY == 1.0
        assert settings.SUBSCRIPTION_MAX_DELAY == 30.0

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("RPC_URL", "http://router.internal/rpc")
        monkeypatch.setenv("RPC_TIMEOUT", "2.5")

        settings = Settings()

        assert settings.RPC_URL == "http://router.internal/rpc"
        assert settings.RPC_TIMEOUT == 2.5


class TestLogRequests:
    """Tests for the request tracing default."""

    @pytest.mark.parametrize(
        "environment, expected",
        [("development", True), ("staging", True), ("production", False), ("PRODUCTION", False)],
    )
    def test_follows_environment(self, environment, expected):
        settings = Settings(ENVIRONMENT=environment, RPC_LOG_REQUESTS=None)
        assert settings.log_requests is expected

    def test_explicit_flag_wins(self):
        assert Settings(ENVIRONMENT="production", RPC_LOG_REQUESTS=True).log_requests is True
        assert Settings(ENVIRONMENT="development", RPC_LOG_REQUESTS=False).log_requests is False

"""Unit tests for engine configuration and environment settings."""

import pytest
from pydantic import ValidationError

from tagoio_engine.fetch.client import ApiRequestEngine
from tagoio_engine.fetch.config import EngineConfig, HostContext
from tagoio_engine.settings import EngineSettings


class TestEngineConfig:
    """Tests for EngineConfig defaults and validation."""

    def test_default_values(self) -> None:
        """Test default engine values."""
        config = EngineConfig()

        assert config.request_timeout_ms == 60_000
        assert config.request_attempts == 5
        assert config.retry_delay_ms == 1_500
        assert config.dedup_poll_ms == 100
        assert config.identity_headers == ("token", "authorization")
        assert config.raw_result_paths == ("/data/export",)
        assert config.request_timeout_seconds == 60.0

    def test_attempts_must_be_positive(self) -> None:
        """Test that at least one attempt is required."""
        with pytest.raises(ValidationError):
            EngineConfig(request_attempts=0)

    def test_retry_delay_longer_than_poll(self) -> None:
        """Test the backoff/poll relationship."""
        with pytest.raises(ValidationError, match="must be longer"):
            EngineConfig(retry_delay_ms=100, dedup_poll_ms=100)

    def test_zero_retry_delay_allowed(self) -> None:
        """Test that retries may be immediate."""
        assert EngineConfig(retry_delay_ms=0).retry_delay_ms == 0

    def test_frozen(self) -> None:
        """Test that config cannot be mutated."""
        config = EngineConfig()

        with pytest.raises(ValidationError):
            config.request_attempts = 3  # type: ignore[misc]

    def test_extra_fields_forbidden(self) -> None:
        """Test that unknown options are rejected."""
        with pytest.raises(ValidationError):
            EngineConfig(max_retries=3)  # type: ignore[call-arg]


class TestEngineSettings:
    """Tests for environment-driven settings."""

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test environment variable names."""
        monkeypatch.setenv("TAGOIO_REQUEST_ATTEMPTS", "3")
        monkeypatch.setenv("TAGOIO_REQUEST_TIMEOUT", "2500")
        monkeypatch.setenv("T_ANALYSIS_CONTEXT", "tago-io")
        monkeypatch.setenv("TAGOIO_API", "https://api.example.com")

        settings = EngineSettings()

        assert settings.request_attempts == 3
        assert settings.request_timeout_ms == 2500
        assert settings.analysis_context == "tago-io"
        assert settings.api_url == "https://api.example.com"

    def test_config_from_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that environment overrides reach the engine config."""
        monkeypatch.setenv("TAGOIO_REQUEST_ATTEMPTS", "2")
        monkeypatch.delenv("TAGOIO_REQUEST_TIMEOUT", raising=False)

        config = EngineConfig.from_settings(EngineSettings(), retry_delay_ms=0)

        assert config.request_attempts == 2
        assert config.request_timeout_ms == 60_000
        assert config.retry_delay_ms == 0

    def test_host_detection(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the vendor marker."""
        monkeypatch.setenv("T_ANALYSIS_CONTEXT", "tago-io")

        host = HostContext.detect()

        assert host.running_at_vendor is True
        assert host.is_browser is False
        assert host.banner() == "(Running at TagoIO)"

    def test_default_engine_uses_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the process-wide engine."""
        monkeypatch.setenv("TAGOIO_REQUEST_ATTEMPTS", "4")
        ApiRequestEngine.reset_instance()
        try:
            engine = ApiRequestEngine.get_instance()

            assert engine.config.request_attempts == 4
            assert ApiRequestEngine.get_instance() is engine
        finally:
            ApiRequestEngine.reset_instance()

"""
Tests for configuration, errors and observability bootstrap.
"""

import pytest

import tracelink
from tracelink.config import ObservabilityConfig
from tracelink.exceptions import ConfigurationError, TracelinkError


def make_config(**overrides) -> ObservabilityConfig:
    cfg = ObservabilityConfig()
    cfg.SERVICE_NAME = "billing"
    cfg.LOG_LEVEL = "INFO"
    cfg.LOG_STRUCTURED = True
    cfg.OTLP_ENDPOINT = "http://collector:4317"
    cfg.CONSOLE_EXPORT = False
    cfg.HEALTH_CHECK_PATH = "/health"
    for key, value in overrides.items():
        setattr(cfg, key, value)
    return cfg


class TestObservabilityConfig:
    """Test configuration validation."""

    def test_valid(self):
        assert make_config().validate() == []

    def test_defaults(self):
        cfg = ObservabilityConfig()
        assert cfg.HEALTH_CHECK_PATH.startswith("/")
        assert isinstance(cfg.LOG_STRUCTURED, bool)

    def test_unknown_level(self):
        issues = make_config(LOG_LEVEL="chatty").validate()
        assert any(issue.startswith("ERROR") and "chatty" in issue for issue in issues)

    def test_missing_service_name(self):
        issues = make_config(SERVICE_NAME="").validate()
        assert any(issue.startswith("ERROR") for issue in issues)

    def test_no_exporter_is_warning(self):
        issues = make_config(OTLP_ENDPOINT="").validate()
        assert len(issues) == 1
        assert issues[0].startswith("WARNING")

    def test_relative_health_path_is_warning(self):
        issues = make_config(HEALTH_CHECK_PATH="health").validate()
        assert issues and issues[0].startswith("WARNING")


class TestExceptions:
    """Test error hierarchy."""

    def test_configuration_error(self):
        err = ConfigurationError("bad level", setting="LOG_LEVEL")
        assert str(err) == "bad level"
        assert err.message == "bad level"
        assert err.setting == "LOG_LEVEL"
        assert isinstance(err, TracelinkError)


class TestInitObservability:
    """Test the bootstrap facade."""

    @pytest.fixture
    def calls(self, monkeypatch):
        calls = {}
        monkeypatch.setattr(tracelink, "configure_logging",
                            lambda **kwargs: calls.setdefault("logging", kwargs))
        monkeypatch.setattr(tracelink, "init_tracing",
                            lambda **kwargs: calls.setdefault("tracing", kwargs) and "tracer")
        return calls

    def test_configures_logging_and_tracing(self, calls):
        result = tracelink.init_observability(make_config())

        assert result == "tracer"
        assert calls["logging"] == {"level": "INFO", "structured": True, "service_name": "billing"}
        assert calls["tracing"]["service_name"] == "billing"
        assert calls["tracing"]["otlp_endpoint"] == "http://collector:4317"
        assert calls["tracing"]["console_export"] is False

    def test_empty_endpoint_means_no_exporter(self, calls):
        tracelink.init_observability(make_config(OTLP_ENDPOINT="", CONSOLE_EXPORT=True))
        assert calls["tracing"]["otlp_endpoint"] is None

    def test_rejects_invalid_config(self, calls):
        with pytest.raises(ConfigurationError) as exc_info:
            tracelink.init_observability(make_config(LOG_LEVEL="chatty"))

        assert "chatty" in str(exc_info.value)
        assert calls == {}

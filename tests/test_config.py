"""Tests for gateway settings."""

import io

import pytest
import structlog

from mcp_gateway.services.config import Settings, configure_logging


class TestSettings:
    def test_defaults_are_valid(self):
        settings = Settings(port=8000, max_sessions=10, log_level="INFO")
        assert settings.validate_server_settings() == []

    @pytest.mark.parametrize(
        "overrides, expected",
        [
            ({"port": 0}, "MCP_PORT"),
            ({"max_sessions": 0}, "MCP_MAX_SESSIONS"),
            ({"log_level": "LOUD"}, "MCP_LOG_LEVEL"),
        ],
    )
    def test_invalid_values_are_reported(self, overrides, expected):
        fields = {"port": 8000, "max_sessions": 10, "log_level": "INFO"}
        fields.update(overrides)
        problems = Settings(**fields).validate_server_settings()
        assert len(problems) == 1
        assert expected in problems[0]

    def test_log_level_is_case_insensitive(self):
        assert Settings(port=1, max_sessions=1, log_level="debug").validate_server_settings() == []

    def test_allowed_origins(self):
        settings = Settings(cors_origins=" http://a.test ,http://b.test,, ")
        assert settings.allowed_origins == ["http://a.test", "http://b.test"]
        assert Settings(cors_origins="*").allowed_origins == ["*"]

    def test_is_production(self):
        assert Settings(env="production").is_production
        assert not Settings(env="development").is_production


def test_configure_logging_writes_to_stream():
    stream = io.StringIO()
    configure_logging("WARNING", stream=stream)
    try:
        logger = structlog.get_logger()
        logger.info("hidden")
        logger.warning("shown", key="value")
    finally:
        structlog.reset_defaults()
    output = stream.getvalue()
    assert "shown" in output
    assert "hidden" not in output

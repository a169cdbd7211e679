"""Tests for settings, the environment guard and observability hooks."""

from unittest.mock import patch

import pytest
import structlog
from structlog.testing import capture_logs

from src.config.settings import Settings, validate_environment
from src.core import observability
from src.core.logging import bind_actor, clear_actor, configure_logging


class TestSettings:
    def test_defaults(self):
        config = Settings(_env_file=None)

        assert config.FLUTTER_ATTACH_TIMEOUT_MS == 15000
        assert config.FLUTTER_SEMANTICS_TIMEOUT_MS == 10000
        assert config.TAB_SETTLE_MS == 150
        assert config.DEFAULT_MAX_TABS == 20
        assert config.viewport == {"width": 1280, "height": 720}

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("E2E_API_URL", "http://api.local:9000/")
        monkeypatch.setenv("HEADLESS", "false")

        config = Settings(_env_file=None)

        assert config.HEADLESS is False
        assert config.api_v1_url == "http://api.local:9000/api/v1"


class TestValidateEnvironment:
    @pytest.mark.parametrize("env", ["local", "development", "test", "TESTING"])
    def test_allowed(self, env):
        validate_environment(Settings(_env_file=None, ENVIRONMENT=env))

    def test_production_environment_rejected(self):
        with pytest.raises(RuntimeError, match="can only run in"):
            validate_environment(Settings(_env_file=None, ENVIRONMENT="production"))

    def test_production_api_rejected(self):
        config = Settings(_env_file=None, ENVIRONMENT="test", E2E_API_URL="https://api.myfitplatform.com")

        with pytest.raises(RuntimeError, match="production API"):
            validate_environment(config)


class TestObservability:
    def test_before_send_drops_connection_errors(self):
        error = ConnectionRefusedError("[Errno 111] Connection refused")
        hint = {"exc_info": (type(error), error, None)}

        assert observability._before_send({"event_id": "1"}, hint) is None

    def test_before_send_keeps_real_failures(self):
        error = AssertionError("adjustment never reached the student")
        event = {"event_id": "2"}

        assert observability._before_send(event, {"exc_info": (type(error), error, None)}) is event

    def test_capture_is_noop_without_dsn(self):
        with patch.object(observability.settings, "GLITCHTIP_DSN", ""):
            with patch("sentry_sdk.capture_exception") as capture:
                assert observability.capture_test_failure("tests/x.py::test", RuntimeError("boom")) is None

        capture.assert_not_called()

    def test_capture_tags_test_id(self):
        with patch.object(observability.settings, "GLITCHTIP_DSN", "https://key@glitchtip.local/1"):
            with patch("sentry_sdk.capture_exception", return_value="evt-1") as capture:
                event_id = observability.capture_test_failure(
                    "tests/e2e/test_cotraining.py::test_join", RuntimeError("boom"), tags={"actor": "trainer"}
                )

        assert event_id == "evt-1"
        capture.assert_called_once()


class TestLogging:
    def test_actor_bound_to_context(self):
        configure_logging("DEBUG", json_logs=True)

        bind_actor("trainer")
        assert structlog.contextvars.get_contextvars()["actor"] == "trainer"

        clear_actor()
        assert "actor" not in structlog.contextvars.get_contextvars()

    def test_level_name_is_case_insensitive(self):
        configure_logging("warning", json_logs=True)
        try:
            with capture_logs() as logs:
                logger = structlog.get_logger("tests.logging")
                logger.info("tab_match")
                logger.warning("pointer_click_failed")
        finally:
            configure_logging()

        assert [entry["event"] for entry in logs] == ["pointer_click_failed"]

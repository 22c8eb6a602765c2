"""Unit tests for scopeguard.observability.logging module."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import pytest

from scopeguard.observability.logging import (
    LoggingConfig,
    LogMode,
    bind_context,
    clear_context,
    configure_logging,
    get_current_config,
    get_logger,
    is_configured,
    log_mode_from_env,
    reset_logging,
    set_console_logging,
    unbind_context,
)


@pytest.fixture(autouse=True)
def reset_logging_state() -> Any:
    """Reset logging state before and after each test."""
    reset_logging()
    set_console_logging(True)
    yield
    reset_logging()
    set_console_logging(True)


def _prod_lines(err: str) -> list[dict[str, Any]]:
    return [json.loads(line) for line in err.strip().splitlines() if line.strip()]


class TestLoggingConfig:
    def test_defaults(self) -> None:
        config = LoggingConfig()

        assert config.mode == LogMode.DEV
        assert config.log_level == "INFO"
        assert config.log_dir == Path.home() / ".scopeguard" / "logs"
        assert config.enable_file_logging is True

    def test_max_log_days_bounds(self) -> None:
        with pytest.raises(ValueError):
            LoggingConfig(max_log_days=0)


class TestModeFromEnv:
    def test_prod(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SCOPEGUARD_LOG_MODE", "prod")

        assert log_mode_from_env() == LogMode.PROD

    def test_unknown_defaults_to_dev(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SCOPEGUARD_LOG_MODE", "verbose")

        assert log_mode_from_env() == LogMode.DEV

    def test_configure_records_env_mode(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SCOPEGUARD_LOG_MODE", "prod")

        configure_logging(LoggingConfig(mode=log_mode_from_env(), enable_file_logging=False))

        config = get_current_config()
        assert config is not None
        assert config.mode == LogMode.PROD


class TestConfigureLogging:
    def test_sets_configured_state(self) -> None:
        configure_logging(LoggingConfig(enable_file_logging=False))

        assert is_configured()

    def test_get_logger_auto_configures(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.setattr(Path, "home", lambda: tmp_path)

        get_logger()

        assert is_configured()


class TestProdOutput:
    def test_json_lines_with_level_and_timestamp(self, capsys: Any) -> None:
        configure_logging(LoggingConfig(mode=LogMode.PROD, enable_file_logging=False))

        get_logger().info("questionnaire.session.started", session_id="s1")

        [entry] = _prod_lines(capsys.readouterr().err)
        assert entry["event"] == "questionnaire.session.started"
        assert entry["level"] == "info"
        assert entry["session_id"] == "s1"
        assert "timestamp" in entry

    def test_level_filtering(self, capsys: Any) -> None:
        configure_logging(
            LoggingConfig(mode=LogMode.PROD, log_level="WARNING", enable_file_logging=False)
        )
        log = get_logger()

        log.info("hidden.event")
        log.warning("shown.event")

        events = [e["event"] for e in _prod_lines(capsys.readouterr().err)]
        assert events == ["shown.event"]

    def test_api_keys_are_masked(self, capsys: Any) -> None:
        configure_logging(LoggingConfig(mode=LogMode.PROD, enable_file_logging=False))

        get_logger().info("config.loaded", api_key="AIzaSecret123456", note="sk-abcdef123456")

        [entry] = _prod_lines(capsys.readouterr().err)
        assert entry["api_key"] == "<REDACTED>"
        assert "abcdef123456" not in entry["note"]

    def test_console_output_can_be_disabled(self, capsys: Any) -> None:
        configure_logging(LoggingConfig(mode=LogMode.PROD, enable_file_logging=False))
        set_console_logging(False)

        get_logger().info("quiet.event")

        assert capsys.readouterr().err == ""


class TestContext:
    def test_bind_and_unbind(self, capsys: Any) -> None:
        configure_logging(LoggingConfig(mode=LogMode.PROD, enable_file_logging=False))
        log = get_logger()

        bind_context(session_id="session_1", phase="questioning")
        log.info("first.event")
        unbind_context("phase")
        log.info("second.event")
        clear_context()
        log.info("third.event")

        first, second, third = _prod_lines(capsys.readouterr().err)
        assert first["session_id"] == "session_1"
        assert first["phase"] == "questioning"
        assert "phase" not in second
        assert second["session_id"] == "session_1"
        assert "session_id" not in third


class TestFileLogging:
    def test_log_file_contains_message(self, tmp_path: Path) -> None:
        configure_logging(LoggingConfig(log_dir=tmp_path, enable_file_logging=True))

        get_logger().info("unique.test.message.12345")
        for handler in logging.getLogger().handlers:
            handler.flush()

        content = (tmp_path / "scopeguard.log").read_text()
        assert "unique.test.message.12345" in content

    def test_no_log_file_when_disabled(self, tmp_path: Path) -> None:
        log_dir = tmp_path / "no_logs"
        configure_logging(LoggingConfig(log_dir=log_dir, enable_file_logging=False))

        get_logger().info("test.no.file")

        assert not log_dir.exists()


class TestResetLogging:
    def test_reset_clears_state(self) -> None:
        configure_logging(LoggingConfig(enable_file_logging=False))

        reset_logging()

        assert not is_configured()
        assert get_current_config() is None

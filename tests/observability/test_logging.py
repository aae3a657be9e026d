"""Tests for structured logging configuration."""

import json
import logging
from collections.abc import Iterator
from unittest.mock import patch

import pytest
import structlog

from interlace.observability.logging import (
    REDACTED_PLACEHOLDER,
    configure_logging,
    get_logger,
    is_debug_mode,
    reset_logging,
    sanitize_for_logging,
)


class ListHandler(logging.Handler):
    """Host-side handler that keeps every record it receives."""

    def __init__(self) -> None:
        super().__init__(logging.DEBUG)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


def _structlog_handlers() -> list[logging.Handler]:
    return [
        h
        for h in logging.getLogger().handlers
        if isinstance(h.formatter, structlog.stdlib.ProcessorFormatter)
    ]


@pytest.fixture
def host_handler() -> Iterator[ListHandler]:
    handler = ListHandler()
    root_logger = logging.getLogger()
    root_logger.addHandler(handler)
    yield handler
    root_logger.removeHandler(handler)


@pytest.fixture(autouse=True)
def _pristine_logging() -> Iterator[None]:
    reset_logging()
    yield
    reset_logging()


class TestGetLogger:
    """get_logger must not configure anything."""

    def test_leaves_root_logger_untouched(self, host_handler: ListHandler) -> None:
        """Test that asking for a logger keeps the host's handlers and level."""
        root_logger = logging.getLogger()
        level_before = root_logger.level
        root_logger.setLevel(logging.ERROR)
        handlers_before = list(root_logger.handlers)
        try:
            get_logger("interlace.dispatch.engine").error("interlace.test.event")

            assert root_logger.handlers == handlers_before
            assert root_logger.level == logging.ERROR
            assert host_handler in root_logger.handlers
        finally:
            root_logger.setLevel(level_before)

    def test_events_follow_host_handlers_and_levels(self) -> None:
        host = ListHandler()
        stdlib_logger = logging.getLogger("interlace.tests.host")
        stdlib_logger.addHandler(host)
        stdlib_logger.setLevel(logging.INFO)
        try:
            logger = get_logger("interlace.tests.host")
            logger.debug("interlace.test.hidden")
            logger.info("interlace.test.shown", channel="/menu")
        finally:
            stdlib_logger.removeHandler(host)
            stdlib_logger.setLevel(logging.NOTSET)

        assert len(host.records) == 1
        assert "interlace.test.shown" in host.records[0].getMessage()


class TestConfigureLogging:
    """Tests for configure_logging and reset_logging."""

    def test_keeps_host_handlers(self, host_handler: ListHandler) -> None:
        """Test that a handler installed before configure_logging survives it."""
        configure_logging(log_format="console", log_level="INFO", force=True)

        assert host_handler in logging.getLogger().handlers
        assert len(_structlog_handlers()) == 1

    def test_repeated_force_installs_one_handler(self, host_handler: ListHandler) -> None:
        """Test that reconfiguring swaps its own handler instead of stacking them."""
        baseline = len(logging.getLogger().handlers)

        configure_logging(log_format="console", log_level="INFO", force=True)
        configure_logging(log_format="json", log_level="DEBUG", force=True)
        configure_logging(log_format="json", log_level="WARNING", force=True)

        assert len(logging.getLogger().handlers) == baseline + 1
        assert len(_structlog_handlers()) == 1
        assert host_handler in logging.getLogger().handlers

    def test_respects_log_level(self) -> None:
        configure_logging(log_format="console", log_level="WARNING", force=True)

        assert logging.getLogger().level == logging.WARNING

    def test_without_force_is_noop(self) -> None:
        """Test that a second call without force keeps the first configuration."""
        configure_logging(log_format="console", log_level="DEBUG", force=True)
        configure_logging(log_format="json", log_level="ERROR")

        assert logging.getLogger().level == logging.DEBUG

    def test_reads_environment_and_stamps_service(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test that INTERLACE_* variables pick format, level and service name."""
        with patch.dict(
            "os.environ",
            {
                "INTERLACE_LOG_FORMAT": "json",
                "INTERLACE_LOG_LEVEL": "error",
                "INTERLACE_SERVICE_NAME": "env-service",
            },
        ):
            configure_logging(force=True)

        logger = get_logger("interlace.tests.env")
        logger.warning("interlace.test.filtered")
        logger.error("interlace.test.kept", channel="/menu")

        lines = [line for line in capsys.readouterr().out.splitlines() if line.strip()]
        assert logging.getLogger().level == logging.ERROR
        assert len(lines) == 1
        event = json.loads(lines[0])
        assert event["event"] == "interlace.test.kept"
        assert event["service"] == "env-service"
        assert event["channel"] == "/menu"

    def test_reset_restores_host_level(self, host_handler: ListHandler) -> None:
        root_logger = logging.getLogger()
        level_before = root_logger.level
        root_logger.setLevel(logging.ERROR)
        try:
            configure_logging(log_format="console", log_level="DEBUG", force=True)
            reset_logging()

            assert root_logger.level == logging.ERROR
            assert _structlog_handlers() == []
            assert host_handler in root_logger.handlers
        finally:
            root_logger.setLevel(level_before)


class TestSanitizeForLogging:
    """Tests for redaction of sensitive context values."""

    def test_plain_values_pass_through(self) -> None:
        data = {"origFile": "a.svg", "processInstanceId": 3}
        assert sanitize_for_logging(data) == data

    def test_sensitive_keys_are_redacted(self) -> None:
        """Test that secret-like keys are redacted whatever their case."""
        result = sanitize_for_logging({"auth_token": "abc", "Password": "p", "apiKey": "k"})
        assert set(result.values()) == {REDACTED_PLACEHOLDER}

    def test_nested_structures(self) -> None:
        result = sanitize_for_logging(
            {"session": {"secret": "s", "user": "u"}, "items": [{"token": "t"}, "plain"]}
        )
        assert result == {
            "session": {"secret": REDACTED_PLACEHOLDER, "user": "u"},
            "items": [{"token": REDACTED_PLACEHOLDER}, "plain"],
        }

    def test_empty(self) -> None:
        assert sanitize_for_logging({}) == {}

    def test_input_is_not_mutated(self) -> None:
        # The engine logs a snapshot; the live context must stay intact
        data = {"token": "t"}
        sanitize_for_logging(data)
        assert data == {"token": "t"}


class TestDebugMode:
    """Tests for INTERLACE_DEBUG."""

    def test_enabled(self) -> None:
        with patch.dict("os.environ", {"INTERLACE_DEBUG": "true"}):
            assert is_debug_mode() is True

    def test_disabled_by_default(self) -> None:
        with patch.dict("os.environ", {}, clear=True):
            assert is_debug_mode() is False

    def test_unrecognized_value(self) -> None:
        """Test that only the documented truthy spellings enable debug mode."""
        with patch.dict("os.environ", {"INTERLACE_DEBUG": "maybe"}):
            assert is_debug_mode() is False

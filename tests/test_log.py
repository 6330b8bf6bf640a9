"""
Tests for the redacting log sink.

Tests cover:
- Messages and %-style arguments are redacted before handlers see them
- Exception and stack text are redacted
- A record is redacted exactly once across several handlers
- get_logger() wiring, including a log file added by a later call, and level names
"""

import logging

import pytest

from rosa_redaction import MASK, RedactionEngine
from rosa_redaction.log import REDACTED_ATTR, RedactingFilter, get_logger, parse_level


class ListHandler(logging.Handler):
    """Keep formatted records in memory."""

    def __init__(self):
        super().__init__()
        self.messages = []

    def emit(self, record):
        self.messages.append(self.format(record))


class CountingEngine(RedactionEngine):
    """Engine that counts how often it is asked to redact."""

    def __init__(self):
        super().__init__()
        self.calls = 0

    def redact(self, text):
        self.calls += 1
        return super().redact(text)


@pytest.fixture
def sink():
    logger = logging.getLogger("rosa_redaction.tests.sink")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    handler = ListHandler()
    handler.addFilter(RedactingFilter())
    logger.addHandler(handler)
    yield logger, handler
    logger.removeHandler(handler)
    logger.propagate = True


class TestRedactingFilter:
    """Test suite for RedactingFilter."""

    def test_message_redacted(self, sink):
        """Should redact the message text."""
        logger, handler = sink
        logger.info('API error: {"password":"hunter2"}')

        assert handler.messages == ['API error: {"password":"' + MASK + '"}']

    def test_format_arguments_redacted(self, sink):
        """Should redact secrets that only appear in the %-arguments."""
        logger, handler = sink
        logger.info("Running: rosa login --client-secret %s", "abcdef123")

        assert handler.messages == [f"Running: rosa login --client-secret {MASK}"]

    def test_exception_text_redacted(self, sink):
        """Should redact the traceback text of logged exceptions."""
        logger, handler = sink
        try:
            raise RuntimeError("create failed for arn:aws:iam::123456789012:role/x")
        except RuntimeError:
            logger.exception("command failed")

        assert len(handler.messages) == 1
        assert "123456789012" not in handler.messages[0]
        assert f"arn:aws:iam::{MASK}:role/x" in handler.messages[0]

    def test_clean_message_unchanged(self, sink):
        logger, handler = sink
        logger.debug("Machine pool '%s' created", "np-1")

        assert handler.messages == ["Machine pool 'np-1' created"]

    def test_record_redacted_once(self):
        """Should skip records another filter already redacted."""
        engine = CountingEngine()
        first = RedactingFilter(engine)
        second = RedactingFilter(engine)
        record = logging.LogRecord(
            "rosa", logging.INFO, __file__, 1, "--password %s", ("hunter2",), None
        )

        assert first.filter(record) is True
        assert second.filter(record) is True

        assert engine.calls == 1
        assert getattr(record, REDACTED_ATTR) is True
        assert record.getMessage() == f"--password {MASK}"

    def test_stack_info_redacted(self):
        """Should redact the stack text attached with stack_info=True."""
        record = logging.LogRecord(
            "rosa", logging.INFO, __file__, 1, "checkpoint", None, None,
            sinfo='Stack (most recent call last):\n  login(args="--password hunter2 -y")\n',
        )

        RedactingFilter().filter(record)

        assert "hunter2" not in record.stack_info
        assert f'login(args="--password {MASK} -y")' in record.stack_info

    def test_logged_stack_info_redacted(self, sink):
        """Should redact source lines quoted in the formatted stack."""
        logger, handler = sink
        logger.info("checkpoint", stack_info=True)  # rosa login --password=hunter2

        assert "Stack (most recent call last)" in handler.messages[0]
        assert "hunter2" not in handler.messages[0]
        assert f"--password={MASK}" in handler.messages[0]


class TestGetLogger:
    """Test suite for get_logger()."""

    @pytest.fixture
    def logger_name(self):
        name = "rosa_redaction.tests.get_logger"
        yield name
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.propagate = True
        logger.setLevel(logging.NOTSET)

    def test_writes_redacted_file(self, logger_name, tmp_path):
        """Should only write redacted text to the log file."""
        log_file = tmp_path / "rosa.log"
        logger = get_logger(logger_name, level="DEBUG", log_file=str(log_file))

        logger.debug("rosa create idp --users admin:Sup3rS3cret")
        for handler in logger.handlers:
            handler.flush()

        content = log_file.read_text(encoding="utf-8")
        assert "Sup3rS3cret" not in content
        assert f"--users admin:{MASK}" in content
        assert "DEBUG" in content

    def test_handlers_not_duplicated(self, logger_name):
        """Should not add handlers again on repeated calls."""
        logger = get_logger(logger_name, level="INFO")
        count = len(logger.handlers)

        assert get_logger(logger_name) is logger
        assert len(logger.handlers) == count
        assert logger.level == logging.INFO

    def test_later_call_adds_log_file(self, logger_name, tmp_path):
        """Should attach a file handler requested after the first call."""
        log_file = tmp_path / "later.log"
        logger = get_logger(logger_name, level="INFO")
        count = len(logger.handlers)

        get_logger(logger_name, log_file=str(log_file))
        get_logger(logger_name, log_file=str(log_file))
        logger.info("rosa login --client-secret abcdef123")
        for handler in logger.handlers:
            handler.flush()

        assert len(logger.handlers) == count + 1
        content = log_file.read_text(encoding="utf-8")
        assert "abcdef123" not in content
        assert f"--client-secret {MASK}" in content


class TestParseLevel:
    @pytest.mark.parametrize(
        "name,level",
        [
            ("INFO", logging.INFO),
            ("debug", logging.DEBUG),
            ("WARN", logging.WARNING),
            ("warning", logging.WARNING),
            ("ERROR", logging.ERROR),
            ("FATAL", logging.CRITICAL),
            (logging.ERROR, logging.ERROR),
        ],
    )
    def test_known_levels(self, name, level):
        assert parse_level(name) == level

    def test_unknown_level(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            parse_level("LOUD")

"""
Redacting log sink for the test harness.

Every message that reaches a handler carrying RedactingFilter has been passed
through the RedactionEngine exactly once, whatever its format arguments were.
"""

import logging
import os
import sys
from typing import Optional, Union

from .engine import RedactionEngine, get_default_engine

INFO = "INFO"
DEBUG = "DEBUG"
FATAL = "FATAL"
WARN = "WARN"
ERROR = "ERROR"

LEVELS = {
    INFO: logging.INFO,
    DEBUG: logging.DEBUG,
    FATAL: logging.CRITICAL,
    WARN: logging.WARNING,
    ERROR: logging.ERROR,
}

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Set on a record once its message has been redacted.
REDACTED_ATTR = "rosa_redacted"


def parse_level(name: Union[str, int]) -> int:
    """Map a level name such as 'WARN' (or a logging int) to a logging level."""
    if isinstance(name, int):
        return name
    key = name.strip().upper()
    if key == "WARNING":
        key = WARN
    if key not in LEVELS:
        raise ValueError(f"Unknown log level '{name}', expected one of {', '.join(LEVELS)}")
    return LEVELS[key]


class RedactingFilter(logging.Filter):
    """Replace the message of each record with its redacted form."""

    def __init__(self, engine: Optional[RedactionEngine] = None, name: str = ""):
        super().__init__(name)
        self._engine = engine

    @property
    def engine(self) -> RedactionEngine:
        return self._engine or get_default_engine()

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, REDACTED_ATTR, False):
            return True
        # Format once so secrets passed as %-args are covered too.
        record.msg, _ = self.engine.redact(record.getMessage())
        record.args = None
        if record.exc_info and not record.exc_text:
            record.exc_text = logging.Formatter().formatException(record.exc_info)
        if record.exc_text:
            record.exc_text, _ = self.engine.redact(record.exc_text)
        if record.stack_info:
            record.stack_info, _ = self.engine.redact(record.stack_info)
        setattr(record, REDACTED_ATTR, True)
        return True


def get_logger(
    name: str = "rosa",
    level: Union[str, int, None] = None,
    log_file: Optional[str] = None,
    engine: Optional[RedactionEngine] = None,
) -> logging.Logger:
    """
    Return a logger whose handlers only ever see redacted text.

    Args:
        name: Logger name.
        level: Level name (INFO, DEBUG, WARN, ERROR, FATAL) or logging int.
        log_file: Also append to this file when given. A later call with a
                  new file adds a handler for it.
        engine: Engine to redact with; the default engine when omitted.
                Only used by the call that first attaches the redacting
                handlers; later handlers share the existing filter.
    """
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(parse_level(level))

    redacting = next(
        (f for h in logger.handlers for f in h.filters if isinstance(f, RedactingFilter)),
        None,
    )
    handlers: list[logging.Handler] = []
    if redacting is None:
        redacting = RedactingFilter(engine)
        handlers.append(logging.StreamHandler(sys.stderr))
    if log_file and not any(
        isinstance(h, logging.FileHandler) and h.baseFilename == os.path.abspath(log_file)
        for h in logger.handlers
    ):
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(redacting)
        logger.addHandler(handler)
    logger.propagate = False

    return logger

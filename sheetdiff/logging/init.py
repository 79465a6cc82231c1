from __future__ import annotations

import logging
import sys

"""Logging initialization with labeled prefixes.

Every line is written to stdout as ``<LABEL> <message>`` where LABEL is one of
INFO|WARN|ERROR|SUMMARY (plus DEBUG when --debug is given). Modules log through
``logging.getLogger(__name__)``; since they live under the ``sheetdiff``
package their records propagate to the logger configured here.
"""

__all__ = [
    "LOGGER_NAME",
    "SUMMARY_LEVEL",
    "LabeledFormatter",
    "setup_logging",
    "get_logger",
    "log_summary",
    "reset_logging",
]

LOGGER_NAME = "sheetdiff"

# Custom SUMMARY level (between INFO=20 and WARNING=30)
SUMMARY_LEVEL = 25

_logger: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """Formatter producing ``LABEL message`` lines."""

    LEVEL_LABELS = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        logging.WARNING: "WARN",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
        SUMMARY_LEVEL: "SUMMARY",
    }

    def format(self, record: logging.LogRecord) -> str:
        level_label = self.LEVEL_LABELS.get(record.levelno, record.levelname)
        return f"{level_label} {record.getMessage()}"


def setup_logging(debug: bool = False) -> logging.Logger:
    """Configure the package logger (idempotent).

    Args:
        debug: Lower the logger and handler level to DEBUG.

    Returns:
        The ``sheetdiff`` logger.
    """
    global _logger

    level = logging.DEBUG if debug else logging.INFO
    if _logger is not None:
        # 再呼び出し時はレベルのみ更新
        _logger.setLevel(level)
        for h in _logger.handlers:
            h.setLevel(level)
        return _logger

    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    # stream は呼び出し時点の sys.stdout (pytest capsys 対応)
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)

    # Prevent propagation to root logger to avoid duplicate output
    logger.propagate = False

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    """Return the configured package logger, configuring it on first use."""
    if _logger is None:
        return setup_logging()
    return _logger


def log_summary(message: str) -> None:
    """Log a message at SUMMARY level."""
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Reset the global logger state. Mainly for testing purposes."""
    global _logger
    if _logger is not None:
        for handler in _logger.handlers[:]:
            _logger.removeHandler(handler)
        _logger.propagate = True
        _logger.setLevel(logging.NOTSET)
    _logger = None

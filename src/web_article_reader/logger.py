"""Logging helpers.

The library logs through a single namespaced logger and never configures
handlers on import. Call :func:`setup_logging` from an application to get one
JSON object per line, including the ``extra`` fields passed at each call site.
"""

import json
import logging
import sys

LOGGER_NAME = "web_article_reader"

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render a record and its ``extra`` fields as a JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Return the package logger, or a child of it.

    Args:
        name: Optional child name, e.g. ``"transport"``

    Returns:
        Logger under the ``web_article_reader`` namespace
    """
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    if name:
        return logger.getChild(name)
    return logger


def setup_logging(level: int | str = logging.INFO, stream=None) -> logging.Logger:
    """
    Attach a JSON handler to the package logger.

    Calling it again replaces the handler instead of adding a second one.

    Args:
        level: Logging level for the package logger
        stream: Output stream, defaults to stderr

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if getattr(handler, "_web_article_reader", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JsonFormatter())
    handler._web_article_reader = True
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger

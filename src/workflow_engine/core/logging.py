"""Logging setup for workflow-engine.

All modules obtain their logger through get_logger() so that a single
handler, installed once per process by configure_logging(), controls the
output of the runner, the command builders and the pipelines.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, MutableMapping, Optional, TextIO, Tuple, Union

ROOT_LOGGER_NAME = "workflow_engine"

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LoggerLike = Union[logging.Logger, logging.LoggerAdapter]

_handler: Optional[logging.Handler] = None


class ContextLogger(logging.LoggerAdapter):
    """Logger that appends key=value context to each message."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        context = " ".join(f"{k}={v}" for k, v in (self.extra or {}).items())
        if context:
            msg = f"{msg} {context}"
        return msg, kwargs

    def bind(self, **context: Any) -> "ContextLogger":
        """Return a new ContextLogger with additional context."""
        return ContextLogger(self.logger, {**(self.extra or {}), **context})


def get_logger(name: str) -> logging.Logger:
    """Return a logger below the workflow_engine namespace.

    Args:
        name: Usually ``__name__`` of the calling module.

    Returns:
        Logger instance.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def get_context_logger(name: str, **context: Any) -> ContextLogger:
    """Return a logger that tags every message with ``context``."""
    return ContextLogger(get_logger(name), context)


def configure_logging(
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """Configure the workflow_engine logger.

    Safe to call more than once; the handler is replaced rather than
    duplicated. Level precedence is debug > verbose > quiet > default.

    Args:
        debug: Enable debug logging.
        verbose: Enable info-level logging.
        quiet: Only log errors.
        stream: Output stream for log records (default: stderr).

    Returns:
        The configured root logger of the package.
    """
    global _handler

    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    logger = logging.getLogger(ROOT_LOGGER_NAME)

    if _handler is not None:
        logger.removeHandler(_handler)

    _handler = logging.StreamHandler(stream or sys.stderr)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(_handler)
    logger.setLevel(level)

    return logger


def flush_logging() -> None:
    """Flush every handler attached to the workflow_engine logger."""
    for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
        handler.flush()

"""Opt-in logging setup for the ``midi_stream`` package logger.

The package itself only installs a :class:`logging.NullHandler`, so nothing is
printed unless the embedding application configures logging.  Callers who
want to trace the decoder (header and track progress, suspensions, failures)
can attach a handler here instead of touching the root logger.

Repeated calls are idempotent: the managed handler is tagged and replaced
rather than duplicated, which keeps test runs and REPL sessions quiet.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import IO

PACKAGE_LOGGER = "midi_stream"
_HANDLER_TAG = "_midi_stream_logging_handler"
_HANDLER: logging.Handler | None = None


class LogVerbosity(str, Enum):
    """Verbosity levels supported by the decoder log handler."""

    DISABLED = "disabled"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    VERBOSE = "verbose"


_VERBOSITY_LEVELS: dict[LogVerbosity, int] = {
    LogVerbosity.DISABLED: logging.CRITICAL + 1,
    LogVerbosity.ERROR: logging.ERROR,
    LogVerbosity.WARNING: logging.WARNING,
    LogVerbosity.INFO: logging.INFO,
    LogVerbosity.VERBOSE: logging.DEBUG,
}

_DEFAULT_VERBOSITY = LogVerbosity.WARNING
_CURRENT_VERBOSITY = _DEFAULT_VERBOSITY


def enable_decoder_logging(
    verbosity: LogVerbosity | str = _DEFAULT_VERBOSITY,
    *,
    stream: IO[str] | None = None,
) -> logging.Handler:
    """Attach a stream handler to the package logger and return it.

    Parameters
    ----------
    verbosity:
        Minimum severity emitted by the handler.
    stream:
        Destination for log records; defaults to ``sys.stderr``.
    """

    global _HANDLER

    verbosity = _coerce_verbosity(verbosity)
    logger = logging.getLogger(PACKAGE_LOGGER)
    if _HANDLER is not None:
        logger.removeHandler(_HANDLER)
        _HANDLER.close()

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)s [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    setattr(handler, _HANDLER_TAG, True)
    logger.addHandler(handler)
    _HANDLER = handler
    set_log_verbosity(verbosity)
    return handler


def set_log_verbosity(verbosity: LogVerbosity | str) -> None:
    """Adjust the minimum severity recorded for the package logger."""

    global _CURRENT_VERBOSITY

    verbosity = _coerce_verbosity(verbosity)
    _CURRENT_VERBOSITY = verbosity
    level = _VERBOSITY_LEVELS[verbosity]
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)
    if _HANDLER is not None:
        _HANDLER.setLevel(level)


def get_log_verbosity() -> LogVerbosity:
    """Return the current verbosity level for the package logger."""

    return _CURRENT_VERBOSITY


def _coerce_verbosity(verbosity: LogVerbosity | str) -> LogVerbosity:
    if isinstance(verbosity, LogVerbosity):
        return verbosity
    try:
        return LogVerbosity(str(verbosity).lower())
    except ValueError as exc:
        raise ValueError(f"Unsupported log verbosity: {verbosity}") from exc


def _reset_for_tests() -> None:
    """Remove the handler installed by :func:`enable_decoder_logging`."""

    global _HANDLER, _CURRENT_VERBOSITY

    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_TAG, False):
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(logging.NOTSET)
    _HANDLER = None
    _CURRENT_VERBOSITY = _DEFAULT_VERBOSITY


__all__ = [
    "LogVerbosity",
    "PACKAGE_LOGGER",
    "enable_decoder_logging",
    "get_log_verbosity",
    "set_log_verbosity",
]

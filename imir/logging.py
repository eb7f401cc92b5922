"""femtologging integration for imir.

Every module obtains its logger through :func:`get_logger` and emits
pre-formatted messages through the ``log_*`` helpers, so interpolation happens
once in the calling thread rather than in the femtologging worker.

Example:
>>> from imir.logging import get_logger, log_info
>>> logger = get_logger(__name__)
>>> log_info(logger, "Discovered %d repositories", 3)

"""

from __future__ import annotations

import enum
import typing as typ

from femtologging import basicConfig, get_logger

DEFAULT_LOG_LEVEL = "INFO"


class LogLevel(enum.StrEnum):
    """Log levels accepted by femtologging."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def normalize_log_level(level: str | None) -> tuple[str, bool]:
    """Return ``(normalized_level, invalid)`` for a raw level string.

    Unknown or empty values fall back to ``INFO`` and set the ``invalid``
    flag so callers can warn about the misconfiguration.
    """
    candidate = (level or "").strip().upper()
    if candidate in LogLevel.__members__:
        return (candidate, False)
    return (DEFAULT_LOG_LEVEL, True)


def configure_logging(level: str | None, *, force: bool = False) -> tuple[str, bool]:
    """Configure the femtologging root handler.

    Parameters
    ----------
    level : str | None
        Raw log level, typically from ``IMIR_LOG_LEVEL`` or ``--log-level``.
    force : bool, optional
        Replace any handler configuration installed earlier.

    Returns
    -------
    tuple[str, bool]
        The level actually applied and whether the input was invalid.

    """
    normalized, invalid = normalize_log_level(level)
    basicConfig(level=normalized, force=force)
    return (normalized, invalid)


def format_log_message(template: str, *args: object) -> str:
    """Interpolate ``args`` into a percent-style ``template``."""
    if not args:
        return template
    return template % args


class _SupportsLog(typ.Protocol):
    """Subset of the femtologging logger API used by the helpers."""

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str | None: ...


def _emit(
    logger: _SupportsLog,
    level: LogLevel,
    template: str,
    args: tuple[object, ...],
    exc_info: object | None,
) -> None:
    logger.log(
        level.value,
        format_log_message(template, *args),
        exc_info=exc_info,
        stack_info=False,
    )


def log_debug(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log a DEBUG message with percent-style formatting."""
    _emit(logger, LogLevel.DEBUG, template, args, exc_info)


def log_info(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log an INFO message with percent-style formatting."""
    _emit(logger, LogLevel.INFO, template, args, exc_info)


def log_warning(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log a WARNING message with percent-style formatting."""
    _emit(logger, LogLevel.WARNING, template, args, exc_info)


def log_error(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log an ERROR message with percent-style formatting."""
    _emit(logger, LogLevel.ERROR, template, args, exc_info)


def log_exception(logger: _SupportsLog, message: str, exc: BaseException) -> None:
    """Log ``message`` at ERROR with ``exc`` attached as ``exc_info``."""
    logger.log(LogLevel.ERROR.value, message, exc_info=exc, stack_info=False)


__all__ = [
    "LogLevel",
    "configure_logging",
    "format_log_message",
    "get_logger",
    "log_debug",
    "log_error",
    "log_exception",
    "log_info",
    "log_warning",
    "normalize_log_level",
]

"""Logging helpers for qtomo.

Every module obtains its logger through :func:`get_logger`, which hands out
cached loggers under the ``qtomo.`` namespace with a single stderr handler.
Solvers report diagnostics at DEBUG level, so nothing is printed unless the
level is lowered with :func:`set_log_level` or :func:`configure_logging`.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

_DEFAULT_LEVEL = logging.WARNING
_DEFAULT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"

_loggers: dict[str, logging.Logger] = {}

# Handler settings applied to loggers created after configure_logging().
_format: str = _DEFAULT_FORMAT
_stream: Optional[object] = None


def _resolve_level(level: int | str) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.WARNING)
    return level


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the cached qtomo logger for ``name``.

    Args:
        name: Module name, usually ``__name__``. Names outside the ``qtomo``
            namespace are prefixed with ``qtomo.``. ``None`` returns the
            package logger.

    Returns:
        A configured :class:`logging.Logger` that does not propagate to the
        root logger.

    Example:
        >>> from qtomo.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.debug("projector converged")
    """
    if name is None:
        name = "qtomo"
    if name != "qtomo" and not name.startswith("qtomo."):
        name = f"qtomo.{name}"

    if name in _loggers:
        return _loggers[name]

    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.setLevel(_DEFAULT_LEVEL)
        handler = logging.StreamHandler(_stream if _stream is not None else sys.stderr)
        handler.setLevel(_DEFAULT_LEVEL)
        handler.setFormatter(logging.Formatter(_format))
        logger.addHandler(handler)
        logger.propagate = False

    _loggers[name] = logger
    return logger


def set_log_level(level: int | str) -> None:
    """Set the level of every qtomo logger, including ones created later.

    Args:
        level: A :mod:`logging` level or its name (``"DEBUG"``, ``"INFO"``...).
    """
    global _DEFAULT_LEVEL
    level = _resolve_level(level)

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)

    _DEFAULT_LEVEL = level


def configure_logging(
    level: int | str = logging.WARNING,
    format_string: Optional[str] = None,
    stream: Optional[object] = None,
) -> None:
    """Replace the handlers of all qtomo loggers.

    Intended to be called once by applications that want solver diagnostics,
    e.g. ``configure_logging(level="DEBUG")`` before a tomography run.

    Args:
        level: Logging level (default WARNING).
        format_string: Record format; defaults to ``[LEVEL] name: message``.
        stream: Output stream, ``sys.stderr`` when omitted.
    """
    global _DEFAULT_LEVEL, _format, _stream
    level = _resolve_level(level)
    _format = format_string or _DEFAULT_FORMAT
    _stream = stream
    formatter = logging.Formatter(_format)

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    _DEFAULT_LEVEL = level


__all__ = ["get_logger", "set_log_level", "configure_logging"]

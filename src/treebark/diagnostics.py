"""Diagnostics sink for render problems.

Every render owns one ``Diagnostics`` instance. Fatal errors and warnings are
recorded on it and forwarded to the caller's logger, which outlives the
render. Any object with an ``error(message)`` method can serve as logger;
``warn`` and ``log`` are used when present.

The default logger, ``LoggingLogger``, forwards to the standard library
``logging`` module under the ``treebark`` logger name, so applications
control output with ordinary logging configuration.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from treebark.errors import Severity, TreebarkError

logger = logging.getLogger("treebark")


@runtime_checkable
class Logger(Protocol):
    """Minimal logger interface accepted by the render functions."""

    def error(self, message: str) -> None: ...


class LoggingLogger:
    """Logger adapter over ``logging.Logger`` exposing ``error``/``warn``/``log``.

    Args:
        target: Logger to forward to (default: the ``treebark`` logger)
    """

    __slots__ = ("_target",)

    def __init__(self, target: logging.Logger | None = None):
        self._target = target or logger

    def error(self, message: str) -> None:
        self._target.error(message)

    def warn(self, message: str) -> None:
        self._target.warning(message)

    def log(self, message: str) -> None:
        self._target.info(message)


class Diagnostics:
    """Per-render collector that routes errors by severity.

    Fatal errors go to ``logger.error``. Warnings go to ``logger.warn`` if
    the logger has one, otherwise to ``logger.error``.

    Attributes:
        errors: Fatal errors reported during the render, in order
        warnings: Recoverable problems reported during the render, in order

    Example:
        >>> from treebark.errors import TagNotAllowedError
        >>> diagnostics = Diagnostics()
        >>> diagnostics.report(TagNotAllowedError("script"))
        >>> [e.tag for e in diagnostics.errors]
        ['script']
    """

    __slots__ = ("logger", "errors", "warnings")

    def __init__(self, logger: Logger | None = None):
        self.logger = logger if logger is not None else LoggingLogger()
        self.errors: list[TreebarkError] = []
        self.warnings: list[TreebarkError] = []

    def report(self, error: TreebarkError) -> None:
        """Record an error and forward it to the logger."""
        message = error.format_compact()
        if error.severity is Severity.WARNING:
            self.warnings.append(error)
            warn = getattr(self.logger, "warn", None)
            if callable(warn):
                warn(message)
                return
        else:
            self.errors.append(error)
        self.logger.error(message)

    def log(self, message: str) -> None:
        """Forward an informational message, if the logger accepts them."""
        log = getattr(self.logger, "log", None)
        if callable(log):
            log(message)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

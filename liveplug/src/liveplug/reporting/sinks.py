from __future__ import annotations

import logging

_SEVERITY_LEVELS = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
}


class LoggingErrorSink:
    """
    ErrorSink that writes plugin errors to a logger.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("liveplug.errors")

    def display(self, title: str, message: str, severity: str = "error") -> None:
        level = _SEVERITY_LEVELS.get(severity, logging.ERROR)
        self._logger.log(level, "%s\n%s", title, message)

"""
Diagnostic capture — warnings, errors and exceptions logged anywhere in the
process become session log entries.

Records may arrive on any thread (upload workers, host threads); they are
handed to the main loop so the aggregator is only touched there.
"""

import logging

from .constants import (
    SEVERITY_ASSERT, SEVERITY_ERROR, SEVERITY_EXCEPTION, SEVERITY_LOG, SEVERITY_WARNING,
)

_formatter = logging.Formatter()


def severity_for(record):
    exc_type = record.exc_info[0] if record.exc_info else None
    if exc_type is not None and issubclass(exc_type, AssertionError):
        return SEVERITY_ASSERT
    if record.exc_info:
        return SEVERITY_EXCEPTION
    if record.levelno >= logging.ERROR:
        return SEVERITY_ERROR
    if record.levelno >= logging.WARNING:
        return SEVERITY_WARNING
    return SEVERITY_LOG


class DiagnosticCapture(logging.Handler):

    def __init__(self, aggregator, loop, level=logging.WARNING):
        super().__init__(level)
        self._aggregator = aggregator
        self._loop = loop

    def emit(self, record):
        try:
            trace = ""
            if record.exc_info:
                trace = _formatter.formatException(record.exc_info)
            elif record.stack_info:
                trace = record.stack_info
            self._loop.call(
                self._aggregator.capture_diagnostic,
                severity_for(record), record.getMessage(), trace,
            )
        except Exception:
            self.handleError(record)


def install(aggregator, loop, logger=None):
    """Attach a capture handler (root logger by default). Returns the handler."""
    handler = DiagnosticCapture(aggregator, loop)
    (logger or logging.getLogger()).addHandler(handler)
    return handler


def uninstall(handler, logger=None):
    (logger or logging.getLogger()).removeHandler(handler)

"""
Logging redaction helpers.
Redacts service keys and bearer tokens from log messages.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable


_PATTERNS: Iterable[tuple[re.Pattern, str]] = (
    # Authorization: Bearer <token>
    (re.compile(r"(Bearer\s+)([A-Za-z0-9\-\._]+)"), r"\1[REDACTED]"),
    # apikey header / query value sent to the REST gateway
    (re.compile(r"(?i)(apikey|api[_-]?key)\s*[:=]\s*['\"]?([A-Za-z0-9\-\._]+)"), r"\1=[REDACTED]"),
    # service_role / service key in config dumps
    (re.compile(r"(?i)(service[_-]?(role|key))\s*[:=]\s*['\"]?([A-Za-z0-9\-\._]+)"), r"\1=[REDACTED]"),
)


def redact_message(message: str) -> str:
    redacted = message
    for pattern, replacement in _PATTERNS:
        redacted = pattern.sub(replacement, redacted)
    return redacted


class RedactingFilter(logging.Filter):
    """Filter that redacts sensitive data from log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            # Malformed format args; let the handler report it
            return True
        record.msg = redact_message(message)
        record.args = ()
        return True


def install_redaction_filter(handler: logging.Handler) -> None:
    """
    Attach the filter to a handler.

    Logger filters are skipped for records propagated from child loggers;
    handler filters see every record the handler emits.
    """
    # Avoid duplicate filters
    for existing in handler.filters:
        if isinstance(existing, RedactingFilter):
            return
    handler.addFilter(RedactingFilter())

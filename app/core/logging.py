"""Logging configuration for the OAuth client.

Two output formats, chosen by LOG_JSON:

  _ContainerFormatter — one human-readable line per record, for a terminal.
  _JsonFormatter      — JSON Lines for a log aggregator, with the request
                        context fields as top-level keys.

Everything goes to stdout.  The OAuth flow logs each step with an
``OAUTH FLOW [authorize|callback|exchange]`` prefix so one login can be
followed end to end by filtering on the request ID.

What is never logged: the client secret, authorization codes, access or
refresh tokens.  tests/api/test_log_secrets.py enforces this; the redaction
filter is a last line for the client secret, which is the only one of those
known at startup.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterable
from contextvars import ContextVar
from datetime import UTC, datetime

# Set by RequestContextMiddleware; read by the filter below.
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

REDACTED = "***"


def _utc_timestamp(record: logging.LogRecord) -> str:
    return datetime.fromtimestamp(record.created, UTC).isoformat(timespec="milliseconds")


class _RequestContextFilter(logging.Filter):
    """Copy the current request ID onto every LogRecord.

    Attached to the handler, not the root logger: logger-level filters do not
    run for records propagated up from child loggers.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = request_id_var.get("-")  # type: ignore[attr-defined]
        return True


class _RedactFilter(logging.Filter):
    """Replace known secret values in the rendered message."""

    def __init__(self, secrets: Iterable[str]) -> None:
        super().__init__()
        self._secrets = tuple(s for s in secrets if s)

    def filter(self, record: logging.LogRecord) -> bool:
        if not self._secrets:
            return True
        message = record.getMessage()
        redacted = message
        for secret in self._secrets:
            redacted = redacted.replace(secret, REDACTED)
        if redacted != message:
            record.msg, record.args = redacted, ()
        return True


class _ContainerFormatter(logging.Formatter):
    """Single-line formatter for container stdout.

    ``<utc timestamp> LEVEL logger [request-id]  message``, plus
    ``[file:line]`` for WARNING and above, plus the traceback if any.
    """

    def format(self, record: logging.LogRecord) -> str:
        line = (
            f"{_utc_timestamp(record)} {record.levelname:<8} {record.name} "
            f"[{getattr(record, 'request_id', '-')}]  {record.getMessage()}"
        )
        if record.levelno >= logging.WARNING:
            line += f"  [{record.filename}:{record.lineno}]"
        if record.exc_info and record.exc_info[0] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


class _JsonFormatter(logging.Formatter):
    """JSON Lines formatter: one object per record."""

    # Set as ``extra=`` by RequestContextMiddleware or copied in by the filter.
    _CONTEXT_FIELDS = ("request_id", "method", "path", "status_code", "duration_ms")

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": _utc_timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, getattr(record, key))
            for key in self._CONTEXT_FIELDS
            if getattr(record, key, None) is not None
        )
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(
    level_name: str, *, json_format: bool = False, redact: Iterable[str] = ()
) -> None:
    """Configure the root logger.

    Args:
        level_name: debug/info/warning/error; anything else means INFO.
        json_format: emit JSON lines instead of the single-line text format.
        redact: literal values masked in every message (the client secret).
    """
    level = getattr(logging, level_name.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_JsonFormatter() if json_format else _ContainerFormatter())
    handler.addFilter(_RequestContextFilter())
    handler.addFilter(_RedactFilter(redact))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    # httpx logs every outbound request at INFO, including the token endpoint
    # URL; the exchange client writes its own line instead.
    for name in ("uvicorn", "uvicorn.access", "uvicorn.error", "httpcore", "httpx"):
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

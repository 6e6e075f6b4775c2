"""Logging utilities with analytics session correlation.

Provides:
- Session ID stamping so log lines match analytics events from the same run
- Structured JSON logging for log shippers
- Standard text logging for development

All output goes to stderr: stdout is reserved for the MCP stdio protocol.
"""

import datetime
import json
import logging
import sys
from contextvars import ContextVar
from typing import Any

# Context variable holding the analytics session ID of this process
session_id_ctx: ContextVar[str | None] = ContextVar("session_id", default=None)

_TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(session_id)s] %(message)s"


class SessionFilter(logging.Filter):
    """Inject session_id into all log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add session_id attribute to log record."""
        record.session_id = session_id_ctx.get() or "-"
        return True


class StructuredLogFormatter(logging.Formatter):
    """Format logs as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        timestamp = datetime.datetime.fromtimestamp(record.created, tz=datetime.UTC).isoformat(timespec="milliseconds")

        log_entry: dict[str, Any] = {
            "severity": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "timestamp": timestamp,
        }

        session_id = getattr(record, "session_id", None)
        if session_id and session_id != "-":
            log_entry["session_id"] = session_id

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


def get_session_id() -> str | None:
    """Get the analytics session ID used for log correlation.

    Returns:
        The session ID if set, None otherwise.
    """
    return session_id_ctx.get()


def set_session_id(session_id: str | None) -> None:
    """Set the analytics session ID used for log correlation."""
    session_id_ctx.set(session_id)


def _is_ours(handler: logging.Handler) -> bool:
    return getattr(handler, "_mcp_analytics", False)


def setup_logging(level: str | int = "INFO", fmt: str = "text") -> None:
    """Configure root logging to stderr.

    Safe to call more than once: the handler installed by a previous call
    is replaced, handlers added by other libraries are left alone.

    Args:
        level: Root log level name or number
        fmt: "text" for human-readable lines, "json" for structured output
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper() if isinstance(level, str) else level)

    for handler in [h for h in root_logger.handlers if _is_ours(h)]:
        root_logger.removeHandler(handler)
        handler.close()

    handler = logging.StreamHandler(sys.stderr)
    handler._mcp_analytics = True  # type: ignore[attr-defined]
    handler.addFilter(SessionFilter())
    if fmt == "json":
        handler.setFormatter(StructuredLogFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))
    root_logger.addHandler(handler)

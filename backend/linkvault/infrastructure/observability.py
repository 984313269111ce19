"""Structured Logging - JSON/text formatters carrying the store context of each record.

Invariants:
    - Every record has timestamp, level, logger and message
    - Store context extras (user_id, collection, document_id, operation,
      error_code, path, phase) appear when present, in both formats
    - setup_logging is idempotent: calling it again replaces the handler it
      installed instead of stacking a second one
    - SQL driver chatter (sqlalchemy.engine, aiosqlite) stays at WARNING
      unless the app itself runs at DEBUG

Design Decisions:
    - stdlib logging with a hand-written JSON formatter, no log library
    - The handler is tagged so setup_logging can find its own handler
      among ones installed by uvicorn or pytest
"""

import logging
import json
from datetime import datetime, timezone

CONTEXT_KEYS = (
    "user_id", "collection", "document_id", "operation", "error_code", "path",
    "phase",
)

_NOISY_LOGGERS = ("sqlalchemy.engine", "aiosqlite")
_HANDLER_TAG = "_linkvault_handler"


def record_context(record: logging.LogRecord) -> dict:
    """Context extras attached to a record, in CONTEXT_KEYS order."""
    context = {}
    for key in CONTEXT_KEYS:
        val = record.__dict__.get(key)
        if val is not None:
            context[key] = val
    return context


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **record_context(record),
        }
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


class ContextTextFormatter(logging.Formatter):
    """Human-readable line with the context extras appended as key=value."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = record_context(record)
        if not context:
            return line
        pairs = " ".join(f"{k}={v}" for k, v in context.items())
        first, sep, rest = line.partition("\n")
        return f"{first} [{pairs}]{sep}{rest}"


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install (or replace) the application's root handler."""
    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, _HANDLER_TAG, False):
            root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter() if fmt == "json" else ContextTextFormatter())
    setattr(handler, _HANDLER_TAG, True)
    root.addHandler(handler)

    app_level = getattr(logging, level.upper(), logging.INFO)
    root.setLevel(app_level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(
            logging.DEBUG if app_level <= logging.DEBUG else logging.WARNING,
        )
    return handler

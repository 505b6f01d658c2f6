"""
Log setup shared by the API and the polling worker.

Set ENVIRONMENT=production to get one JSON object per line (for a log
collector); anything else prints plain text. Records may carry a
`commit_id` or `file_path` through `extra=`, both formats show them.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone

# Attributes passed through `extra=` that end up in the output
CONTEXT_FIELDS = ("commit_id", "file_path")

NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access", "sqlalchemy.engine")


def _context(record: logging.LogRecord) -> dict:
    return {name: getattr(record, name) for name in CONTEXT_FIELDS if getattr(record, name, None) is not None}


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "severity": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context(record),
        }
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


class ConsoleFormatter(logging.Formatter):
    """Plain text, with context fields appended as key=value."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)-7s %(name)s: %(message)s", datefmt="%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _context(record)
        if context:
            line += " [" + " ".join(f"{k}={v}" for k, v in context.items()) + "]"
        return line


def setup_logging(level: str | None = None, json_output: bool | None = None) -> None:
    """
    Replace the root logger's handlers with one stdout handler.

    `level` overrides LOG_LEVEL and `json_output` overrides ENVIRONMENT.
    """
    if json_output is None:
        json_output = os.getenv("ENVIRONMENT", "development").lower() == "production"
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if json_output else ConsoleFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level_name, logging.INFO))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

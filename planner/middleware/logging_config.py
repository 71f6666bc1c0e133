"""
Log output for the record store service.

Two kinds of lines go through the root logger:
  - request lines from ``planner.middleware.timing`` carrying ``command``,
    ``status``, ``duration_ms`` and ``request_id`` extras
  - store lines from ``planner.services`` ("Capability created id=...")

Development and tests get one readable line per record; the packaged build
(not DEBUG, not TESTING) writes one JSON object per line so the desktop shell
can tail and filter its log file. ``LOG_LEVEL`` overrides the level.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone

# Request extras copied into JSON lines when set
REQUEST_FIELDS = (
    "command",
    "method",
    "path",
    "status",
    "duration_ms",
    "request_id",
    "remote_addr",
)

# Libraries that log every statement or request at INFO
_QUIET_LOGGERS = ("werkzeug", "sqlalchemy.engine", "alembic")


class JSONFormatter(logging.Formatter):
    """One JSON object per record, request extras flattened in."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        entry.update({
            key: getattr(record, key)
            for key in REQUEST_FIELDS
            if getattr(record, key, None) is not None
        })
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


class ReadableFormatter(logging.Formatter):
    """``HH:MM:SS LEVEL logger: message <command> [12ms]`` with level colours."""

    LEVEL_COLOURS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        colour = self.LEVEL_COLOURS.get(record.levelname, "")
        parts = [
            f"{colour}{datetime.now():%H:%M:%S} {record.levelname:<8}{self.RESET}",
            f"{record.name}: {record.getMessage()}",
        ]
        command = getattr(record, "command", None)
        if command:
            parts.append(f"<{command}>")
        duration = getattr(record, "duration_ms", None)
        if duration is not None:
            parts.append(f"[{duration:.0f}ms]")
        line = " ".join(parts)
        if record.exc_info and record.exc_info[0] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _is_packaged(app) -> bool:
    return not app.config.get("DEBUG", False) and not app.config.get("TESTING", False)


def configure_logging(app):
    """Install a single stderr handler on the root logger.

    Existing root handlers are replaced, so building several apps in one
    process (the test session) does not duplicate lines.
    """
    packaged = _is_packaged(app)
    level_name = os.getenv("LOG_LEVEL", "INFO" if packaged else "DEBUG").upper()
    level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if packaged else ReadableFormatter())
    handler.setLevel(level)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    app.logger.setLevel(level)

    if not app.config.get("TESTING", False):
        app.logger.info("Logging configured: level=%s format=%s",
                        level_name, "json" if packaged else "readable")

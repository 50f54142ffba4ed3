"""Logging setup: JSON lines in production, human-readable text otherwise."""

import json
import logging
import sys
from datetime import datetime, timezone

from .config import LogSettings


EXTRA_FIELDS = ("request_id", "method", "path", "status", "duration_ms", "remote_addr", "user_id")


class JSONFormatter(logging.Formatter):
    """Format records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(settings: LogSettings) -> logging.Handler:
    """Install a single root handler according to ``settings``.

    Calling it again replaces the handler installed by the previous call.
    """
    if settings.output:
        handler = logging.FileHandler(settings.output, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stdout)

    if settings.format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))

    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, "_users_api", False):
            root.removeHandler(existing)
            existing.close()
    handler._users_api = True
    root.addHandler(handler)
    root.setLevel(getattr(logging, settings.level.upper(), logging.INFO))
    return handler

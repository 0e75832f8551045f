"""
Logging configuration.

Local development logs plain text; deployed environments set LOG_FORMAT=json
and get one JSON object per line with the request ID and the acting owner or
team member attached.
"""

import json
import logging
from datetime import datetime, timezone

from bookline.middleware.request_context import get_actor_label, get_request_id

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": get_request_id(),
        }
        actor = getattr(record, "actor", None) or get_actor_label()
        if actor:
            entry["actor"] = actor
        for key in ("duration_ms", "permission", "decision"):
            if hasattr(record, key):
                entry[key] = getattr(record, key)
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_logging(log_level: str = "INFO", log_format: str = "text") -> None:
    """Install a single stream handler on the root logger."""
    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter() if log_format == "json" else logging.Formatter(TEXT_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # RequestContextMiddleware already logs one line per request
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

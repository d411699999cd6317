"""Structured logging for the kernel: JSON lines in production, text locally."""

import json
import logging
from datetime import datetime, timezone

# Extras surfaced by the lifecycle and resolver loggers
_EXTRA_FIELDS = ("evolution_id", "category", "actor", "error_code", "active_count")


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Attach one stream handler to the ``evolution_kernel`` logger."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    root = logging.getLogger("evolution_kernel")
    for existing in list(root.handlers):
        if getattr(existing, "_evolution_kernel", False):
            root.removeHandler(existing)
    handler._evolution_kernel = True
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler

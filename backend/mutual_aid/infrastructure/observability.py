"""Structured Logging — JSON formatter, setup, and per-request access log.

Invariants:
    - Every JSON line has timestamp, level, logger and message
    - Domain extras (user, resource, status move, result count) are surfaced only when set
    - setup_logging is idempotent: calling it twice never duplicates handlers
    - The access log never records request bodies or bearer tokens

Design Decisions:
    - Standard-library logging with a JSON formatter, configured once from the lifespan
    - Access logging as a plain HTTP middleware function: one line per request with
      method, path, status and duration
"""

import json
import logging
import time
from datetime import datetime, timezone

from fastapi import Request

_EXTRA_FIELDS = (
    "user_id", "resource_type", "resource_id", "error_code", "path",
    "method", "status_code", "duration_ms",
    "status_from", "status_to", "result_count",
)

access_logger = logging.getLogger("mutual_aid.access")


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update({
            key: record.__dict__[key]
            for key in _EXTRA_FIELDS
            if record.__dict__.get(key) is not None
        })
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Install a single stream handler on the root logger."""
    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, "_mutual_aid", False):
            root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler._mutual_aid = True
    handler.setFormatter(
        JSONFormatter() if fmt == "json"
        else logging.Formatter("%(asctime)s %(levelname)s %(name)s - %(message)s"),
    )
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    # our access log replaces uvicorn's
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


async def log_requests(request: Request, call_next):
    """HTTP middleware: log method, path, status and duration of every request."""
    started = time.perf_counter()
    response = await call_next(request)
    access_logger.info(
        f"{request.method} {request.url.path} {response.status_code}",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round((time.perf_counter() - started) * 1000, 1),
        },
    )
    return response

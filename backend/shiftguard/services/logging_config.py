"""
Structured logging for the ShiftGuard analytics service.

Every line is one JSON object. Engine loggers attach ``extra`` fields
(``report_kind``, ``shift_count``, ``duration_ms``); the request middleware
binds a request id to the current context so lines logged while serving a
request carry it without the engines knowing about HTTP.
"""
import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional

# Extra fields copied from the log record into the JSON line when present
_EXTRA_FIELDS = ("duration_ms", "report_kind", "shift_count", "function",
                 "http_method", "http_path", "http_status")

_request_id: ContextVar[Optional[str]] = ContextVar("shiftguard_request_id", default=None)

_NOISY_LOGGERS = ("uvicorn.access", "httpcore", "httpx")


def bind_request_id(request_id: Optional[str]):
    """Bind ``request_id`` to the current context; returns a token for ``reset_request_id``."""
    return _request_id.set(request_id)


def reset_request_id(token) -> None:
    _request_id.reset(token)


def current_request_id() -> Optional[str]:
    return _request_id.get()


class RequestIdFilter(logging.Filter):
    """Stamp the bound request id (if any) onto each record as ``request_id``."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = _request_id.get()
        return True


class JSONFormatter(logging.Formatter):
    def format(self, record):
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }
        request_id = getattr(record, "request_id", None)
        if request_id:
            entry["request_id"] = request_id
        for name in _EXTRA_FIELDS:
            if hasattr(record, name):
                entry[name] = getattr(record, name)
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(level: str = "INFO", json_output: bool = True) -> None:
    """Install a single stdout handler on the root logger."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIdFilter())
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(name)s] %(levelname)s %(request_id)s: %(message)s"
        ))
    root.handlers = [handler]

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

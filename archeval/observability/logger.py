# archeval/observability/logger.py
"""
Structured JSON logging for the API and the background narrative step.

Every record carries the service name and, while a request is being
handled, its request_id. Background tasks started by that request keep
the same id, so a submission can be followed from decision to save.
"""

import json
import logging
import os
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional

from archeval.config import LOG_DIR


SERVICE_NAME = "archeval"

_current_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# LogRecord attributes never copied into the JSON payload
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def set_request_id(request_id: Optional[str]):
    """Bind request_id to the current context. Returns a reset token."""
    return _current_request_id.set(request_id)


def reset_request_id(token):
    _current_request_id.reset(token)


def current_request_id() -> Optional[str]:
    return _current_request_id.get()


class RequestIdFilter(logging.Filter):
    """Stamp the bound request_id onto records that lack one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = current_request_id()
        return True


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line.

    Fields passed via `extra={...}` become top-level keys. A key that
    clashes with a base field is written as `extra_<key>`. Values json
    cannot encode (enums, datetimes) fall back to str().
    """

    def format(self, record: logging.LogRecord) -> str:

        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "service": SERVICE_NAME,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        for key, value in record.__dict__.items():

            if key.startswith("_") or key in _RECORD_ATTRS:
                continue

            payload[f"extra_{key}" if key in payload else key] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def setup_logging(log_level: str = "INFO", log_dir: Optional[str] = LOG_DIR):
    """
    Route the root logger to stdout and, when log_dir is set,
    to <log_dir>/app.log. Both sinks write JSON lines.
    """

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    root_logger.handlers = []

    handlers = [logging.StreamHandler(sys.stdout)]

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.FileHandler(os.path.join(log_dir, "app.log")))

    for handler in handlers:
        handler.setFormatter(JSONFormatter())
        handler.addFilter(RequestIdFilter())
        root_logger.addHandler(handler)

    # Provider SDKs and HTTP clients log every call at INFO
    for name in ("urllib3", "httpx", "openai", "google", "posthog"):
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_request_start(logger, request_id, endpoint, **kwargs):

    logger.info(
        f"{endpoint}_started",
        extra={"request_id": request_id, "endpoint": endpoint, **kwargs},
    )


def log_request_complete(logger, request_id, endpoint, latency_seconds, **kwargs):

    logger.info(
        f"{endpoint}_completed",
        extra={
            "request_id": request_id,
            "endpoint": endpoint,
            "latency_seconds": round(latency_seconds, 3),
            **kwargs,
        },
    )

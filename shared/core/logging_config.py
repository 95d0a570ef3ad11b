"""
Structured JSON logging for the EcoFreight API.

One JSON object per line. Each record carries the service identity, the
trace context of the request being served and, when present, the exception
and any ``extra_fields`` passed by the caller.
"""

import json
import logging
import os
import re
import sys
import time
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime
from typing import Any, Dict, Optional
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)
user_id_var: ContextVar[Optional[str]] = ContextVar("user_id", default=None)

# Probes hit these every few seconds
QUIET_PATHS = ("/health/live", "/health/ready", "/health/startup")

_SECRET_PATTERN = re.compile(
    r"(?P<key>password|passwd|token|secret|api_key|authorization)(?P<sep>\s*[=:]\s*)(?P<value>\S+)",
    re.IGNORECASE,
)
_BEARER_PATTERN = re.compile(r"Bearer\s+[A-Za-z0-9\-_.]+")


def redact(message: str) -> str:
    message = _BEARER_PATTERN.sub("Bearer ***", message)
    return _SECRET_PATTERN.sub(lambda m: f"{m.group('key')}{m.group('sep')}***", message)


def trace_context() -> Dict[str, str]:
    context = {
        "request_id": request_id_var.get(),
        "correlation_id": correlation_id_var.get(),
        "user_id": user_id_var.get(),
    }
    return {k: v for k, v in context.items() if v}


class StructuredFormatter(logging.Formatter):
    def __init__(self, service_name: str):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "@timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
            "environment": os.getenv("ENVIRONMENT", "development"),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        context = trace_context()
        if context:
            entry["trace"] = context
        if record.exc_info and record.exc_info[0] is not None:
            entry["error"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "stacktrace": traceback.format_exception(*record.exc_info),
            }
        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            entry["custom"] = extra_fields
        return json.dumps(entry, default=str)


class SecurityFilter(logging.Filter):
    """Mask credentials and bearer tokens before the record is formatted."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact(record.msg)
        return True


def setup_logging(service_name: str, level: str = "INFO") -> None:
    """Send JSON logs to stdout for ``service_name`` at ``level``."""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers = []

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter(service_name))
    handler.addFilter(SecurityFilter())
    root_logger.addHandler(handler)

    for noisy in ("uvicorn.access", "sqlalchemy.engine", "alembic"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    root_logger.info("Logging initialized", extra={"extra_fields": {"service": service_name, "level": level}})


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def set_request_context(
    request_id: Optional[str] = None,
    correlation_id: Optional[str] = None,
    user_id: Optional[str] = None,
) -> None:
    if request_id:
        request_id_var.set(request_id)
    if correlation_id:
        correlation_id_var.set(correlation_id)
    if user_id:
        user_id_var.set(user_id)


def generate_request_id() -> str:
    return str(uuid.uuid4())


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request and echo the request id in ``X-Request-ID``."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        request_id_var.set(request_id)
        correlation_id_var.set(request.headers.get("X-Correlation-ID"))
        # Filled in by the auth dependency once the token is checked
        user_id_var.set(None)

        logger = get_logger(__name__)
        fields = {"method": request.method, "path": request.url.path}
        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            fields["duration_ms"] = round((time.perf_counter() - start_time) * 1000, 2)
            logger.error(f"{request.method} {request.url.path} failed", exc_info=True, extra={"extra_fields": fields})
            raise

        fields["status_code"] = response.status_code
        fields["duration_ms"] = round((time.perf_counter() - start_time) * 1000, 2)
        level = logging.DEBUG if request.url.path in QUIET_PATHS else logging.INFO
        logger.log(level, f"{request.method} {request.url.path} {response.status_code}", extra={"extra_fields": fields})

        response.headers["X-Request-ID"] = request_id
        return response

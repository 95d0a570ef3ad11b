"""Health checks and structured logging shared by the API and its scripts."""

from .health import ServiceHealth, HealthStatus
from .logging_config import (
    setup_logging,
    get_logger,
    redact,
    RequestLoggingMiddleware,
    set_request_context,
    generate_request_id,
)

__all__ = [
    "ServiceHealth",
    "HealthStatus",
    "setup_logging",
    "get_logger",
    "redact",
    "RequestLoggingMiddleware",
    "set_request_context",
    "generate_request_id",
]

"""
Observability module for structured logging and correlation IDs.

Usage:
    from core.observability import setup_logging, get_logger, correlation_context

    # In app startup:
    setup_logging()

    # In handlers:
    logger = get_logger(__name__)

    # In middleware:
    with correlation_context(request_id):
        logger.info("Processing request", extra={"path": request.url.path})
"""
import logging
import json
import time
import uuid
from contextvars import ContextVar
from typing import Optional
from datetime import datetime, timezone

# Context variable for request correlation ID
_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

# LogRecord attributes that are not user-supplied extras
_STANDARD_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "message", "asctime", "taskName",
}


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from context."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> None:
    """Set correlation ID in context."""
    _correlation_id.set(correlation_id)


def generate_correlation_id() -> str:
    """Generate a new correlation ID."""
    return str(uuid.uuid4())[:8]


class correlation_context:
    """Context manager for setting correlation ID."""

    def __init__(self, correlation_id: Optional[str] = None):
        self.correlation_id = correlation_id or generate_correlation_id()
        self.token = None

    def __enter__(self):
        self.token = _correlation_id.set(self.correlation_id)
        return self.correlation_id

    def __exit__(self, *args):
        _correlation_id.reset(self.token)


# Credential-bearing keys that must never reach a log line
REDACTED_KEYS = frozenset({
    "auth_header", "authorization", "Authorization",
    "access_token", "token", "client_secret",
})

SERVICE_NAME = "sales-dashboard-api"


def _extras(record: logging.LogRecord) -> dict:
    """User-supplied ``extra=`` fields with credentials masked."""
    extras = {}
    for key, value in record.__dict__.items():
        if key in _STANDARD_ATTRS or key.startswith("_"):
            continue
        extras[key] = "***" if key in REDACTED_KEYS and value else value
    return extras


class StructuredFormatter(logging.Formatter):
    """One JSON object per line, for log shipping in production."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "service": SERVICE_NAME,
            "level": record.levelname,
            "logger": record.name,
            "correlation_id": get_correlation_id(),
            "message": record.getMessage(),
            **_extras(record),
        }
        if entry["correlation_id"] is None:
            del entry["correlation_id"]
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Local development format:

        2025-06-01 10:00:00 - INFO     - core.orders [a1b2c3d4] - message | {extras}
    """

    def format(self, record: logging.LogRecord) -> str:
        correlation_id = get_correlation_id()
        line = "{ts} - {level:8} - {logger}{cid} - {msg}".format(
            ts=datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S"),
            level=record.levelname,
            logger=record.name,
            cid=f" [{correlation_id}]" if correlation_id else "",
            msg=record.getMessage(),
        )
        extras = _extras(record)
        if extras:
            line += f" | {extras}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    include_libs: bool = False
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: If True, output JSON logs; otherwise human-readable
        include_libs: If True, also log from third-party libraries
    """
    formatter = StructuredFormatter() if json_format else HumanReadableFormatter()

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper()))

    # Quiet down noisy libraries unless explicitly included
    if not include_libs:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
        logging.getLogger("apscheduler").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    return logging.getLogger(name)


class Timer:
    """
    Context manager for timing operations.

    Usage:
        with Timer("order_search", logger) as t:
            response = await client.post(...)
        print(f"Search took {t.elapsed_ms}ms")
    """

    def __init__(self, name: str, logger: Optional[logging.Logger] = None):
        self.name = name
        self.logger = logger
        self.start_time: float = 0
        self.end_time: float = 0
        self.elapsed_ms: float = 0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args):
        self.end_time = time.perf_counter()
        self.elapsed_ms = (self.end_time - self.start_time) * 1000

        if self.logger:
            level = logging.WARNING if self.elapsed_ms > 1000 else logging.DEBUG
            self.logger.log(
                level,
                f"{self.name} completed",
                extra={"duration_ms": round(self.elapsed_ms, 2)}
            )

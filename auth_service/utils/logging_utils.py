import logging
import re

from .request_context import get_request_id

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_SENSITIVE_PATTERNS = [
    (re.compile(r"(bearer\s+)([a-zA-Z0-9_\-\.]{20,})", re.IGNORECASE), r"\1***REDACTED***"),
    (re.compile(r"eyJ[a-zA-Z0-9_\-]+\.[a-zA-Z0-9_\-]+\.[a-zA-Z0-9_\-]*"), "***REDACTED***"),
    (re.compile(r"(password\"?\s*[:=]\s*['\"]?)([^'\",}\s]+)", re.IGNORECASE), r"\1***REDACTED***"),
]


class RequestIdFilter(logging.Filter):
    """Attach the current request id to every record ('-' outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        return True


class SensitiveDataFilter(logging.Filter):
    """Redact bearer tokens, JWTs and password values from log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = sanitize_message(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def sanitize_message(message: str) -> str:
    for pattern, replacement in _SENSITIVE_PATTERNS:
        message = pattern.sub(replacement, message)
    return message


def setup_logging(log_level: str = "INFO") -> None:
    """Configure the root logger with request id and redaction filters."""
    logging.basicConfig(level=log_level.upper(), format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level.upper())

    # Handler filters also see records propagated from child loggers.
    # Avoid adding duplicate filters when create_app() runs more than once.
    for handler in root_logger.handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())
        if not any(isinstance(f, SensitiveDataFilter) for f in handler.filters):
            handler.addFilter(SensitiveDataFilter())

    # Reduce verbosity of third-party libraries
    for lib in ("pymongo", "motor", "httpx", "httpcore", "watchfiles"):
        logging.getLogger(lib).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module/class-specific logger.

    Keeps existing logging configuration; centralizes logger creation.
    """
    return logging.getLogger(name or __name__)

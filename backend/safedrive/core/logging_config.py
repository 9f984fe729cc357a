"""
SafeDrive - Logging Configuration

One ``safedrive`` logger for the whole service. Development gets readable
single-line output; production emits JSON lines for log aggregation. Every
record carries the request, user and driver in scope (see ``request_context``).
"""

import json
import logging
import sys
import traceback
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Iterator, List

from safedrive.core.config import settings


request_id_var: ContextVar[str] = ContextVar("request_id", default="")
user_id_var: ContextVar[str] = ContextVar("user_id", default="")
driver_id_var: ContextVar[str] = ContextVar("driver_id", default="")

_CONTEXT_VARS = {
    "request_id": request_id_var,
    "user_id": user_id_var,
    "driver_id": driver_id_var,
}

# Attributes every LogRecord has; anything else came in through ``extra``
_STANDARD_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


def generate_request_id() -> str:
    return uuid.uuid4().hex[:8]


def get_request_id() -> str:
    return request_id_var.get()


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def set_user_id(user_id: str) -> None:
    user_id_var.set(user_id)


def set_driver_id(driver_id: str) -> None:
    driver_id_var.set(driver_id)


def log_context() -> Dict[str, str]:
    """Context values that are currently set"""
    return {name: var.get() for name, var in _CONTEXT_VARS.items() if var.get()}


@contextmanager
def request_context(request_id: str, driver_id: str = "") -> Iterator[None]:
    """Scope request/driver ids (and any user id set inside) to one request"""
    tokens = [
        request_id_var.set(request_id),
        driver_id_var.set(driver_id),
        user_id_var.set(""),
    ]
    try:
        yield
    finally:
        for var, token in zip((request_id_var, driver_id_var, user_id_var), tokens):
            var.reset(token)


class JSONFormatter(logging.Formatter):
    """One JSON object per line"""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
            **log_context(),
        }
        entry.update({
            key: value for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS and not key.startswith("_")
        })
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": "".join(traceback.format_exception(*record.exc_info)),
            }
        return json.dumps(entry, default=str)


class ContextualFormatter(logging.Formatter):
    """Plain text with the request/user/driver ids filled in"""

    def format(self, record: logging.LogRecord) -> str:
        for name, var in _CONTEXT_VARS.items():
            setattr(record, name, var.get() or "-")
        return super().format(record)


class SafeDriveLogger(logging.Logger):
    """Logger with structured helpers for the events operators care about"""

    def log_request(self, method: str, path: str, status_code: int,
                    duration_ms: float, level: int = logging.INFO, **kwargs) -> None:
        self.log(
            level,
            f"{method} {path} - {status_code} ({duration_ms:.1f}ms)",
            extra={
                "event_type": "http_request",
                "http_method": method,
                "http_path": path,
                "http_status": status_code,
                "duration_ms": round(duration_ms, 2),
                **kwargs
            }
        )

    def log_db_query(self, operation: str, table: str, duration_ms: float,
                     rows_affected: int = 0, **kwargs) -> None:
        self.debug(
            f"DB {operation} {table}: {rows_affected} rows ({duration_ms:.1f}ms)",
            extra={
                "event_type": "db_query",
                "db_operation": operation,
                "db_table": table,
                "rows_affected": rows_affected,
                "duration_ms": round(duration_ms, 2),
                **kwargs
            }
        )

    def log_auth_event(self, event: str, success: bool, user_email: str = None,
                       reason: str = None, **kwargs) -> None:
        parts = [f"Auth {event} {'ok' if success else 'failed'}"]
        if user_email:
            parts.append(user_email)
        if reason:
            parts.append(reason)
        self.log(
            logging.INFO if success else logging.WARNING,
            " - ".join(parts),
            extra={
                "event_type": "auth",
                "auth_event": event,
                "auth_success": success,
                "user_email": user_email,
                "failure_reason": reason,
                **kwargs
            }
        )

    def log_alert_event(self, alert_type: str, severity: str, title: str,
                        driver_name: str = None, **kwargs) -> None:
        """Critical and error alerts are logged as warnings"""
        suffix = f" ({driver_name})" if driver_name else ""
        self.log(
            logging.WARNING if severity in ("CRITICAL", "ERROR") else logging.INFO,
            f"Alert [{severity}] {alert_type}: {title}{suffix}",
            extra={
                "event_type": "alert",
                "alert_type": alert_type,
                "alert_severity": severity,
                "alert_title": title,
                "driver_name": driver_name,
                **kwargs
            }
        )

    def log_error_with_context(self, error: Exception, context: str = None, **kwargs) -> None:
        self.error(
            f"Unhandled {type(error).__name__} in {context or 'unknown context'}: {error}",
            exc_info=error,
            extra={
                "event_type": "error",
                "error_type": type(error).__name__,
                "error_context": context,
                **kwargs
            }
        )

    def log_performance(self, operation: str, duration_ms: float,
                        threshold_ms: float = 1000, **kwargs) -> None:
        slow = duration_ms > threshold_ms
        self.log(
            logging.WARNING if slow else logging.DEBUG,
            f"{'Slow: ' if slow else ''}{operation} took {duration_ms:.1f}ms",
            extra={
                "event_type": "performance",
                "operation": operation,
                "duration_ms": round(duration_ms, 2),
                "threshold_ms": threshold_ms,
                **kwargs
            }
        )


def _file_handler(formatter: logging.Formatter, backup_count: int) -> RotatingFileHandler:
    path = Path(settings.LOG_FILE)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(path, maxBytes=10 * 1024 * 1024, backupCount=backup_count)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    return handler


def setup_logging() -> SafeDriveLogger:
    """Configure the ``safedrive`` logger from settings"""
    logging.setLoggerClass(SafeDriveLogger)
    logger = logging.getLogger("safedrive")
    logger.__class__ = SafeDriveLogger  # in case it existed before setLoggerClass
    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    logger.handlers.clear()

    production = settings.ENVIRONMENT == "production"
    handlers: List[logging.Handler] = []

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.INFO)
    if production:
        console.setFormatter(JSONFormatter())
    else:
        console.setFormatter(ContextualFormatter("%(levelname)-8s | [%(request_id)s] %(message)s"))
    handlers.append(console)

    if settings.LOG_FILE:
        if production:
            handlers.append(_file_handler(JSONFormatter(), backup_count=10))
        else:
            handlers.append(_file_handler(ContextualFormatter(
                "%(asctime)s | %(levelname)-8s | [%(request_id)s] [%(user_id)s] [%(driver_id)s] | "
                "%(funcName)s:%(lineno)d | %(message)s"
            ), backup_count=5))

    for handler in handlers:
        logger.addHandler(handler)

    for noisy in ("httpx", "httpcore", "uvicorn.access", "sqlalchemy.engine", "aiosqlite", "faker"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger.debug(f"Logging ready ({'json' if production else 'text'}, level {settings.LOG_LEVEL})")
    return logger


logger: SafeDriveLogger = setup_logging()


__all__ = [
    "logger",
    "setup_logging",
    "request_context",
    "log_context",
    "generate_request_id",
    "get_request_id",
    "set_request_id",
    "set_user_id",
    "set_driver_id",
    "JSONFormatter",
    "ContextualFormatter",
    "SafeDriveLogger",
]

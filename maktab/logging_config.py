"""
Central logging configuration for the curriculum engine.

Every ProgressService operation runs inside operation_scope(), so all records
it emits share one operation_id. Structured fields go in extra= and are
rendered by both formatters:

    production:  {"level": "INFO", "message": "Transition applied",
                  "operation_id": "3f9c...", "student_id": "...", ...}
    development: 10:02:11 INFO  [maktab.orchestration...] op=3f9c...
                 Transition applied student_id=... transition=graduate_a_to_b

Usage:
    from maktab.logging_config import get_logger
    logger = get_logger(__name__)
    logger.info("Progress accepted", extra={"student_id": str(sid)})
"""

import json
import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional

from maktab.config import Settings, get_settings

operation_id_var: ContextVar[Optional[str]] = ContextVar("operation_id", default=None)

# LogRecord attributes that are not extra= context
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None))
) | {"message", "asctime", "taskName", "operation_id"}

_NOISY_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "aiosqlite", "asyncpg")


def get_operation_id() -> Optional[str]:
    return operation_id_var.get()


@contextmanager
def operation_scope(operation_id: Optional[str] = None) -> Iterator[str]:
    """Bind an operation ID to every log record emitted inside the block."""
    op_id = operation_id or uuid.uuid4().hex[:12]
    token = operation_id_var.set(op_id)
    try:
        yield op_id
    finally:
        operation_id_var.reset(token)


def record_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Fields passed via extra=, in insertion order, None values dropped."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_ATTRS and value is not None
    }


class OperationIdFilter(logging.Filter):
    """Stamp the current operation_id ("-" outside an operation)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.operation_id = get_operation_id() or "-"  # type: ignore[attr-defined]
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line for production log shipping."""

    def __init__(self, service: Optional[str] = None, version: Optional[str] = None):
        super().__init__()
        self.service = service
        self.version = version

    def format(self, record: logging.LogRecord) -> str:
        log_obj: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.service:
            log_obj["service"] = self.service
        if self.version:
            log_obj["version"] = self.version

        op_id = getattr(record, "operation_id", None)
        if op_id and op_id != "-":
            log_obj["operation_id"] = op_id
        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        for key, value in record_context(record).items():
            try:
                json.dumps(value)
                log_obj[key] = value
            except (TypeError, ValueError):
                log_obj[key] = str(value)

        return json.dumps(log_obj)


class DevFormatter(logging.Formatter):
    """Single human-readable line with extra= context appended as key=value."""

    def __init__(self):
        super().__init__(
            "%(asctime)s %(levelname)-5s [%(name)s] op=%(operation_id)s %(message)s",
            datefmt="%H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "operation_id"):
            record.operation_id = "-"  # type: ignore[attr-defined]
        line = super().format(record)
        context = record_context(record)
        if context:
            line += " " + " ".join(f"{k}={v}" for k, v in context.items())
        return line


def configure_logging(
    settings: Optional[Settings] = None,
    *,
    log_level: Optional[str] = None,
    environment: Optional[str] = None,
    debug: Optional[bool] = None,
) -> None:
    """
    Configure application-wide logging from settings.

    Args:
        settings: Source of log_level / environment / debug / project name
        log_level: Override for settings.log_level
        environment: Override for settings.environment ('production' -> JSON)
        debug: Override for settings.debug; True forces DEBUG
    """
    settings = settings or get_settings()
    log_level = log_level or settings.log_level
    environment = environment or settings.environment
    debug = settings.debug if debug is None else debug

    level = logging.DEBUG if debug else getattr(logging, log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    for h in root.handlers[:]:
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(OperationIdFilter())
    if environment == "production":
        handler.setFormatter(JsonFormatter(service=settings.project_name, version=settings.version))
    else:
        handler.setFormatter(DevFormatter())
    root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for the given module name.

    Use extra={} for structured fields:
        logger.info("Graduated", extra={"student_id": str(sid), "to_group": "B"})
    """
    return logging.getLogger(name)

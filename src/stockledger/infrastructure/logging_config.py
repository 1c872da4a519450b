"""
Structured logging configuration.

Log records are emitted as one JSON object per line so they can be shipped
to any log store as-is. Domain code only ever calls
``logging.getLogger(__name__)`` and passes business fields through
``extra={'extra_fields': {...}}``; this module decides how they look.
"""

from __future__ import annotations

import json
import logging
import sys
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Operation context, set once per CLI invocation
actor_var: ContextVar[Optional[str]] = ContextVar('actor', default=None)
correlation_id_var: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)

_service_name = "stockledger"


class StructuredFormatter(logging.Formatter):
    """JSON structured logging formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: Dict[str, Any] = {
            "@timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": _service_name,
        }

        context = _operation_context()
        if context:
            log_obj["context"] = context

        log_obj["location"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName,
            "module": record.module,
        }

        if record.exc_info:
            log_obj["error"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "stacktrace": traceback.format_exception(*record.exc_info),
            }

        if hasattr(record, 'extra_fields'):
            log_obj["custom"] = record.extra_fields

        return json.dumps(log_obj, default=str)


class PlainFormatter(logging.Formatter):
    """Human-readable single line output, with the custom fields appended."""

    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)-7s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = getattr(record, 'extra_fields', None)
        if fields:
            line += " " + " ".join(f"{key}={value}" for key, value in fields.items())
        return line


def setup_logging(
    service_name: str = "stockledger",
    level: str = "INFO",
    json_output: bool = True,
) -> None:
    """
    Configure the root logger.

    Args:
        service_name: Value of the ``service`` field on every record
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: JSON lines if true, plain text otherwise
    """
    global _service_name
    _service_name = service_name

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers = []

    # stderr keeps command output on stdout clean
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(StructuredFormatter() if json_output else PlainFormatter())
    root_logger.addHandler(handler)

    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)

    root_logger.debug(
        "Logging initialized",
        extra={'extra_fields': {'service': service_name, 'level': level, 'json': json_output}},
    )


def set_operation_context(
    actor: Optional[str] = None,
    correlation_id: Optional[str] = None,
) -> str:
    """
    Tag every subsequent record with who is acting and an operation ID.

    Returns the correlation ID in use, generating one if none was given.
    """
    if actor:
        actor_var.set(actor)
    correlation_id = correlation_id or generate_correlation_id()
    correlation_id_var.set(correlation_id)
    return correlation_id


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def _operation_context() -> Optional[Dict[str, str]]:
    context = {}
    actor = actor_var.get()
    if actor:
        context["actor"] = actor
    correlation_id = correlation_id_var.get()
    if correlation_id:
        context["correlation_id"] = correlation_id
    return context or None

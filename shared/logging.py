"""
Structured JSON logging for the Users Cache Service.

Components log through ``get_logger("users.<area>")``. Every rendered event
carries the logger name, level, an ISO-8601 UTC ``timestamp``, the owning
service and, inside a request, its ``request_id``.
"""

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any, Dict, List, Optional, TextIO

import structlog

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

EventDict = Dict[str, Any]


def add_service_name(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Tag the event with the service owning the logger (``users.cache`` -> ``users``)."""
    logger_name = event_dict.get("logger") or ""
    service, _, area = logger_name.partition(".")
    if area:
        event_dict.setdefault("service", service)
    return event_dict


def add_request_id(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    request_id = request_id_var.get()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def build_processors(service_name: str) -> List[Any]:
    """Processor chain ending in the JSON renderer."""

    def default_service(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", service_name)
        return event_dict

    return [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
        add_service_name,
        default_service,
        add_request_id,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(),
    ]


def configure_logging(service_name: str, log_level: str = "info", stream: Optional[TextIO] = None) -> None:
    """Route structlog through stdlib logging and render one JSON object per line."""
    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stdout,
        level=getattr(logging, log_level.upper()),
        force=True,
    )

    structlog.configure(
        processors=build_processors(service_name),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def set_request_id(request_id: Optional[str] = None) -> str:
    """Bind a request id (a new UUID when omitted) to the current context."""
    if request_id is None:
        request_id = str(uuid.uuid4())
    request_id_var.set(request_id)
    return request_id


def clear_context():
    request_id_var.set(None)


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)

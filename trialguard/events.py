"""
Structured logging configuration and the event sink used by the
authority and the consumer pipeline.
"""
import logging
import sys
from typing import Any, Protocol

import structlog


def configure_logging(service_name: str, log_level: str = "info", json_logs: bool = True) -> None:
    """Configure structlog for a service (JSON) or an interactive tool (console)."""
    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        # the CLI keeps stdout for user-facing output
        stream=sys.stdout if json_logs else sys.stderr,
        level=getattr(logging, log_level.upper()),
    )
    structlog.get_logger(service_name).debug("logging.configured", level=log_level)


class EventSink(Protocol):
    def emit(self, event: str, **fields: Any) -> None:
        ...


class StructlogEventSink:
    """Forwards decision events to a structlog logger."""

    def __init__(self, name: str = "trialguard"):
        self.name = name

    def emit(self, event: str, **fields: Any) -> None:
        logger = structlog.get_logger(self.name)
        if event in ("grant.denied", "gate.unreachable"):
            logger.warning(event, **fields)
        else:
            logger.info(event, **fields)

"""
Logging Setup
=============
Structured logging for the OTP service.

Usage:
    from sendexa_core.log_config import setup_logging, RequestLoggingMiddleware

    setup_logging(service_name="sendexa-otp")
    app.add_middleware(RequestLoggingMiddleware)
"""

import logging
import sys
import time
import uuid
from typing import Optional, TextIO

import structlog

logger = structlog.get_logger("http")


def setup_logging(
    service_name: str,
    level: str = "INFO",
    json_output: bool = True,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        service_name: Name of the service, added to every event
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: JSON lines (production) or console rendering
        stream: Output stream (default: stdout)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    def add_service_name(_, __, event_dict):
        event_dict.setdefault("service", service_name)
        return event_dict

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        add_service_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=shared_processors + [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)


class RequestLoggingMiddleware:
    """
    ASGI middleware logging one event per request.

    Binds a short request ID to the structlog context so every event
    emitted while handling the request carries it.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        request_id = headers.get(b"x-request-id", b"").decode()[:64] or uuid.uuid4().hex[:8]

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        method = scope.get("method", "")
        path = scope.get("path", "")
        status_code = 500
        start_time = time.time()

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 500)
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception:
            logger.exception("Unhandled request error", method=method, path=path)
            raise
        finally:
            logger.info(
                "Request handled",
                method=method,
                path=path,
                status_code=status_code,
                duration_ms=int((time.time() - start_time) * 1000),
            )
            structlog.contextvars.clear_contextvars()

"""structlog setup for the tourist API.

Every event carries the service name, environment and version, so lines from
several deployments can share one log index. Request ids are merged in from
contextvars by ``RequestContextMiddleware``.
"""

import logging
from collections.abc import MutableMapping
from typing import Any

import structlog

from tourist.config import Settings

SERVICE_NAME = "tourist-api"

# Replaced by our own request_completed line, or too chatty at INFO
_QUIET_LOGGERS = ("uvicorn.access", "asyncio", "aiosqlite")


def _service_context(settings: Settings) -> structlog.types.Processor:
    def add_service_context(
        _logger: Any, _method: str, event_dict: MutableMapping[str, Any]
    ) -> MutableMapping[str, Any]:
        event_dict.setdefault("service", SERVICE_NAME)
        event_dict.setdefault("env", settings.environment)
        event_dict.setdefault("version", settings.app_version)
        return event_dict

    return add_service_context


def setup_logging(settings: Settings) -> None:
    """Configure structlog (JSON in deployments, console locally) and stdlib levels."""
    json_output = settings.log_format == "json"
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if json_output:
        # service fields on JSON output only
        processors.append(_service_context(settings))
    processors += [
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(),
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(message)s")
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    logging.getLogger("sqlalchemy.engine").setLevel(logging.DEBUG if settings.debug else logging.WARNING)

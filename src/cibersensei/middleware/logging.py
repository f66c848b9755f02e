"""structlog setup for the CiberSensei API.

Router and middleware events go through structlog; service modules log with
stdlib `logging`, which shares the same root level.
"""

import logging
from typing import Any

import structlog

from cibersensei.config import Settings

# Libraries that are too chatty at INFO for a quiz backend
_NOISY_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "asyncio")


def _service_stamp(environment: str) -> structlog.types.Processor:
    def stamp(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:  # noqa: ANN401
        event_dict.setdefault("service", "cibersensei-api")
        event_dict.setdefault("environment", environment)
        return event_dict

    return stamp


def setup_logging(settings: Settings) -> None:
    """JSON lines in deployed environments, coloured console output locally."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    renderer: structlog.types.Processor
    if settings.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            _service_stamp(settings.environment),
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(level=level, format="%(levelname)s %(name)s %(message)s")
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

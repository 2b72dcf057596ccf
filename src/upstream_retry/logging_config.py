"""Structured logging for the upstream retry layer.

Retry decisions are logged with fixed event strings ("Retry with fixed
delay: ...", "Rotating account for status ...") so operators can grep for
them. Production renders one JSON object per line; development renders a
colored console line with the same event text.

Every event carries the application name and environment, and any API key
that reaches a log call is masked before rendering.
"""

import logging
import sys
from typing import TYPE_CHECKING

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from upstream_retry.credentials.pool import mask_key

if TYPE_CHECKING:
    from upstream_retry.config import Settings


# Field names that may hold a raw credential
SECRET_FIELDS = ("api_key", "x-api-key", "x_api_key")

# Libraries whose per-request chatter drowns out retry decisions
NOISY_LOGGERS = ("httpx", "httpcore", "asyncio")


class AppContext:
    """Processor stamping the application name and environment on each event."""

    def __init__(self, app_name: str, environment: str):
        self.app_name = app_name
        self.environment = environment

    def __call__(
        self, logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        event_dict.setdefault("app", self.app_name)
        event_dict.setdefault("environment", self.environment)
        return event_dict


def redact_api_keys(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Mask credential fields so logs never carry a usable key."""
    for field in SECRET_FIELDS:
        value = event_dict.get(field)
        if isinstance(value, str):
            event_dict[field] = mask_key(value)
    return event_dict


def build_processors(app_name: str, environment: str) -> list[Processor]:
    """Processors shared by structlog loggers and foreign stdlib records."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        AppContext(app_name, environment),
        redact_api_keys,
    ]
    if is_production(environment):
        # ConsoleRenderer formats exc_info itself; JSON needs it flattened first
        processors.append(structlog.processors.format_exc_info)
    return processors


def is_production(environment: str) -> bool:
    return environment.lower() == "production"


def configure_logging(
    log_level: str = "INFO",
    environment: str = "development",
    app_name: str = "upstream-retry",
) -> None:
    """Configure structlog on top of the stdlib root logger.

    Args:
        log_level: Logging level name; unknown names fall back to INFO
        environment: "production" selects JSON output, anything else console
        app_name: Value of the "app" field on every event

    Calling this again replaces the previous handler, so it is safe to
    reconfigure at runtime.
    """
    log_level_int = getattr(logging, log_level.upper(), None)
    if not isinstance(log_level_int, int):
        log_level_int = logging.INFO

    shared_processors = build_processors(app_name, environment)
    renderer: Processor
    if is_production(environment):
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=shared_processors
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=shared_processors,
        )
    )
    handler.setLevel(log_level_int)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level_int)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, log_level_int))

    structlog.get_logger(__name__).info(
        "Logging configured",
        log_level=logging.getLevelName(log_level_int),
        environment=environment,
        renderer="json" if is_production(environment) else "console",
    )


def setup_logging(settings: "Settings") -> None:
    """Configure logging from application settings."""
    configure_logging(
        log_level=settings.LOG_LEVEL,
        environment=settings.ENVIRONMENT,
        app_name=settings.APP_NAME,
    )

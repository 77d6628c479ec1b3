import logging
import sys

import structlog
from structlog.contextvars import merge_contextvars

from .config import settings


def add_service_and_env(logger, method_name, event_dict):
    event_dict["service"] = settings.service_name
    event_dict["env"] = settings.app_env
    return event_dict


def configure_logging() -> None:
    log_level = getattr(logging, settings.log_level, logging.INFO)

    shared_processors = [
        merge_contextvars,
        add_service_and_env,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    renderer = (
        structlog.dev.ConsoleRenderer() if settings.is_dev else structlog.processors.JSONRenderer()
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
        force=True,
    )

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

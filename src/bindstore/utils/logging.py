"""
Logging configuration for bindstore.

Structured logging via structlog, rendered through the stdlib logging
handlers so host applications keep control of where records go.

Store context keys:
- bindstore.store: remote store name
- bindstore.master_key: master record key
"""

import logging
import sys

import structlog
from structlog.typing import EventDict, WrappedLogger


def add_store_context(
    _logger: WrappedLogger,
    _method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """
    Structlog processor that renames store keys to the bindstore.* prefix.

    Transforms:
    - store_name -> bindstore.store
    - master_key -> bindstore.master_key
    """
    if "store_name" in event_dict:
        event_dict["bindstore.store"] = event_dict.pop("store_name")
    if "master_key" in event_dict:
        event_dict["bindstore.master_key"] = event_dict.pop("master_key")
    return event_dict


def configure_logging(log_level: str = "INFO", log_format: str = "json") -> None:
    """Configure structured logging for the process."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    if log_format == "json":
        renderers = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        renderers = [structlog.dev.ConsoleRenderer(colors=True)]

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            add_store_context,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *renderers,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # Reduce noise from third-party libraries
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    structlog.contextvars.bind_contextvars(service="bindstore")


def reset_logging() -> None:
    """Drop bound context and restore structlog defaults."""
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()

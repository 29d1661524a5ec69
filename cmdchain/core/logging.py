"""structlog configuration shared by the server, the CLI and the test suite."""

import logging
import sys
from typing import Any

import structlog


def setup_logging(json_logs: bool = False, log_level_name: str = "INFO") -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        json_logs: Render events as JSON lines instead of the rich console format
        log_level_name: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    level = getattr(logging, log_level_name.upper(), logging.INFO)

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    renderer: Any
    if json_logs:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            exception_formatter=structlog.dev.rich_traceback
        )

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(
        level=level,
        format="%(message)s",
        stream=sys.stderr,
        force=True,
    )

    # Keep uvicorn's access log at INFO regardless of the core level
    logging.getLogger("uvicorn.access").setLevel(max(level, logging.INFO))


def get_logger(name: str | None = None) -> Any:
    """Return a structlog logger, bound with ``logger=<name>`` when given."""
    logger = structlog.get_logger()
    if name:
        return logger.bind(logger=name)
    return logger


def get_plugin_logger(plugin_name: str) -> Any:
    """Return a structlog logger bound with the plugin's registration name."""
    return structlog.get_logger().bind(plugin=plugin_name, category="plugin")

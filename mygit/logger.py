"""Structured logging for mygit using structlog."""

import logging
import os

import structlog
from structlog.types import FilteringBoundLogger


def configure_structlog():
    """Configure structlog with pretty or JSON output based on MYGIT_LOG_FORMAT.

    stdlib logging is routed through structlog onto a single stderr handler,
    so stdout stays reserved for command output.
    """
    log_format = os.getenv("MYGIT_LOG_FORMAT", "pretty").lower()
    log_level = os.getenv("MYGIT_LOG_LEVEL", "WARNING").upper()

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    logging.root.handlers = []
    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=[
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
            ],
        )
    )
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, log_level, logging.WARNING))

    logging.getLogger("urllib3").setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """Get a structlog logger bound to a stdlib logger of the same name."""
    return structlog.get_logger(name)

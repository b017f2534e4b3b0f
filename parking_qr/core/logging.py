"""
Structured logging setup
"""

import logging
import sys

import structlog

from parking_qr.core.config import Settings


def configure_logging(settings: Settings) -> None:
    """Configure structlog on top of stdlib logging.

    Development gets a readable console renderer at DEBUG level,
    every other environment gets JSON lines at INFO.
    """
    level = logging.DEBUG if settings.is_development else logging.INFO
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    if settings.is_development:
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
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

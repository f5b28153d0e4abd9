"""Structured logging setup."""
import logging
import sys

import structlog

from faqrag import config


def configure_logging(level: str = None) -> None:
    """Configure structlog on top of stdlib logging, one JSON object per line.

    Log lines go to stderr so stdout only carries the prompt and the answer.

    Args:
        level: Log level name (defaults to config.LOG_LEVEL)
    """
    level = (level or config.LOG_LEVEL).upper()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level, logging.INFO),
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

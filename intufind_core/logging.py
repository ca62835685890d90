"""
Centralized logging configuration for the Intufind client.
Initializes loguru and intercepts standard library logging (httpx, httpcore).
"""

import logging
import sys
from loguru import logger

from intufind_core.config import settings


class InterceptHandler(logging.Handler):
    """
    Default handler from documents for intercepting standard library logging messages.
    See: https://loguru.readthedocs.io/en/stable/overview.html#entirely-compatible-with-standard-logging
    """

    def emit(self, record):
        # Get corresponding Loguru level if it exists
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str | None = None, sink=sys.stdout):
    """
    Configures loguru to handle all logs and output them to the given sink.

    Pass level="DEBUG" together with ClientConfig(debug=True) to see the
    per-attempt request lines. Without a level, LOG_LEVEL from settings
    is used.
    """
    level = level or settings.LOG_LEVEL

    # Remove all existing handlers
    logger.remove()

    logger.add(
        sink,
        format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=level,
        colorize=sink in (sys.stdout, sys.stderr),
    )

    # Intercept standard library logging
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    # HTTP libraries log through the standard library
    for name in ["httpx", "httpcore"]:
        _logger = logging.getLogger(name)
        _logger.handlers = [InterceptHandler()]
        _logger.propagate = False

    logger.info(f"Logging initialized with Loguru (level={level}).")

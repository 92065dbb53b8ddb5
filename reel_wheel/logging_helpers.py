import logging
import sys

from loguru import logger


class InterceptHandler(logging.Handler):
    """Forward stdlib log records (e.g. from httpx) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(exception=record.exc_info).log(level, record.getMessage())


def configure_logging(debug: bool = False) -> None:
    """Send loguru output to stderr and route the httpx logger through it.

    Only the CLI calls this; library code never touches the sinks.
    """
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if debug else "WARNING", format="{time} {level} {message}")
    httpx_logger = logging.getLogger("httpx")
    httpx_logger.handlers = [InterceptHandler()]
    httpx_logger.propagate = False
    httpx_logger.setLevel(logging.INFO if debug else logging.WARNING)
    if debug:
        logger.debug("Debug logging enabled")

import logging
import sys

from loguru import logger

from ..core.settings import settings

# stdlib loggers of the HTTP stack
HTTP_LOGGERS = ("httpx", "httpcore")

LIBRARY_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SS}</green> | <level>{level: <4}</level> |"
    " <magenta>{extra[stdlib]}</magenta> | <level>{message}</level>\n{exception}"
)
DEBUG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SS}</green> | <level>{level: <4}</level> |"
    " <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>"
    " | <level>{message}</level>\n"
)
MINIMAL_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SS}</green> |"
    " <level>{level}</level> | <level>{message}</level>\n"
)


class InterceptHandler(logging.Handler):
    """Forwards stdlib records (httpx, httpcore) to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.bind(stdlib=record.name).opt(exception=record.exc_info).log(
            level, record.getMessage()
        )


def log_level() -> str:
    level = settings.log_level.upper()
    if settings.debug and level == "INFO":
        return "DEBUG"
    return level


def stdlib_level(level: str) -> int:
    # loguru's TRACE and SUCCESS have no stdlib counterpart
    if level == "TRACE":
        return logging.DEBUG
    if level == "SUCCESS":
        return logging.INFO
    value = logging.getLevelName(level)
    return value if isinstance(value, int) else logging.INFO


def format_record(record) -> str:
    if "stdlib" in record["extra"]:
        return LIBRARY_FORMAT
    return DEBUG_FORMAT if settings.debug else MINIMAL_FORMAT


def configure_logger() -> None:
    """Replaces loguru's sinks with one stderr sink at the configured level and
    routes the HTTP stack's stdlib logging through it."""
    level = log_level()
    logger.remove()
    logger.add(sys.stderr, level=level, format=format_record)

    for name in HTTP_LOGGERS:
        stdlib_logger = logging.getLogger(name)
        stdlib_logger.handlers = [InterceptHandler()]
        stdlib_logger.setLevel(stdlib_level(level))
        stdlib_logger.propagate = False

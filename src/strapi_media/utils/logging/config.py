# ABOUTME: Loguru sink setup with structlog events routed through standard logging
# ABOUTME: Interactive runs log to rotating files under logs/, production runs emit JSON on stdout

import logging
import sys
from pathlib import Path
from typing import Any

import structlog
from loguru import logger

from strapi_media.config import Config

LOG_DIR = Path("logs")
MAIN_LOG = "strapi-media.log"
JSON_LOG = "strapi-media.json"
ERROR_LOG = "errors.log"

TEXT_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"
JSON_FORMAT = "{time} | {level} | {name} | {message}"

# HTTP and database libraries only surface warnings
THIRD_PARTY_WARNING_LOGGERS = [
    "httpx",
    "httpcore",
    "asyncio",
    "aiosqlite",
    "sqlalchemy.engine",
    "markdown_it",
]


class LoggingMode:
    """Logging mode constants."""

    INTERACTIVE = "interactive"
    PRODUCTION = "production"


class InterceptHandler(logging.Handler):
    """Hands standard logging records to loguru, keeping the original logger name and call site."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        def origin(message_record):
            message_record.update(name=record.name, function=record.funcName, line=record.lineno)

        logger.patch(origin).opt(exception=record.exc_info).log(level, record.getMessage())


def detect_logging_mode() -> str:
    """Pick the configured log_mode (env or .env), else decide by whether stdout is a terminal."""
    mode = Config().log_mode
    if mode in (LoggingMode.INTERACTIVE, LoggingMode.PRODUCTION):
        return mode
    return LoggingMode.INTERACTIVE if sys.stdout.isatty() else LoggingMode.PRODUCTION


def setup_third_party_logging() -> None:
    for logger_name in THIRD_PARTY_WARNING_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    logging.captureWarnings(True)
    logging.getLogger("py.warnings").setLevel(logging.ERROR)


def setup_structlog() -> None:
    """Render structlog events as key=value text and pass them to standard logging."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.processors.format_exc_info,
            structlog.processors.KeyValueRenderer(key_order=["event"], drop_missing=True),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    root.handlers = [handler for handler in root.handlers if not isinstance(handler, InterceptHandler)]
    root.addHandler(InterceptHandler())


def _add_interactive_sinks(log_level: str, log_file: str | None) -> None:
    logger.add(
        log_file or LOG_DIR / MAIN_LOG,
        level=log_level,
        format=TEXT_FORMAT,
        rotation="10 MB",
        retention="7 days",
    )
    logger.add(
        LOG_DIR / JSON_LOG,
        level=log_level,
        format=JSON_FORMAT,
        serialize=True,
        rotation="10 MB",
        retention="7 days",
    )
    logger.add(LOG_DIR / ERROR_LOG, level="ERROR", format=TEXT_FORMAT, backtrace=True, diagnose=True)


def configure_logging(mode: str | None = None, log_level: str = "INFO", log_file: str | None = None) -> None:
    """Configure loguru sinks and route every standard and structlog logger into them.

    Args:
        mode: Logging mode (interactive/production), auto-detected if None
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Custom path for the human-readable log, interactive mode only
    """
    mode = mode or detect_logging_mode()
    log_level = log_level.upper()

    setup_third_party_logging()
    setup_structlog()
    logging.getLogger().setLevel(getattr(logging, log_level, logging.INFO))

    logger.remove()

    if mode == LoggingMode.INTERACTIVE:
        try:
            LOG_DIR.mkdir(exist_ok=True)
        except OSError:
            # Read-only working directory
            mode = LoggingMode.PRODUCTION

    if mode == LoggingMode.INTERACTIVE:
        _add_interactive_sinks(log_level, log_file)
    else:
        logger.add(sys.stdout, level=log_level, format=JSON_FORMAT, serialize=True)


def get_logging_status() -> dict[str, Any]:
    """Describe where logs go for the current environment."""
    mode = detect_logging_mode()
    interactive = mode == LoggingMode.INTERACTIVE

    def log_path(name: str) -> str | None:
        return str(LOG_DIR / name) if interactive else None

    return {
        "mode": mode,
        "log_directory": str(LOG_DIR.absolute()) if LOG_DIR.exists() else None,
        "log_files": {
            "main": log_path(MAIN_LOG),
            "json": log_path(JSON_LOG),
            "errors": log_path(ERROR_LOG),
        },
        "third_party_suppressed": list(THIRD_PARTY_WARNING_LOGGERS),
    }

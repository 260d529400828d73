"""
Structured logging utilities.

``configure_logging`` installs the root handler for the ``medvoice`` logger
namespace; ``StructuredLogger`` emits JSON key/value events for pipeline
stages so they can be queried by session and stage.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional

from .config import LoggingSettings

ROOT_LOGGER_NAME = "medvoice"


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        # Key/value payload attached by StructuredLogger
        if hasattr(record, "extra_data"):
            log_obj.update(record.extra_data)

        return json.dumps(log_obj, ensure_ascii=False, default=str)


def configure_logging(settings: Optional[LoggingSettings] = None) -> logging.Logger:
    """Attach a single stdout handler to the ``medvoice`` logger.

    Calling this more than once replaces the handler instead of stacking them.
    """
    settings = settings or LoggingSettings()
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(settings.level)

    for handler in list(logger.handlers):
        if getattr(handler, "_medvoice_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    if settings.format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        )
    handler._medvoice_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger


class StructuredLogger:
    """
    Structured logger that attaches key/value data to each record.
    """

    def __init__(self, name: str):
        if not name.startswith(ROOT_LOGGER_NAME):
            name = f"{ROOT_LOGGER_NAME}.{name}"
        self.logger = logging.getLogger(name)

    def log(self, level: str, message: str, **kwargs: Any) -> None:
        """Log with structured data"""
        level_no = logging.getLevelName(level.upper())
        if not isinstance(level_no, int):
            level_no = logging.INFO
        if not self.logger.isEnabledFor(level_no):
            return
        suffix = " ".join(f"{key}={value}" for key, value in kwargs.items())
        text = f"{message} {suffix}" if suffix else message
        self.logger.log(level_no, text, extra={"extra_data": kwargs})

    def info(self, message: str, **kwargs: Any) -> None:
        self.log("info", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self.log("warning", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self.log("error", message, **kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        self.log("debug", message, **kwargs)


def get_logger(name: str) -> StructuredLogger:
    """Get or create a structured logger"""
    return StructuredLogger(name)

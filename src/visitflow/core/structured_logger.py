"""
Structured logging utilities for application logging
"""

import json
import logging
import sys
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .config import Settings

ROOT_LOGGER_NAME = "visitflow"


class StructuredLogger:
    """
    Structured logger that outputs JSON payloads for easy parsing and querying
    """

    def __init__(self, name: str, level: int = logging.INFO):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)

    def log(self, level: str, message: str, exc_info=None, **kwargs):
        """Log with structured data"""
        log_data = {"message": message, **kwargs}
        self.logger.log(
            logging.getLevelName(level.upper()),
            message,
            exc_info=exc_info,
            extra={"extra_data": log_data},
        )

    def info(self, message: str, **kwargs):
        """Log info level"""
        self.log("info", message, **kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning level"""
        self.log("warning", message, **kwargs)

    def error(self, message: str, **kwargs):
        """Log error level"""
        self.log("error", message, **kwargs)

    def debug(self, message: str, **kwargs):
        """Log debug level"""
        self.log("debug", message, **kwargs)


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": datetime.utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_data"):
            log_obj.update(record.extra_data)

        return json.dumps(log_obj, default=str)


def configure_logging(settings: "Settings") -> logging.Logger:
    """Install the configured formatter on the application logger."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(settings.logging.level)

    handler = logging.StreamHandler(sys.stdout)
    if settings.logging.format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )

    # Replace any handler installed by a previous configure call
    for existing in list(logger.handlers):
        if getattr(existing, "_visitflow_handler", False):
            logger.removeHandler(existing)
    handler._visitflow_handler = True
    logger.addHandler(handler)
    return logger
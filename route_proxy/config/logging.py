"""
Logging configuration for the route proxy.

This module provides centralized logging configuration with support for
structured (JSON) logging and a detailed text format for local runs.
"""

import logging
import logging.config
import sys
from typing import Dict, Any, Optional


def get_logging_config(
    log_level: str = "INFO",
    log_format: str = "json",
    log_file: Optional[str] = None
) -> Dict[str, Any]:
    """
    Get logging configuration dictionary.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format ('json' or 'text')
        log_file: Optional log file path

    Returns:
        Logging configuration dictionary
    """
    formatters = {
        "default": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S"
        },
        "detailed": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(lineno)d - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S"
        },
        "json": {
            "()": "pythonjsonlogger.json.JsonFormatter",
            "format": "%(asctime)s %(name)s %(levelname)s %(module)s %(lineno)d %(message)s"
        }
    }

    formatter_name = "json" if log_format == "json" else "detailed"

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "level": log_level,
            "formatter": formatter_name,
            "stream": sys.stdout
        }
    }

    if log_file:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": log_level,
            "formatter": formatter_name,
            "filename": log_file,
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5,
            "encoding": "utf8"
        }

    loggers = {
        "": {  # Root logger
            "level": log_level,
            "handlers": list(handlers.keys()),
            "propagate": False
        },
        "httpx": {
            "level": "WARNING",
            "handlers": list(handlers.keys()),
            "propagate": False
        },
        "route_proxy": {
            "level": log_level,
            "handlers": list(handlers.keys()),
            "propagate": False
        }
    }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "handlers": handlers,
        "loggers": loggers
    }


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    log_file: Optional[str] = None
) -> None:
    """
    Setup logging configuration.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format ('json' or 'text')
        log_file: Optional log file path
    """
    config = get_logging_config(
        log_level=log_level.upper(),
        log_format=log_format,
        log_file=log_file
    )

    logging.config.dictConfig(config)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the specified name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


class StructuredLogger:
    """
    Structured logger for consistent log message formatting.

    This class provides methods for logging proxy invocations and upstream
    calls with consistent field names.
    """

    def __init__(self, name: str):
        """Initialize structured logger.

        Args:
            name: Logger name
        """
        self.logger = get_logger(name)

    def log_proxy_request(
        self,
        method: str,
        resource: str,
        status_code: int,
        response_time: float,
        **kwargs
    ):
        """Log one proxied invocation.

        Args:
            method: Incoming HTTP method
            resource: Incoming resource path
            status_code: Status code of the returned envelope
            response_time: Total handling time in milliseconds
            **kwargs: Additional fields to log
        """
        log_data = {
            "event": "proxy_request",
            "method": method,
            "resource": resource,
            "status_code": status_code,
            "response_time_ms": response_time,
        }
        log_data.update(kwargs)

        # Level follows the status code
        if status_code >= 500:
            self.logger.error("Proxy request", extra=log_data)
        elif status_code >= 400:
            self.logger.warning("Proxy request", extra=log_data)
        else:
            self.logger.info("Proxy request", extra=log_data)

    def log_upstream_call(
        self,
        url: str,
        method: str,
        response_time: float,
        status_code: Optional[int] = None,
        error: Optional[str] = None,
        **kwargs
    ):
        """Log an outbound call to the upstream service.

        Args:
            url: Upstream URL
            method: HTTP method
            response_time: Call duration in milliseconds
            status_code: Upstream status code, if a response was received
            error: Error message if no response was obtained
            **kwargs: Additional fields to log
        """
        log_data = {
            "event": "upstream_call",
            "url": url,
            "method": method,
            "response_time_ms": response_time,
        }

        if status_code is not None:
            log_data["status_code"] = status_code
        if error:
            log_data["error"] = error

        log_data.update(kwargs)

        if error:
            self.logger.error("Upstream call failed", extra=log_data)
        else:
            self.logger.info("Upstream call completed", extra=log_data)

    def info(self, message: str, **kwargs):
        """Log info message with structured data."""
        self.logger.info(message, extra=kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with structured data."""
        self.logger.warning(message, extra=kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with structured data."""
        self.logger.error(message, extra=kwargs)

    def debug(self, message: str, **kwargs):
        """Log debug message with structured data."""
        self.logger.debug(message, extra=kwargs)

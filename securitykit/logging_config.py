"""Centralized logging configuration for securitykit."""

import logging
import os
import sys
from typing import Optional

from fastapi import Request

LOGGER_NAME = "securitykit"


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """Configure and return the package logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)

    if logger.handlers:
        return logger

    level = getattr(logging, log_level.upper(), logging.INFO)
    logger.setLevel(level)

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # Prevent duplicate logs
    logger.propagate = False

    return logger


def get_logger() -> logging.Logger:
    """Get the package logger instance."""
    return logging.getLogger(LOGGER_NAME)


def log_filter_resolved(name: str, handle_type: str) -> None:
    """Log a filter name resolving to a handler.

    Args:
        name: Lowercase filter name
        handle_type: Dispatch variant chosen for the handler
    """
    logger = get_logger()
    log_data = {"filter": name, "handle": handle_type}
    logger.debug(f"Filter resolved: {log_data}")


def log_filter_miss(name: str) -> None:
    """Log a filter name that could not be resolved.

    From here on the name is used as a regex character class.
    """
    logger = get_logger()
    log_data = {"filter": name, "fallback": "character_class"}
    logger.info(f"Filter miss recorded: {log_data}")


def log_uri_rewrite(request: Request, original_path: str, cleaned_path: str) -> None:
    """Log a request path rewritten by URI cleaning.

    Args:
        request: FastAPI request object
        original_path: Path as received
        cleaned_path: Path after the uri_filter chain
    """
    logger = get_logger()

    log_data = {
        "method": request.method,
        "original_path": original_path,
        "cleaned_path": cleaned_path,
        "client_ip": getattr(request.client, "host", "unknown") if request.client else "unknown",
    }

    logger.info(f"URI cleaned: {log_data}")


def log_error(
    error: Exception,
    request: Request,
    context: Optional[str] = None,
) -> None:
    """Log security errors surfaced to a request.

    Args:
        error: Exception that occurred
        request: FastAPI request object
        context: Optional context description
    """
    logger = get_logger()

    log_data = {
        "error_type": type(error).__name__,
        "error_message": str(error),
        "path": request.url.path,
        "method": request.method,
        "client_ip": getattr(request.client, "host", "unknown") if request.client else "unknown",
    }

    if context:
        log_data["context"] = context

    logger.error(f"Security error: {log_data}", exc_info=error)


# Initialize logging on import
_log_level = os.getenv("LOG_LEVEL", "INFO")
setup_logging(_log_level)

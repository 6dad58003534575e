"""
Logging Configuration Module.

This module provides the central logging configuration dictionary for the
application. Every handler carries the PHI sanitizer so patient contact
details and access tokens never reach log output in plain text.
"""

import copy
import logging
import logging.config
from pathlib import Path
from typing import Any

# Base configuration that can be extended for different environments
LOGGING_CONFIG_BASE: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "[%(asctime)s] [%(levelname)s] [%(name)s] - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
        "audit": {
            "format": "%(asctime)s [AUDIT] [%(levelname)s] %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "filters": {
        "phi_sanitizer": {
            "()": "mbc_tracker.core.utils.logging.PHISanitizingFilter",
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": "INFO",
            "formatter": "standard",
            "filters": ["phi_sanitizer"],
            "stream": "ext://sys.stdout",
        },
    },
    "loggers": {
        "mbc_tracker": {
            "level": "INFO",
            "handlers": ["console"],
            "propagate": False,
        },
        "uvicorn": {
            "level": "INFO",
            "handlers": ["console"],
            "propagate": False,
        },
        "sqlalchemy.engine": {
            "level": "WARNING",  # Set to INFO for SQL query logging
            "handlers": ["console"],
            "propagate": False,
        },
    },
}


def build_logging_config(log_level: str = "INFO", audit_log_file: str | None = None) -> dict[str, Any]:
    """
    Build a concrete logging configuration.

    Args:
        log_level: Level applied to the console handler and package logger
        audit_log_file: Optional file that mirrors every audit event

    Returns:
        A dictConfig-compatible dictionary
    """
    config = copy.deepcopy(LOGGING_CONFIG_BASE)
    config["handlers"]["console"]["level"] = log_level
    config["loggers"]["mbc_tracker"]["level"] = log_level

    audit_handlers = ["console"]
    if audit_log_file:
        config["handlers"]["audit_file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "INFO",
            "formatter": "audit",
            "filters": ["phi_sanitizer"],
            "filename": audit_log_file,
            "maxBytes": 10485760,  # 10MB
            "backupCount": 10,
            "encoding": "utf8",
        }
        audit_handlers = ["audit_file"]

    config["loggers"]["mbc.audit"] = {
        "level": "INFO",
        "handlers": audit_handlers,
        "propagate": False,
    }
    return config


def setup_logging(log_level: str = "INFO", audit_log_file: str | None = None) -> None:
    """
    Configure the logging system.

    Args:
        log_level: Minimum level for application logs
        audit_log_file: Optional file path for the audit mirror log
    """
    if audit_log_file:
        Path(audit_log_file).parent.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(build_logging_config(log_level, audit_log_file))

    logger = logging.getLogger(__name__)
    logger.debug("Logging configured successfully")

"""
Logging utilities.

Provides the PHI-sanitizing filter attached to every handler and a thin
``get_logger`` helper used across the package.
"""

import logging
import re

_EMAIL_PATTERN = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
_PHONE_PATTERN = re.compile(r"(?<!\w)\+?\d[\d\s().-]{7,}\d(?!\w)")
# Magic-link paths carry the unguessable access token.
_TOKEN_PATTERN = re.compile(r"/q/[A-Za-z0-9_-]{16,}")


def sanitize_text(text: str) -> str:
    """Mask e-mail addresses, phone numbers and access tokens in free text."""
    text = _EMAIL_PATTERN.sub("[EMAIL REDACTED]", text)
    text = _TOKEN_PATTERN.sub("/q/[TOKEN REDACTED]", text)
    return _PHONE_PATTERN.sub("[PHONE REDACTED]", text)


class PHISanitizingFilter(logging.Filter):
    """Custom logging filter to sanitize PHI from log records."""

    def __init__(self, name: str = ""):
        # An empty name lets records from every logger through
        super().__init__(name)

    def filter(self, record: logging.LogRecord) -> bool:
        """Sanitize the log record message in place."""
        original_message = record.getMessage()
        sanitized_message = sanitize_text(original_message)

        # Replace msg and drop args so formatters do not re-interpolate
        record.msg = sanitized_message
        record.args = None
        return True


def get_logger(name: str) -> logging.Logger:
    """
    Get a module logger.

    Handlers are configured once by ``setup_logging``; this helper only
    exists so modules have a single import for logging.
    """
    return logging.getLogger(name)

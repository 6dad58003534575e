"""
Base exception classes for the application.

This module defines base exception classes that are extended by other
exception classes in the application.
"""


class BaseApplicationError(Exception):
    """Base class for all application exceptions."""

    def __init__(self, message: str = "An application error occurred") -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ValidationFailedError(BaseApplicationError):
    """Raised when input or a definition fails validation (answers, measures, policies)."""

    def __init__(self, message: str = "Validation failed", field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class ConfigurationError(BaseApplicationError):
    """Error raised when configuration is invalid."""

    def __init__(self, message: str = "Invalid configuration") -> None:
        super().__init__(message)

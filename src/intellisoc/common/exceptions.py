"""Custom exceptions for IntelliSOC.

Provides a hierarchy of exceptions for different error types.
All IntelliSOC exceptions inherit from IntelliSOCException.
"""

from typing import Any, Dict, Optional


class IntelliSOCException(Exception):
    """Base exception for all IntelliSOC errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional context about the error
    """

    def __init__(
        self,
        message: str,
        code: str = "INTELLISOC_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(IntelliSOCException):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONFIG_ERROR", details=details)


class ValidationError(IntelliSOCException):
    """Raised when input validation fails. Never persisted."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class NotFoundError(IntelliSOCException):
    """Raised when a looked-up record does not exist."""

    def __init__(
        self,
        message: str,
        resource: str,
        details: Optional[Dict[str, Any]] = None
    ):
        details = details or {}
        details["resource"] = resource
        super().__init__(message, code="NOT_FOUND", details=details)


class StorageError(IntelliSOCException):
    """Raised when a collection cannot be written.

    Read failures are recovered by the store and never raise this.
    """

    def __init__(
        self,
        message: str,
        collection: str,
        details: Optional[Dict[str, Any]] = None
    ):
        details = details or {}
        details["collection"] = collection
        super().__init__(message, code="STORAGE_ERROR", details=details)

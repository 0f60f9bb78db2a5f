"""
Custom exceptions for the application.

This provides:
1. Specific exception types for different error scenarios
2. Status code hints for whatever transport maps them
3. Error context preservation
"""

from typing import Any, Dict, Optional


class AppException(Exception):
    """Base exception class for application-specific errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AppException):
    """Raised when input validation fails."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=400, details=details)


class ConflictError(AppException):
    """Raised when operation conflicts with current state."""

    def __init__(self, message: str = "Conflict with current state"):
        super().__init__(message, status_code=409)


class HistoryError(AppException):
    """Raised when an undo or redo cannot be replayed against the graph."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=409, details=details)


class StorageError(AppException):
    """Raised when the underlying database fails."""

    def __init__(self, message: str = "Storage failure"):
        super().__init__(message, status_code=503)


class ServiceError(AppException):
    """Raised when business logic operation fails."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=500, details=details)

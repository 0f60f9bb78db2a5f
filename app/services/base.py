"""
Base Service - Common service functionality and patterns.

This provides:
1. Common service initialization patterns
2. Error handling utilities
3. Logging helpers
"""

import logging
from typing import NoReturn

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AppException, ServiceError, StorageError

logger = logging.getLogger(__name__)


class BaseService:
    """
    Base service class providing common functionality.

    This establishes patterns for:
    - Database session management
    - Error handling
    - Logging
    """

    def __init__(self, db: AsyncSession):
        """
        Initialize service with database session.

        Args:
            db: Async database session
        """
        self.db = db
        self.logger = logger

    async def _handle_service_error(self, error: Exception, operation: str) -> NoReturn:
        """
        Centralized error handling for services.

        Application errors are re-raised unchanged, database failures become
        StorageError and anything else becomes ServiceError.

        Args:
            error: The exception that occurred
            operation: Description of the operation that failed
        """
        self.logger.error(f"Service error in {operation}: {str(error)}")

        try:
            await self.db.rollback()
        except Exception as rollback_error:
            self.logger.error(f"Failed to rollback transaction: {rollback_error}")

        if isinstance(error, AppException):
            raise error
        if isinstance(error, SQLAlchemyError):
            raise StorageError(f"Failed to {operation}: {str(error)}") from error
        raise ServiceError(f"Failed to {operation}: {str(error)}") from error

    def _log_operation(self, operation: str, **kwargs) -> None:
        """
        Log service operations for debugging and monitoring.

        Args:
            operation: Description of the operation
            **kwargs: Additional context to log
        """
        context = " ".join([f"{k}={v}" for k, v in kwargs.items()])
        self.logger.info(f"Service operation: {operation} {context}")

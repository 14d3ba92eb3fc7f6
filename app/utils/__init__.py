"""
Common utilities package for the image gallery service.

Logging setup and the application error taxonomy. Token and password helpers
live in ``app.utils.auth``.
"""

from app.utils.exceptions import (
    AppError,
    AuthError,
    ConflictError,
    DatabaseError,
    ImageGenerationError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from app.utils.logger import setup_logger

__all__ = [
    # Errors
    "AppError",
    "AuthError",
    "ConflictError",
    "DatabaseError",
    "ImageGenerationError",
    "NotFoundError",
    "StorageError",
    "ValidationError",
    # Logging utilities
    "setup_logger",
]

"""
WallDecorator - Custom Exceptions
==================================
Business-level exceptions that can be caught and converted to HTTP responses.
"""

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError

# PostgreSQL SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


class WallDecoratorError(Exception):
    """Base exception for all business logic errors."""
    status_code = 400

    def __init__(self, message: str = "Something went wrong. Please try again."):
        self.message = message
        super().__init__(self.message)


class ValidationError(WallDecoratorError):
    """Raised for malformed or missing input, before any external call."""
    status_code = 422


class NotFoundError(WallDecoratorError):
    """Raised when a requested resource doesn't exist."""
    status_code = 404


class InsufficientInventoryError(WallDecoratorError):
    """Raised when a variant's stock is not enough for the requested quantity."""
    status_code = 409

    def __init__(self, sku: str = ""):
        msg = f"Not enough stock for {sku}" if sku else "Not enough stock."
        super().__init__(msg)


class OrderCreationError(WallDecoratorError):
    """Raised when the order transaction fails and is rolled back."""
    status_code = 500


class StorageError(WallDecoratorError):
    """Raised when the object store can't read or write a file."""
    status_code = 502


class StorageConflictError(StorageError):
    """Raised when uploading to an existing path without overwrite."""
    status_code = 409


def is_unique_violation(exc: IntegrityError) -> bool:
    """Detect a unique constraint violation (PostgreSQL 23505 or SQLite UNIQUE)."""
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code == UNIQUE_VIOLATION:
        return True
    return "UNIQUE constraint failed" in str(orig)


def raise_http(error: WallDecoratorError, status_code: int = None):
    """Convert a business exception to an HTTP exception."""
    raise HTTPException(status_code=status_code or error.status_code, detail=error.message)

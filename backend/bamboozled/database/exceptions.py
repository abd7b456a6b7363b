"""Database-specific exceptions and error handling"""

from typing import Optional
from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    OperationalError,
    SQLAlchemyError
)


class DatabaseError(Exception):
    """Base exception for database operations"""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.original_error = original_error


class ConnectionError(DatabaseError):
    """Raised when there is no usable database connection"""
    pass


class ItemNotFoundError(DatabaseError):
    """Raised when a row is not found"""
    pass


class DuplicateItemError(DatabaseError):
    """Raised when trying to create a row that already exists"""
    pass


class QueryError(DatabaseError):
    """Raised when database queries fail"""
    pass


class ImportFormatError(DatabaseError):
    """Raised when import data does not match the export format"""
    pass


class MigrationError(DatabaseError):
    """Raised when a migration cannot be loaded or applied"""
    pass


class ProviderNotImplementedError(DatabaseError):
    """Raised by providers that are declared but not available yet"""
    pass


class UnknownProviderError(DatabaseError):
    """Raised when the configured provider name is not recognised"""
    pass


_CONNECTION_MARKERS = (
    "database is locked",
    "unable to open database",
    "disk i/o error",
)


def handle_sqlalchemy_error(error: SQLAlchemyError) -> DatabaseError:
    """Convert SQLAlchemy errors to application-specific errors"""

    message = str(getattr(error, "orig", None) or error)

    if isinstance(error, IntegrityError):
        if "UNIQUE" in message.upper() or "PRIMARY KEY" in message.upper():
            return DuplicateItemError(f"Item already exists: {message}", error)
        return QueryError(f"Constraint violation: {message}", error)
    if isinstance(error, OperationalError):
        if any(marker in message.lower() for marker in _CONNECTION_MARKERS):
            return ConnectionError(f"Database unavailable: {message}", error)
        return QueryError(f"Query failed: {message}", error)
    if isinstance(error, DBAPIError) and error.connection_invalidated:
        return ConnectionError(f"Connection lost: {message}", error)
    return QueryError(f"Database operation failed: {message}", error)

"""Database access layer: schema, providers, migrations and data tooling"""

from .exceptions import (
    DatabaseError,
    ConnectionError,
    ItemNotFoundError,
    DuplicateItemError,
    QueryError,
    ImportFormatError,
    MigrationError,
    ProviderNotImplementedError,
    UnknownProviderError,
    handle_sqlalchemy_error
)

__all__ = [
    "DatabaseError",
    "ConnectionError",
    "ItemNotFoundError",
    "DuplicateItemError",
    "QueryError",
    "ImportFormatError",
    "MigrationError",
    "ProviderNotImplementedError",
    "UnknownProviderError",
    "handle_sqlalchemy_error"
]

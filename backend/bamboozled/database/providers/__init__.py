"""Database provider implementations"""

from .base import DatabaseConfig, DatabaseProvider
from .sqlite import SQLiteProvider

__all__ = [
    "DatabaseConfig",
    "DatabaseProvider",
    "SQLiteProvider"
]

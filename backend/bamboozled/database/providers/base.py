"""Database provider interface"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncEngine


class DatabaseConfig(BaseModel):
    """Connection settings for a database provider"""

    provider: str = Field(default="sqlite", description="Backend name: sqlite, postgres or dynamodb")

    # SQLite
    path: Optional[str] = Field(default=None, description="Database file path")

    # Postgres
    host: Optional[str] = None
    port: Optional[int] = None
    database: Optional[str] = None
    user: Optional[str] = None
    password: Optional[str] = None

    # DynamoDB
    region: Optional[str] = None
    table_prefix: Optional[str] = None

    enable_logging: bool = Field(default=False, description="Echo SQL statements to the log")


class DatabaseProvider(ABC):
    """Interchangeable database backend.

    A provider owns the engine for one database and knows how to bring its
    schema up to date, check its health and move its data in and out as a
    versioned JSON document.
    """

    name: str

    def __init__(self, config: DatabaseConfig):
        self.config = config

    @property
    @abstractmethod
    def engine(self) -> AsyncEngine:
        """The connected engine; raises when not connected"""

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        pass

    @abstractmethod
    async def connect(self) -> AsyncEngine:
        """Open the database (idempotent) and return the engine"""

    @abstractmethod
    async def disconnect(self) -> None:
        pass

    @abstractmethod
    async def is_initialized(self) -> bool:
        """Whether every required table exists"""

    @abstractmethod
    async def migrate(self) -> None:
        """Apply pending migrations"""

    @abstractmethod
    async def reset(self) -> None:
        """Drop everything and rebuild the schema (all data is lost)"""

    @abstractmethod
    async def health_check(self) -> bool:
        pass

    @abstractmethod
    async def export_data(self) -> Dict[str, Any]:
        """Dump every table into the export envelope"""

    @abstractmethod
    async def import_data(self, data: Dict[str, Any]) -> None:
        """Replace all data with the contents of an export envelope"""

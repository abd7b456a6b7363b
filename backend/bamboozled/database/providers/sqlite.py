"""SQLite database provider"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from sqlalchemy import delete, event, inspect, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from bamboozled.database import schema
from bamboozled.database.exceptions import ConnectionError, ImportFormatError, handle_sqlalchemy_error
from bamboozled.database.helpers import utc_now
from bamboozled.database.migration_manager import MigrationManager
from bamboozled.database.retry import with_gentle_retry
from bamboozled.monitoring.logging_config import log_performance

from .base import DatabaseConfig, DatabaseProvider

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0"
DEFAULT_PATH = "./data/bamboozled.db"
MEMORY_PATH = ":memory:"


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class SQLiteProvider(DatabaseProvider):
    """Embedded SQLite database accessed through an aiosqlite engine"""

    name = "sqlite"

    def __init__(self, config: DatabaseConfig):
        super().__init__(config)
        self._engine: Optional[AsyncEngine] = None
        self._connection_lock = asyncio.Lock()

    @property
    def path(self) -> str:
        return self.config.path or DEFAULT_PATH

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise ConnectionError("Database not connected. Call connect() first.")
        return self._engine

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    async def connect(self) -> AsyncEngine:
        """Open the database file, creating its directory if needed"""
        async with self._connection_lock:
            if self._engine is not None:
                return self._engine

            if self.path == MEMORY_PATH:
                # One shared connection, otherwise every checkout sees an empty database
                engine = create_async_engine(
                    "sqlite+aiosqlite://",
                    poolclass=StaticPool,
                    connect_args={"check_same_thread": False}
                )
            else:
                db_path = Path(self.path)
                if not db_path.parent.exists():
                    logger.info(f"Creating data directory: {db_path.parent}")
                    db_path.parent.mkdir(parents=True, exist_ok=True)

                if db_path.exists():
                    logger.info(f"Found existing database at {db_path}")
                else:
                    logger.info(f"Creating new database at {db_path}")

                engine = create_async_engine(
                    f"sqlite+aiosqlite:///{db_path}",
                    poolclass=NullPool
                )

            if self.config.enable_logging:
                logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)

            event.listen(engine.sync_engine, "connect", _enable_foreign_keys)
            self._engine = engine
            return engine

    async def disconnect(self) -> None:
        async with self._connection_lock:
            if self._engine is not None:
                await self._engine.dispose()
                self._engine = None
                logger.info("Disconnected from SQLite database")

    async def is_initialized(self) -> bool:
        engine = self.engine

        try:
            async with engine.connect() as conn:
                table_names = await conn.run_sync(
                    lambda sync_conn: inspect(sync_conn).get_table_names()
                )
        except SQLAlchemyError as e:
            logger.error(f"Could not inspect database tables: {e}")
            return False

        return all(table in table_names for table in schema.REQUIRED_TABLES)

    async def migrate(self) -> None:
        logger.info("Running database migrations...")
        applied = await MigrationManager(self.engine).migrate()
        logger.info(f"Migrations completed successfully ({len(applied)} applied)")

    async def reset(self) -> None:
        logger.warning("Resetting database (all data will be lost)...")
        manager = MigrationManager(self.engine)
        await manager.reset()

        # Tables created outside the migration history
        async with self.engine.begin() as conn:
            await conn.run_sync(schema.metadata.drop_all)

        await manager.migrate()
        logger.info("Database reset complete")

    async def health_check(self) -> bool:
        if self._engine is None:
            return False

        try:
            async with self._engine.connect() as conn:
                await conn.execute(select(schema.users.c.user_id).limit(1))
            return True
        except SQLAlchemyError as e:
            logger.error(f"Database health check failed: {e}")
            return False

    @log_performance
    @with_gentle_retry
    async def export_data(self) -> Dict[str, Any]:
        logger.info("Exporting database data...")

        data: Dict[str, Any] = {}
        async with self.engine.connect() as conn:
            for key, table in schema.EXPORT_TABLES.items():
                result = await conn.execute(select(table))
                data[key] = [dict(row) for row in result.mappings().all()]

        counts = ", ".join(f"{len(rows)} {key}" for key, rows in data.items())
        logger.info(f"Exported {counts}")

        return {
            "version": EXPORT_VERSION,
            "exportedAt": utc_now(),
            "provider": self.name,
            "data": data
        }

    @log_performance
    @with_gentle_retry
    async def import_data(self, data: Dict[str, Any]) -> None:
        if not isinstance(data, dict) or not data.get("version") or not isinstance(data.get("data"), dict):
            raise ImportFormatError("Invalid import data format")

        payload = data["data"]
        for key in schema.EXPORT_TABLES:
            rows = payload.get(key)
            if rows is None:
                continue
            if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
                raise ImportFormatError(f"Invalid import data format: '{key}' must be a list of objects")

        logger.info(f"Importing database data (format version {data['version']})...")

        try:
            async with self.engine.begin() as conn:
                for table in schema.CLEAR_ORDER:
                    await conn.execute(delete(table))

                for key, table in schema.EXPORT_TABLES.items():
                    rows = payload.get(key) or []
                    if not rows:
                        continue
                    columns = set(table.c.keys())
                    await conn.execute(
                        insert(table),
                        [{k: v for k, v in row.items() if k in columns} for row in rows]
                    )
                    logger.debug(f"Imported {len(rows)} rows into {table.name}")
        except SQLAlchemyError as e:
            raise handle_sqlalchemy_error(e) from e

        logger.info("Data import complete")

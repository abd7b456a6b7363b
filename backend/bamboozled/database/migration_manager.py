"""Versioned schema migrations with batch tracking and rollback"""

import importlib.util
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import BaseModel
from sqlalchemy import Column, Integer, MetaData, Table, Text, delete, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from .exceptions import MigrationError
from .helpers import utc_now

logger = logging.getLogger(__name__)

DEFAULT_MIGRATIONS_DIR = Path(__file__).parent / "migrations"

_FILENAME_PATTERN = re.compile(r"^(\d{14})_")
_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_]*$")

_tracking_metadata = MetaData()

migrations_table = Table(
    "_migrations",
    _tracking_metadata,
    Column("migration_name", Text, primary_key=True),
    Column("executed_at", Text, nullable=False),
    Column("batch", Integer, nullable=False),
)

MigrationStep = Callable[[AsyncConnection], Awaitable[None]]


@dataclass
class Migration:
    name: str
    timestamp: int
    up: MigrationStep
    down: MigrationStep


class MigrationStatus(BaseModel):
    """Execution state of one migration file"""
    name: str
    executed: bool
    batch: Optional[int] = None
    executed_at: Optional[str] = None


def extract_timestamp(filename: str) -> int:
    """Extract timestamp from migration filename (format: YYYYMMDDHHMMSS_name.py)"""
    match = _FILENAME_PATTERN.match(filename)
    if not match:
        raise MigrationError(
            f"Invalid migration filename: {filename}. Expected format: YYYYMMDDHHMMSS_name.py"
        )
    return int(match.group(1))


class MigrationManager:
    """Runs migration files found in a directory against one engine.

    Executed migrations are recorded in ``_migrations`` together with the
    batch they ran in, so ``rollback()`` can undo exactly the last
    ``migrate()`` call.
    """

    def __init__(self, engine: AsyncEngine, migrations_dir: Optional[Path] = None):
        self.engine = engine
        self.migrations_dir = Path(migrations_dir) if migrations_dir else DEFAULT_MIGRATIONS_DIR

    async def _ensure_migrations_table(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(_tracking_metadata.create_all)

    def _load_migrations(self) -> List[Migration]:
        """Load all available migrations from the migrations directory"""
        if not self.migrations_dir.exists():
            logger.info(f"No migrations directory found, creating {self.migrations_dir}")
            self.migrations_dir.mkdir(parents=True, exist_ok=True)
            return []

        migrations: List[Migration] = []
        for path in sorted(self.migrations_dir.glob("*.py")):
            if path.name.startswith("_"):
                continue

            timestamp = extract_timestamp(path.name)
            spec = importlib.util.spec_from_file_location(f"_bamboozled_migration_{path.stem}", path)
            module = importlib.util.module_from_spec(spec)
            try:
                spec.loader.exec_module(module)
            except Exception as e:
                raise MigrationError(f"Could not load migration {path.name}: {e}", e) from e

            up = getattr(module, "up", None)
            down = getattr(module, "down", None)
            if up is None or down is None:
                logger.warning(f"Migration {path.name} is missing up() or down() function")
                continue

            migrations.append(Migration(name=path.stem, timestamp=timestamp, up=up, down=down))

        return sorted(migrations, key=lambda m: m.timestamp)

    async def _get_executed(self) -> List[Dict[str, Any]]:
        async with self.engine.connect() as conn:
            result = await conn.execute(
                select(migrations_table).order_by(
                    migrations_table.c.batch.asc(),
                    migrations_table.c.migration_name.asc()
                )
            )
            return [dict(row) for row in result.mappings().all()]

    async def migrate(self) -> List[str]:
        """Run all pending migrations as a new batch"""
        await self._ensure_migrations_table()

        available = self._load_migrations()
        executed = await self._get_executed()
        executed_names = {record["migration_name"] for record in executed}
        pending = [m for m in available if m.name not in executed_names]

        if not pending:
            logger.info("No pending migrations")
            return []

        batch = max((record["batch"] for record in executed), default=0) + 1
        logger.info(f"Running {len(pending)} migration(s) in batch {batch}")

        for migration in pending:
            logger.info(f"Running: {migration.name}")
            try:
                async with self.engine.begin() as conn:
                    await migration.up(conn)
                    await conn.execute(
                        insert(migrations_table).values(
                            migration_name=migration.name,
                            executed_at=utc_now(),
                            batch=batch
                        )
                    )
            except (SQLAlchemyError, MigrationError) as e:
                logger.error(f"Failed: {migration.name}: {e}")
                raise MigrationError(f"Migration {migration.name} failed: {e}", e) from e

            logger.info(f"Completed: {migration.name}")

        return [m.name for m in pending]

    async def _roll_back(self, records: List[Dict[str, Any]]) -> List[str]:
        available = {m.name: m for m in self._load_migrations()}
        rolled_back: List[str] = []

        for record in reversed(records):
            name = record["migration_name"]
            migration = available.get(name)
            if migration is None:
                logger.warning(f"Migration file not found: {name}")
                continue

            logger.info(f"Rolling back: {name}")
            try:
                async with self.engine.begin() as conn:
                    await migration.down(conn)
                    await conn.execute(
                        delete(migrations_table).where(migrations_table.c.migration_name == name)
                    )
            except SQLAlchemyError as e:
                logger.error(f"Rollback failed: {name}: {e}")
                raise MigrationError(f"Rollback of {name} failed: {e}", e) from e

            rolled_back.append(name)

        return rolled_back

    async def rollback(self) -> List[str]:
        """Roll back the last batch of migrations"""
        await self._ensure_migrations_table()

        executed = await self._get_executed()
        if not executed:
            logger.info("No migrations to rollback")
            return []

        last_batch = max(record["batch"] for record in executed)
        to_rollback = [record for record in executed if record["batch"] == last_batch]
        logger.info(f"Rolling back {len(to_rollback)} migration(s) from batch {last_batch}")
        return await self._roll_back(to_rollback)

    async def status(self) -> List[MigrationStatus]:
        """Execution state of every available migration"""
        await self._ensure_migrations_table()

        executed = {record["migration_name"]: record for record in await self._get_executed()}
        statuses = []
        for migration in self._load_migrations():
            record = executed.get(migration.name)
            statuses.append(MigrationStatus(
                name=migration.name,
                executed=record is not None,
                batch=record["batch"] if record else None,
                executed_at=record["executed_at"] if record else None
            ))
        return statuses

    async def reset(self) -> List[str]:
        """Roll back every executed migration"""
        await self._ensure_migrations_table()

        executed = await self._get_executed()
        if not executed:
            logger.info("Database is already empty")
            return []

        logger.warning(f"Resetting database (rolling back {len(executed)} migration(s))")
        return await self._roll_back(executed)

    async def fresh(self) -> List[str]:
        """Reset and re-run all migrations"""
        await self.reset()
        return await self.migrate()


MIGRATION_TEMPLATE = '''"""
Migration: {name}
Created: {created}
"""

from sqlalchemy.ext.asyncio import AsyncConnection


async def up(conn: AsyncConnection) -> None:
    # await conn.exec_driver_sql("CREATE TABLE new_table (id TEXT PRIMARY KEY, name TEXT NOT NULL)")
    pass


async def down(conn: AsyncConnection) -> None:
    # await conn.exec_driver_sql("DROP TABLE new_table")
    pass
'''


def generate_migration_file(name: str, migrations_dir: Optional[Path] = None) -> Path:
    """Write an empty migration named ``<timestamp>_<name>.py`` and return its path"""
    if not _NAME_PATTERN.match(name):
        raise ValueError(
            f"Invalid migration name: {name}. Use lowercase letters, digits and underscores"
        )

    now = datetime.now(timezone.utc)
    target_dir = Path(migrations_dir) if migrations_dir else DEFAULT_MIGRATIONS_DIR
    target_dir.mkdir(parents=True, exist_ok=True)

    path = target_dir / f"{now.strftime('%Y%m%d%H%M%S')}_{name}.py"
    if path.exists():
        raise FileExistsError(f"Migration already exists: {path}")

    path.write_text(MIGRATION_TEMPLATE.format(name=name, created=now.isoformat()))
    logger.info(f"Created migration: {path.name}")
    return path

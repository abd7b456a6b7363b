"""Tests for the migration runner"""

import pytest

from bamboozled.database.exceptions import MigrationError
from bamboozled.database.migration_manager import (
    MigrationManager,
    extract_timestamp,
    generate_migration_file
)

INITIAL = "20250101000000_initial_schema"

CREATE_NOTES = '''
async def up(conn):
    await conn.exec_driver_sql("CREATE TABLE notes (id TEXT PRIMARY KEY)")


async def down(conn):
    await conn.exec_driver_sql("DROP TABLE notes")
'''


class TestMigrationManager:
    """Test cases for MigrationManager"""

    @pytest.fixture
    def manager(self, db):
        return MigrationManager(db.engine)

    async def test_migrate_is_idempotent(self, manager):
        assert await manager.migrate() == []

    async def test_status(self, manager):
        statuses = await manager.status()

        assert len(statuses) == 1
        assert statuses[0].name == INITIAL
        assert statuses[0].executed is True
        assert statuses[0].batch == 1
        assert statuses[0].executed_at is not None

    async def test_rollback_last_batch(self, manager, db):
        rolled_back = await manager.rollback()

        assert rolled_back == [INITIAL]
        assert await db.is_initialized() is False
        assert (await manager.status())[0].executed is False

    async def test_rollback_with_nothing_executed(self, manager):
        await manager.rollback()
        assert await manager.rollback() == []

    async def test_fresh(self, manager, db):
        applied = await manager.fresh()

        assert applied == [INITIAL]
        assert await db.is_initialized() is True

    async def test_new_migration_runs_in_next_batch(self, db, tmp_path):
        (tmp_path / "20300101000000_create_notes.py").write_text(CREATE_NOTES)
        manager = MigrationManager(db.engine, migrations_dir=tmp_path)

        assert await manager.migrate() == ["20300101000000_create_notes"]

        statuses = await manager.status()
        assert statuses[0].batch == 2

        assert await manager.rollback() == ["20300101000000_create_notes"]

    async def test_files_without_steps_are_skipped(self, db, tmp_path):
        (tmp_path / "20300101000000_empty.py").write_text("VALUE = 1\n")
        manager = MigrationManager(db.engine, migrations_dir=tmp_path)

        assert await manager.migrate() == []

    async def test_failing_migration(self, db, tmp_path):
        (tmp_path / "20300101000000_broken.py").write_text(
            'async def up(conn):\n    await conn.exec_driver_sql("CREATE TABLE users (id TEXT)")\n\n\n'
            'async def down(conn):\n    pass\n'
        )
        manager = MigrationManager(db.engine, migrations_dir=tmp_path)

        with pytest.raises(MigrationError):
            await manager.migrate()

        assert (await manager.status())[0].executed is False

    async def test_missing_directory_is_created(self, db, tmp_path):
        target = tmp_path / "migrations"
        manager = MigrationManager(db.engine, migrations_dir=target)

        assert await manager.migrate() == []
        assert target.exists()


class TestMigrationFiles:
    def test_extract_timestamp(self):
        assert extract_timestamp("20250101000000_initial_schema.py") == 20250101000000

    def test_extract_timestamp_invalid(self):
        with pytest.raises(MigrationError):
            extract_timestamp("initial_schema.py")

    def test_generate_migration_file(self, tmp_path):
        path = generate_migration_file("add_notes", tmp_path)

        assert path.exists()
        assert path.name.endswith("_add_notes.py")
        assert extract_timestamp(path.name) > 20250101000000
        content = path.read_text()
        assert "async def up(conn: AsyncConnection)" in content
        assert "async def down(conn: AsyncConnection)" in content

    @pytest.mark.parametrize("name", ["Add-Notes", "1notes", "", "add notes"])
    def test_generate_rejects_invalid_name(self, tmp_path, name):
        with pytest.raises(ValueError):
            generate_migration_file(name, tmp_path)

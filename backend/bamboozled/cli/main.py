"""
Bamboozled command line tools: database maintenance, puzzles and the API server.

Examples:
  # Seed development data
  bamboozled db:seed realistic
  bamboozled db:seed custom 20 8 150

  # Back up and restore
  bamboozled db:export --output backup.json
  bamboozled db:import backup.json

  # Puzzles
  bamboozled puzzles:load
  bamboozled puzzles:activate puzzle1-1
  bamboozled puzzles:rotate --check
"""

import asyncio
import logging
import sys
from typing import Optional, Tuple

import click
import uvicorn
from dotenv import load_dotenv
from sqlalchemy import func, select

from bamboozled.config import get_settings
from bamboozled.database import schema
from bamboozled.database.backup import export_to_file, import_from_file
from bamboozled.database.exceptions import DatabaseError
from bamboozled.database.init import initialize_database
from bamboozled.database.migration_manager import MigrationManager, generate_migration_file
from bamboozled.database.providers.factory import close_database_provider, create_database_provider
from bamboozled.database.seeders import (
    SeedSummary,
    clear_development_data,
    seed_development_data,
    seed_minimal,
    seed_realistic,
    seed_stress,
)
from bamboozled.monitoring.logging_config import setup_logging
from bamboozled.services.puzzle_service import PuzzleService
from bamboozled.services.rotation_service import RotationService

logger = logging.getLogger(__name__)

SEED_USAGE = """Usage: bamboozled db:seed [command]

Commands:
  minimal                          2 users, 1 puzzle, 5 guesses
  realistic                        10 users, 5 puzzles, 50 guesses (default)
  stress                           50 users, 20 puzzles, 500 guesses
  clear                            Delete all data except achievements
  custom <users> <puzzles> <guesses>"""

SEED_PRESETS = {
    "minimal": seed_minimal,
    "realistic": seed_realistic,
    "stress": seed_stress,
}

MIGRATE_ACTIONS = ("migrate", "status", "rollback", "fresh", "reset")


def _print_summary(summary: SeedSummary) -> None:
    click.echo("📊 Summary:")
    for table, count in summary.model_dump().items():
        click.echo(f"   {table}: {count}")


async def _run_with_database(action, migrate: bool = True):
    """Connect (and migrate) the configured database, run ``action(provider)``, disconnect"""
    try:
        provider = await create_database_provider()
        if migrate:
            await provider.migrate()
        return await action(provider)
    finally:
        await close_database_provider()


@click.group()
def cli():
    """Bamboozled management CLI"""
    load_dotenv()
    settings = get_settings()
    setup_logging(settings.log_level, enable_json=False)


@cli.command("db:seed")
@click.argument("command", default="realistic")
@click.argument("counts", nargs=-1)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation for clear")
def db_seed(command: str, counts: Tuple[str, ...], yes: bool):
    """Seed the database with development data"""
    if command not in (*SEED_PRESETS, "clear", "custom"):
        click.echo(f"❌ Unknown command: {command}\n")
        click.echo(SEED_USAGE)
        sys.exit(1)

    if command == "custom":
        if len(counts) != 3 or not all(c.isdigit() for c in counts):
            click.echo("❌ custom needs three numbers: <users> <puzzles> <guesses>\n")
            click.echo(SEED_USAGE)
            sys.exit(1)
        users, puzzles, guesses = (int(c) for c in counts)

    if command == "clear" and not yes:
        click.confirm("This deletes all users, puzzles and guesses. Continue?", abort=True)

    async def _seed(provider):
        if command == "clear":
            await clear_development_data(provider.engine)
            return None
        if command == "custom":
            return await seed_development_data(provider.engine, users=users, puzzles=puzzles, guesses=guesses)
        return await SEED_PRESETS[command](provider.engine)

    try:
        click.echo(f"🌱 Running seed command: {command}")
        summary = asyncio.run(_run_with_database(_seed))
    except DatabaseError as e:
        logger.error(f"Seeding failed: {e}")
        click.echo(f"❌ Seeding failed: {e}")
        raise click.Abort()

    if summary is None:
        click.echo("✅ Development data cleared (achievements preserved)")
    else:
        click.echo("✅ Seeding complete")
        _print_summary(summary)


@cli.command("db:import")
@click.argument("file", type=click.Path())
def db_import(file: str):
    """Replace all data with the contents of an export file"""
    async def _import(provider):
        return await import_from_file(provider, file)

    try:
        click.echo(f"📥 Importing data from {file}...")
        counts = asyncio.run(_run_with_database(_import))
    except (DatabaseError, FileNotFoundError) as e:
        logger.error(f"Import failed: {e}")
        click.echo(f"❌ Import failed: {e}")
        raise click.Abort()

    click.echo("✅ Import complete")
    for key, count in counts.items():
        click.echo(f"   {key}: {count}")


@cli.command("db:export")
@click.option("--output", "-o", type=click.Path(), help="Output file (defaults to the export directory)")
def db_export(output: Optional[str]):
    """Write all data to a JSON export file"""
    async def _export(provider):
        return await export_to_file(provider, output)

    try:
        result = asyncio.run(_run_with_database(_export))
    except (DatabaseError, OSError) as e:
        logger.error(f"Export failed: {e}")
        click.echo(f"❌ Export failed: {e}")
        raise click.Abort()

    click.echo(f"✅ Exported database to {result['path']}")
    for key, count in result["counts"].items():
        click.echo(f"   {key}: {count}")


@cli.command("db:health")
def db_health():
    """Check the database connection and schema; exits 1 when unhealthy"""
    async def _health(provider):
        healthy = await provider.health_check()
        initialized = await provider.is_initialized()
        counts = {}
        if healthy and initialized:
            async with provider.engine.connect() as conn:
                for table in (schema.users, schema.puzzles, schema.guesses, schema.achievements):
                    counts[table.name] = (
                        await conn.execute(select(func.count()).select_from(table))
                    ).scalar_one()
        return provider.name, healthy, initialized, counts

    try:
        name, healthy, initialized, counts = asyncio.run(_run_with_database(_health, migrate=False))
    except DatabaseError as e:
        click.echo(f"❌ Health check failed: {e}")
        sys.exit(1)

    click.echo(f"Provider: {name}")
    click.echo(f"{'✅' if healthy else '❌'} Connection: {'healthy' if healthy else 'unhealthy'}")
    click.echo(f"{'✅' if initialized else '❌'} Schema: {'initialized' if initialized else 'not initialized'}")
    for table, count in counts.items():
        click.echo(f"   {table}: {count}")

    if not (healthy and initialized):
        sys.exit(1)


@cli.command("db:migrate")
@click.argument("action", default="migrate")
def db_migrate(action: str):
    """Run migrations: migrate, status, rollback, fresh or reset"""
    if action not in MIGRATE_ACTIONS:
        click.echo(f"❌ Unknown action: {action}. Choose one of: {', '.join(MIGRATE_ACTIONS)}")
        sys.exit(1)

    async def _migrate(provider):
        manager = MigrationManager(provider.engine)
        return await getattr(manager, action)()

    try:
        result = asyncio.run(_run_with_database(_migrate, migrate=False))
    except DatabaseError as e:
        logger.error(f"Migration failed: {e}")
        click.echo(f"❌ Migration failed: {e}")
        raise click.Abort()

    if action == "status":
        for status in result:
            mark = "✅" if status.executed else "⏳"
            batch = f" (batch {status.batch})" if status.executed else ""
            click.echo(f"{mark} {status.name}{batch}")
        return

    if not result:
        click.echo("Nothing to do")
    for name in result:
        click.echo(f"   {name}")
    click.echo(f"✅ {action} complete ({len(result)} migration(s))")


@cli.command("db:make-migration")
@click.argument("name")
def db_make_migration(name: str):
    """Create an empty migration file"""
    try:
        path = generate_migration_file(name)
    except (ValueError, FileExistsError) as e:
        click.echo(f"❌ {e}")
        raise click.Abort()
    click.echo(f"✅ Created migration: {path}")


@cli.command("db:init")
@click.option("--reset", is_flag=True, help="Drop and rebuild all tables")
def db_init(reset: bool):
    """Create or update the database schema"""
    async def _init():
        try:
            return await initialize_database(reset=reset)
        finally:
            await close_database_provider()

    try:
        result = asyncio.run(_init())
    except DatabaseError as e:
        click.echo(f"❌ Database initialization failed: {e}")
        raise click.Abort()

    click.echo(f"✅ Database ready ({result['provider']}, {result['action']})")


@cli.command("puzzles:load")
@click.option("--file", "path", type=click.Path(), help="Puzzle data file (defaults to PUZZLE_DATA_PATH)")
def puzzles_load(path: Optional[str]):
    """Create puzzles from the scraped puzzle data file"""
    async def _load(provider):
        return await PuzzleService().load_puzzles_from_file(path)

    try:
        created = asyncio.run(_run_with_database(_load))
    except (DatabaseError, ValueError) as e:
        click.echo(f"❌ Loading puzzles failed: {e}")
        raise click.Abort()
    click.echo(f"✅ Loaded {created} new puzzle(s)")


@cli.command("puzzles:activate")
@click.argument("key")
def puzzles_activate(key: str):
    """Make a puzzle the active one for the coming week"""
    async def _activate(provider):
        return await PuzzleService().activate_puzzle(key)

    try:
        puzzle = asyncio.run(_run_with_database(_activate))
    except (DatabaseError, ValueError) as e:
        click.echo(f"❌ {e}")
        raise click.Abort()
    click.echo(f"✅ Activated {puzzle.puzzle_key} until {puzzle.week_end_date.isoformat()}")


@cli.command("puzzles:rotate")
@click.option("--check", is_flag=True, help="Only rotate when the active puzzle's week has ended")
def puzzles_rotate(check: bool):
    """Persist the weekly leaderboard and activate the next puzzle"""
    async def _rotate(provider):
        service = RotationService()
        return await (service.check_and_rotate() if check else service.manual_rotate())

    try:
        puzzle = asyncio.run(_run_with_database(_rotate))
    except DatabaseError as e:
        click.echo(f"❌ Rotation failed: {e}")
        raise click.Abort()

    if puzzle is None:
        click.echo("No rotation performed")
    else:
        click.echo(f"✅ Active puzzle: {puzzle.puzzle_key}")


@cli.command("serve")
@click.option("--host", default=None, help="Bind address (defaults to API_HOST)")
@click.option("--port", default=None, type=int, help="Port (defaults to API_PORT)")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API and chat server"""
    settings = get_settings()
    uvicorn.run(
        "bamboozled.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        log_config=None
    )


if __name__ == "__main__":
    cli()

"""Shared fixtures: a migrated temp-file SQLite database and row factories"""

import os
from datetime import datetime, timedelta, timezone

os.environ.setdefault("APP_ENV", "test")

import pytest

from bamboozled.config import get_settings
from bamboozled.database.providers.base import DatabaseConfig
from bamboozled.database.providers.factory import close_database_provider, create_database_provider
from bamboozled.models.guess import GuessCreate
from bamboozled.models.puzzle import PuzzleCreate
from bamboozled.models.user import UserCreate
from bamboozled.repositories.guess_repository import GuessRepository
from bamboozled.repositories.puzzle_repository import PuzzleRepository
from bamboozled.repositories.user_repository import UserRepository


@pytest.fixture
def db_config(tmp_path):
    return DatabaseConfig(provider="sqlite", path=str(tmp_path / "test.db"))


@pytest.fixture
async def db(db_config):
    """Connected provider with every migration applied"""
    await close_database_provider()
    provider = await create_database_provider(db_config)
    await provider.migrate()
    yield provider
    await close_database_provider()


@pytest.fixture
def settings_env(tmp_path, monkeypatch):
    """Point the settings at temp paths"""
    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "cli.db"))
    monkeypatch.setenv("EXPORT_DIR", str(tmp_path / "exports"))
    monkeypatch.setenv("PUZZLE_DATA_PATH", str(tmp_path / "puzzle-data.json"))
    monkeypatch.setenv("PUZZLE_IMAGES_PATH", str(tmp_path / "images"))
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def make_user(db):
    repo = UserRepository()

    async def _make_user(display_name="Alice", user_id=None, **fields):
        return await repo.create(UserCreate(user_id=user_id, display_name=display_name, **fields))

    return _make_user


@pytest.fixture
def make_puzzle(db):
    repo = PuzzleRepository()

    async def _make_puzzle(key="puzzle1-1", answer="Falling Temperature", active=False, week_start=None):
        start = week_start or datetime.now(timezone.utc)
        puzzle = await repo.create(PuzzleCreate(
            puzzle_key=key,
            answer=answer,
            image_path=f"{key}.png",
            week_start_date=start,
            week_end_date=start + timedelta(days=7)
        ))
        if active:
            await repo.set_active_puzzle(puzzle.puzzle_id)
            puzzle = await repo.find_by_id(puzzle.puzzle_id)
        return puzzle

    return _make_puzzle


@pytest.fixture
def make_guess(db):
    repo = GuessRepository()

    async def _make_guess(user_id, puzzle_id, text="wrong", is_correct=False, guess_number=1, timestamp=None):
        return await repo.create(GuessCreate(
            user_id=user_id,
            puzzle_id=puzzle_id,
            guess_text=text,
            is_correct=is_correct,
            guess_number=guess_number
        ), timestamp=timestamp)

    return _make_guess

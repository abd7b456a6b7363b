"""Tests for development data seeding"""

from sqlalchemy import func, select

from bamboozled.database import schema
from bamboozled.database.seeders import (
    clear_development_data,
    seed_development_data,
    seed_minimal
)
from bamboozled.models.validation import ProgressValidation
from bamboozled.repositories.puzzle_repository import PuzzleRepository
from bamboozled.repositories.user_repository import UserRepository


async def count_rows(engine, table):
    async with engine.connect() as conn:
        return (await conn.execute(select(func.count()).select_from(table))).scalar_one()


class TestSeeders:
    """Test cases for the seeding helpers"""

    async def test_seed_minimal(self, db):
        summary = await seed_minimal(db.engine)

        assert summary.users == 2
        assert summary.puzzles == 1
        assert summary.guesses == 5
        assert await UserRepository().count() == 2
        assert await count_rows(db.engine, schema.guesses) == 5

    async def test_one_active_puzzle(self, db):
        await seed_development_data(db.engine, users=3, puzzles=4, guesses=0)

        puzzles = await PuzzleRepository().get_all()
        assert len(puzzles) == 4
        assert sum(1 for p in puzzles if p.is_active) == 1
        assert len({p.puzzle_key for p in puzzles}) == 4

    async def test_mood_history_and_achievements(self, db):
        summary = await seed_development_data(db.engine, users=2, puzzles=1, guesses=0)

        assert 6 <= summary.mood_history <= 10
        assert 4 <= summary.user_achievements <= 10

        async with db.engine.connect() as conn:
            progress = (await conn.execute(select(schema.user_achievements.c.progress_data))).scalars().all()
        assert all(ProgressValidation.is_valid(raw) for raw in progress)

    async def test_guess_numbers_are_sequential(self, db):
        await seed_development_data(db.engine, users=1, puzzles=1, guesses=4)

        async with db.engine.connect() as conn:
            numbers = (await conn.execute(
                select(schema.guesses.c.guess_number).order_by(schema.guesses.c.guess_number)
            )).scalars().all()
        assert numbers == [1, 2, 3, 4]

    async def test_clear_preserves_achievements(self, db):
        await seed_minimal(db.engine)

        await clear_development_data(db.engine)

        assert await UserRepository().count() == 0
        assert await count_rows(db.engine, schema.guesses) == 0
        assert await count_rows(db.engine, schema.achievements) == 24

"""Development data seeders.

Usage::

    engine = get_engine()
    summary = await seed_development_data(engine, users=10, puzzles=5, guesses=50)

or from the command line::

    bamboozled db:seed realistic
"""

import logging
import random
import string
from datetime import datetime, timedelta, timezone
from typing import List

from pydantic import BaseModel
from sqlalchemy import delete, func, insert, select
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from bamboozled.models.validation import ProgressValidation

from . import schema
from .helpers import generate_id, to_db_timestamp, utc_now

logger = logging.getLogger(__name__)

SEED_NAMES = [
    "Alice the Achiever",
    "Bob the Builder",
    "Charlie the Champion",
    "Diana the Detective",
    "Eve the Expert",
    "Frank the Fast",
    "Grace the Genius",
    "Henry the Hero",
    "Iris the Incredible",
    "Jack the Jester",
]

SEED_PUZZLES = [
    {"key": "word-ladder-cat-dog", "answer": "cat > cot > cog > dog", "image_path": "/puzzles/word-ladder-1.png"},
    {"key": "rebus-once-upon-time", "answer": "once upon a time", "image_path": "/puzzles/rebus-1.png"},
    {"key": "math-sequence-fibonacci", "answer": "13", "image_path": "/puzzles/sequence-1.png"},
    {"key": "riddle-what-am-i", "answer": "keyboard", "image_path": "/puzzles/riddle-1.png"},
    {"key": "logic-grid-houses", "answer": "norwegian", "image_path": "/puzzles/logic-1.png"},
]

WRONG_ANSWERS = [
    "not sure",
    "maybe this?",
    "wrong answer",
    "incorrect",
    "try again",
    "hmm...",
    "close but no",
]

MOOD_REASONS = ["SOLVE", "STREAK_BREAK", "TIER_UP"]

CORRECT_GUESS_RATE = 0.3


class SeedSummary(BaseModel):
    """Row counts written by one seeding run"""
    users: int = 0
    puzzles: int = 0
    guesses: int = 0
    mood_history: int = 0
    user_achievements: int = 0


def _days_ago(max_days: float) -> str:
    return to_db_timestamp(datetime.now(timezone.utc) - timedelta(days=random.random() * max_days))


def _slack_id() -> str:
    return "U" + "".join(random.choices(string.ascii_uppercase + string.digits, k=8))


async def _seed_users(conn: AsyncConnection, count: int) -> List[str]:
    user_ids = []
    now = utc_now()

    for i in range(count):
        user_id = generate_id("user")
        user_ids.append(user_id)
        await conn.execute(insert(schema.users).values(
            user_id=user_id,
            slack_user_id=_slack_id(),
            display_name=SEED_NAMES[i % len(SEED_NAMES)],
            mood_tier=random.randint(0, 6),
            best_streak=random.randint(0, 14),
            hint_coins=random.randint(0, 10),
            created_at=_days_ago(90),
            updated_at=now
        ))

    return user_ids


async def _seed_puzzles(conn: AsyncConnection, count: int) -> List[str]:
    puzzle_ids = []
    now = datetime.now(timezone.utc)
    # Most recent Sunday
    current_week = (now - timedelta(days=(now.weekday() + 1) % 7)).replace(
        hour=0, minute=0, second=0, microsecond=0
    )

    for i in range(count):
        puzzle_id = generate_id("puzzle")
        puzzle_ids.append(puzzle_id)
        data = SEED_PUZZLES[i % len(SEED_PUZZLES)]
        week_start = current_week - timedelta(days=7 * i)

        await conn.execute(insert(schema.puzzles).values(
            puzzle_id=puzzle_id,
            puzzle_key=f"{data['key']}_{i}_{puzzle_id[-6:]}",
            answer=data["answer"],
            image_path=data["image_path"],
            week_start_date=to_db_timestamp(week_start),
            week_end_date=to_db_timestamp(week_start + timedelta(days=6)),
            is_active=1 if i == 0 else 0,
            created_at=utc_now()
        ))

    return puzzle_ids


async def _seed_guesses(conn: AsyncConnection, user_ids: List[str], puzzle_ids: List[str], count: int) -> int:
    created = 0

    for _ in range(count):
        user_id = random.choice(user_ids)
        puzzle_id = random.choice(puzzle_ids)

        answer = (await conn.execute(
            select(schema.puzzles.c.answer).where(schema.puzzles.c.puzzle_id == puzzle_id)
        )).scalar_one_or_none()
        if answer is None:
            continue

        previous = (await conn.execute(
            select(func.count()).select_from(schema.guesses).where(
                schema.guesses.c.user_id == user_id,
                schema.guesses.c.puzzle_id == puzzle_id
            )
        )).scalar_one()

        is_correct = random.random() < CORRECT_GUESS_RATE
        await conn.execute(insert(schema.guesses).values(
            guess_id=generate_id("guess"),
            user_id=user_id,
            puzzle_id=puzzle_id,
            guess_text=answer if is_correct else random.choice(WRONG_ANSWERS),
            is_correct=1 if is_correct else 0,
            guess_number=previous + 1,
            mood_tier_at_time=random.randint(0, 6),
            timestamp=_days_ago(7)
        ))
        created += 1

    return created


async def _seed_mood_history(conn: AsyncConnection, user_ids: List[str]) -> int:
    created = 0

    for user_id in user_ids:
        for _ in range(random.randint(3, 5)):
            old_tier = random.randint(0, 6)
            new_tier = max(0, min(6, old_tier + random.choice((1, -1))))
            await conn.execute(insert(schema.mood_history).values(
                mood_history_id=generate_id("mood"),
                user_id=user_id,
                old_tier=old_tier,
                new_tier=new_tier,
                reason=random.choice(MOOD_REASONS),
                streak_at_change=random.randint(0, 9),
                total_solves_at_change=random.randint(0, 49),
                timestamp=_days_ago(30)
            ))
            created += 1

    return created


async def _seed_user_achievements(conn: AsyncConnection, user_ids: List[str]) -> int:
    achievement_ids = (await conn.execute(select(schema.achievements.c.achievement_id))).scalars().all()
    if not achievement_ids:
        logger.warning("No achievements found, skipping user achievements")
        return 0

    created = 0
    for user_id in user_ids:
        count = min(random.randint(2, 5), len(achievement_ids))
        for achievement_id in random.sample(list(achievement_ids), count):
            await conn.execute(insert(schema.user_achievements).values(
                user_achievement_id=generate_id("ua"),
                user_id=user_id,
                achievement_id=achievement_id,
                unlocked_at=_days_ago(60),
                progress_data=ProgressValidation.complete(ProgressValidation.create(0, 100))
            ))
            created += 1

    return created


async def seed_development_data(
    engine: AsyncEngine,
    users: int = 5,
    puzzles: int = 3,
    guesses: int = 20
) -> SeedSummary:
    """Seed users, puzzles, guesses, mood history and achievements in one transaction"""
    logger.info("Seeding development data...")
    summary = SeedSummary()

    async with engine.begin() as conn:
        user_ids = await _seed_users(conn, users)
        summary.users = len(user_ids)
        logger.info(f"Created {summary.users} users")

        puzzle_ids = await _seed_puzzles(conn, puzzles)
        summary.puzzles = len(puzzle_ids)
        logger.info(f"Created {summary.puzzles} puzzles")

        if user_ids and puzzle_ids:
            summary.guesses = await _seed_guesses(conn, user_ids, puzzle_ids, guesses)
            logger.info(f"Created {summary.guesses} guesses")

        if user_ids:
            summary.mood_history = await _seed_mood_history(conn, user_ids)
            summary.user_achievements = await _seed_user_achievements(conn, user_ids)
            logger.info(
                f"Created {summary.mood_history} mood history entries and "
                f"granted {summary.user_achievements} achievements"
            )

    logger.info("Development data seeding complete")
    return summary


async def seed_minimal(engine: AsyncEngine) -> SeedSummary:
    return await seed_development_data(engine, users=2, puzzles=1, guesses=5)


async def seed_realistic(engine: AsyncEngine) -> SeedSummary:
    return await seed_development_data(engine, users=10, puzzles=5, guesses=50)


async def seed_stress(engine: AsyncEngine) -> SeedSummary:
    return await seed_development_data(engine, users=50, puzzles=20, guesses=500)


async def clear_development_data(engine: AsyncEngine) -> None:
    """Delete all game data; the achievement catalogue is preserved"""
    logger.info("Clearing development data...")

    async with engine.begin() as conn:
        for table in schema.CLEAR_ORDER:
            if table is schema.achievements:
                continue
            await conn.execute(delete(table))

    logger.info("Development data cleared (achievements preserved)")

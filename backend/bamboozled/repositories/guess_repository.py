"""Guess repository"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import distinct, func, literal_column, select

from bamboozled.database import schema
from bamboozled.database.helpers import parse_timestamp, to_db_timestamp, utc_now
from bamboozled.models.guess import Guess, GuessCreate

from .base import ROWID, BaseRepository, to_db_values

logger = logging.getLogger(__name__)


class GuessRepository(BaseRepository[Guess]):
    """Repository for guess data operations"""

    table = schema.guesses
    model = Guess
    id_prefix = "guess"

    async def create(self, guess_data: GuessCreate, timestamp: Optional[datetime] = None) -> Guess:
        values = to_db_values(guess_data.model_dump())
        values["timestamp"] = to_db_timestamp(timestamp) if timestamp else utc_now()
        return await super().create(values)

    async def find_by_id(self, guess_id: str) -> Optional[Guess]:
        return await self.get_by_id(guess_id)

    def _for_user_puzzle(self, user_id: str, puzzle_id: str):
        return (self.table.c.user_id == user_id, self.table.c.puzzle_id == puzzle_id)

    async def get_user_guesses_for_puzzle(self, user_id: str, puzzle_id: str) -> List[Guess]:
        """Guesses of one user for one puzzle, oldest first"""
        return await self.query(
            *self._for_user_puzzle(user_id, puzzle_id),
            order_by=[self.table.c.timestamp, self.table.c.guess_number, ROWID]
        )

    async def has_user_solved_puzzle(self, user_id: str, puzzle_id: str) -> bool:
        return await self.count(*self._for_user_puzzle(user_id, puzzle_id), self.table.c.is_correct == 1) > 0

    async def get_correct_guess_for_puzzle(self, user_id: str, puzzle_id: str) -> Optional[Guess]:
        guesses = await self.query(
            *self._for_user_puzzle(user_id, puzzle_id),
            self.table.c.is_correct == 1,
            order_by=[self.table.c.timestamp],
            limit=1
        )
        return guesses[0] if guesses else None

    async def get_first_correct_guess_for_puzzle(self, puzzle_id: str) -> Optional[Guess]:
        """Earliest correct guess by anyone"""
        guesses = await self.query(
            self.table.c.puzzle_id == puzzle_id,
            self.table.c.is_correct == 1,
            order_by=[self.table.c.timestamp, ROWID],
            limit=1
        )
        return guesses[0] if guesses else None

    async def get_all_guesses_by_user(self, user_id: str) -> List[Guess]:
        return await self.query(
            self.table.c.user_id == user_id,
            order_by=[self.table.c.timestamp.desc()]
        )

    async def count_solves(self, user_id: str) -> int:
        """Distinct puzzles solved"""
        count = await self._scalar(
            select(func.count(distinct(self.table.c.puzzle_id))).where(
                self.table.c.user_id == user_id,
                self.table.c.is_correct == 1
            )
        )
        return count or 0

    async def count_guesses(self, user_id: str) -> int:
        return await self.count(self.table.c.user_id == user_id)

    async def count_solves_within_guesses(self, user_id: str, max_guesses: int) -> int:
        """Distinct puzzles solved with a guess number of at most ``max_guesses``"""
        count = await self._scalar(
            select(func.count(distinct(self.table.c.puzzle_id))).where(
                self.table.c.user_id == user_id,
                self.table.c.is_correct == 1,
                self.table.c.guess_number <= max_guesses
            )
        )
        return count or 0

    async def get_solved_week_starts(self, user_id: str) -> List[datetime]:
        """Distinct week starts of solved puzzles, newest first"""
        puzzles = schema.puzzles
        rows = await self._fetch_all(
            select(puzzles.c.week_start_date).distinct()
            .select_from(self.table.join(puzzles, puzzles.c.puzzle_id == self.table.c.puzzle_id))
            .where(self.table.c.user_id == user_id, self.table.c.is_correct == 1)
            .order_by(puzzles.c.week_start_date.desc())
        )
        return [parse_timestamp(row["week_start_date"]) for row in rows]

    async def get_puzzle_solvers(self, puzzle_id: str) -> List[Dict[str, Any]]:
        """First correct guess of each solver, in solve order.

        Each entry holds ``user_id``, ``display_name``, ``solve_time`` and
        ``guess_number``.
        """
        users = schema.users
        rows = await self._fetch_all(
            select(
                self.table.c.user_id,
                users.c.display_name,
                self.table.c.timestamp,
                self.table.c.guess_number
            )
            .select_from(self.table.join(users, users.c.user_id == self.table.c.user_id))
            .where(self.table.c.puzzle_id == puzzle_id, self.table.c.is_correct == 1)
            .order_by(self.table.c.timestamp, self.table.c.guess_number, literal_column("guesses.rowid"))
        )

        solvers: Dict[str, Dict[str, Any]] = {}
        for row in rows:
            if row["user_id"] in solvers:
                continue
            solvers[row["user_id"]] = {
                "user_id": row["user_id"],
                "display_name": row["display_name"],
                "solve_time": parse_timestamp(row["timestamp"]),
                "guess_number": row["guess_number"],
            }
        return list(solvers.values())

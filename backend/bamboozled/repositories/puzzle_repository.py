"""Puzzle repository"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import update

from bamboozled.database import schema
from bamboozled.database.exceptions import ItemNotFoundError
from bamboozled.database.helpers import to_db_timestamp, utc_now
from bamboozled.models.puzzle import Puzzle, PuzzleCreate, PuzzleUpdate

from .base import ROWID, BaseRepository, to_db_values

logger = logging.getLogger(__name__)


class PuzzleRepository(BaseRepository[Puzzle]):
    """Repository for puzzle data operations"""

    table = schema.puzzles
    model = Puzzle
    id_prefix = "puzzle"

    async def create(self, puzzle_data: Union[PuzzleCreate, Dict[str, Any]]) -> Puzzle:
        if isinstance(puzzle_data, dict):
            puzzle_data = PuzzleCreate(**puzzle_data)

        values = to_db_values(puzzle_data.model_dump())
        values["created_at"] = utc_now()

        puzzle = await super().create(values)
        logger.info(f"Created puzzle {puzzle.puzzle_key}")
        return puzzle

    async def find_by_id(self, puzzle_id: str) -> Optional[Puzzle]:
        return await self.get_by_id(puzzle_id)

    async def find_by_key(self, puzzle_key: str) -> Optional[Puzzle]:
        puzzles = await self.query(self.table.c.puzzle_key == puzzle_key, limit=1)
        return puzzles[0] if puzzles else None

    async def get_active_puzzle(self) -> Optional[Puzzle]:
        puzzles = await self.query(
            self.table.c.is_active == 1,
            order_by=[self.table.c.week_start_date.desc()],
            limit=1
        )
        return puzzles[0] if puzzles else None

    async def set_active_puzzle(self, puzzle_id: str) -> None:
        """Deactivate every puzzle, then activate one, in a single transaction"""
        if not await self.exists(puzzle_id):
            raise ItemNotFoundError(f"Puzzle not found: {puzzle_id}")

        await self._execute(
            update(self.table).where(self.table.c.is_active == 1).values(is_active=0),
            update(self.table).where(self.table.c.puzzle_id == puzzle_id).values(is_active=1)
        )
        logger.info(f"Activated puzzle {puzzle_id}")

    async def update(self, puzzle_id: str, updates: Union[PuzzleUpdate, Dict[str, Any]]) -> Puzzle:
        if isinstance(updates, dict):
            updates = PuzzleUpdate(**updates)
        return await super().update(puzzle_id, updates)

    async def get_all(self) -> List[Puzzle]:
        """All puzzles in creation order"""
        return await self.query(order_by=[self.table.c.created_at, ROWID])

    async def get_puzzles_by_week(self, week_start: datetime) -> List[Puzzle]:
        return await self.query(self.table.c.week_start_date == to_db_timestamp(week_start))

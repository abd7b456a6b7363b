"""Weekly leaderboard repository"""

import logging
from datetime import datetime
from typing import List

from sqlalchemy import delete, select

from bamboozled.database import schema
from bamboozled.database.helpers import parse_timestamp, to_db_timestamp
from bamboozled.models.leaderboard import WeeklyLeaderboard, WeeklyLeaderboardCreate

from .base import BaseRepository, to_db_values

logger = logging.getLogger(__name__)


class WeeklyLeaderboardRepository(BaseRepository[WeeklyLeaderboard]):
    """Persisted rankings of finished weeks"""

    table = schema.weekly_leaderboards
    model = WeeklyLeaderboard
    id_prefix = "lb"

    async def create(self, entry: WeeklyLeaderboardCreate) -> WeeklyLeaderboard:
        return await super().create(to_db_values(entry.model_dump()))

    async def get_by_week(self, week_start: datetime) -> List[WeeklyLeaderboard]:
        return await self.query(
            self.table.c.week_start_date == to_db_timestamp(week_start),
            order_by=[self.table.c.rank]
        )

    async def get_by_puzzle(self, puzzle_id: str) -> List[WeeklyLeaderboard]:
        return await self.query(self.table.c.puzzle_id == puzzle_id, order_by=[self.table.c.rank])

    async def exists_for_puzzle(self, puzzle_id: str) -> bool:
        return await self.count(self.table.c.puzzle_id == puzzle_id) > 0

    async def delete_by_puzzle(self, puzzle_id: str) -> int:
        deleted = await self._execute(delete(self.table).where(self.table.c.puzzle_id == puzzle_id))
        logger.debug(f"Deleted {deleted} leaderboard rows for puzzle {puzzle_id}")
        return deleted

    async def get_all_weeks(self) -> List[datetime]:
        """Distinct week starts, newest first"""
        rows = await self._fetch_all(
            select(self.table.c.week_start_date).distinct()
            .order_by(self.table.c.week_start_date.desc())
        )
        return [parse_timestamp(row["week_start_date"]) for row in rows]

    async def get_user_first_place_count(self, user_id: str) -> int:
        return await self.count(self.table.c.user_id == user_id, self.table.c.rank == 1)

    async def count_entries_for_user(self, user_id: str) -> int:
        return await self.count(self.table.c.user_id == user_id)

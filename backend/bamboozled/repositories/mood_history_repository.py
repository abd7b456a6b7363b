"""Mood history repository"""

from typing import List

from bamboozled.database import schema
from bamboozled.database.helpers import utc_now
from bamboozled.models.mood import MoodHistory, MoodHistoryCreate

from .base import ROWID, BaseRepository, to_db_values


class MoodHistoryRepository(BaseRepository[MoodHistory]):
    table = schema.mood_history
    model = MoodHistory
    id_prefix = "mood"

    async def create(self, entry: MoodHistoryCreate) -> MoodHistory:
        values = to_db_values(entry.model_dump())
        values["timestamp"] = utc_now()
        return await super().create(values)

    async def get_by_user(self, user_id: str) -> List[MoodHistory]:
        """History of one user, newest first"""
        return await self.query(
            self.table.c.user_id == user_id,
            order_by=[self.table.c.timestamp.desc(), ROWID.desc()]
        )

    async def has_streak_break_at_least(self, user_id: str, streak: int) -> bool:
        """Whether the user ever lost a streak of at least ``streak`` weeks"""
        return await self.count(
            self.table.c.user_id == user_id,
            self.table.c.reason == "STREAK_BREAK",
            self.table.c.streak_at_change >= streak
        ) > 0

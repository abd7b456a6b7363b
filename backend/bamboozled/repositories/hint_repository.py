"""Hint repository"""

from typing import List

from sqlalchemy import func, select

from bamboozled.database import schema
from bamboozled.database.helpers import utc_now
from bamboozled.models.hint import Hint, HintCreate

from .base import BaseRepository, to_db_values


class HintRepository(BaseRepository[Hint]):
    table = schema.hints
    model = Hint
    id_prefix = "hint"

    async def create(self, hint_data: HintCreate) -> Hint:
        values = to_db_values(hint_data.model_dump())
        values["timestamp"] = utc_now()
        return await super().create(values)

    async def get_hints_for_user_puzzle(self, user_id: str, puzzle_id: str) -> List[Hint]:
        return await self.query(
            self.table.c.user_id == user_id,
            self.table.c.puzzle_id == puzzle_id,
            order_by=[self.table.c.hint_level]
        )

    async def get_hints_by_user(self, user_id: str) -> List[Hint]:
        return await self.query(
            self.table.c.user_id == user_id,
            order_by=[self.table.c.timestamp.desc()]
        )

    async def get_total_coins_spent(self, user_id: str) -> int:
        total = await self._scalar(
            select(func.coalesce(func.sum(self.table.c.coins_spent), 0)).where(
                self.table.c.user_id == user_id
            )
        )
        return int(total or 0)

"""Generated puzzle repository"""

import logging
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import func, select

from bamboozled.database import schema
from bamboozled.database.helpers import utc_now
from bamboozled.models.generated_puzzle import (
    GeneratedPuzzle,
    GeneratedPuzzleCreate,
    GeneratedPuzzleStats,
    GeneratedPuzzleStatus,
    GeneratedPuzzleUpdate
)

from .base import BaseRepository, to_db_values

logger = logging.getLogger(__name__)


class GeneratedPuzzleRepository(BaseRepository[GeneratedPuzzle]):
    """Review queue of generated puzzle ideas"""

    table = schema.generated_puzzles
    model = GeneratedPuzzle
    id_prefix = "gen"

    async def create(self, puzzle_data: GeneratedPuzzleCreate) -> GeneratedPuzzle:
        values = to_db_values(puzzle_data.model_dump())
        values.update(status="PENDING", created_at=utc_now())
        return await super().create(values)

    async def find_by_id(self, generated_puzzle_id: str) -> Optional[GeneratedPuzzle]:
        return await self.get_by_id(generated_puzzle_id)

    async def find_by_status(self, status: GeneratedPuzzleStatus) -> List[GeneratedPuzzle]:
        return await self.query(
            self.table.c.status == status,
            order_by=[self.table.c.created_at.desc()]
        )

    async def find_pending(self) -> List[GeneratedPuzzle]:
        return await self.find_by_status("PENDING")

    async def find_approved(self) -> List[GeneratedPuzzle]:
        return await self.find_by_status("APPROVED")

    async def find_by_user(self, user_id: str) -> List[GeneratedPuzzle]:
        return await self.query(
            self.table.c.generated_by == user_id,
            order_by=[self.table.c.created_at.desc()]
        )

    async def update(
        self,
        generated_puzzle_id: str,
        updates: Union[GeneratedPuzzleUpdate, Dict[str, Any]]
    ) -> GeneratedPuzzle:
        if isinstance(updates, dict):
            updates = GeneratedPuzzleUpdate(**updates)
        return await super().update(generated_puzzle_id, updates)

    async def approve(self, generated_puzzle_id: str, reviewed_by: str) -> GeneratedPuzzle:
        return await self.update(generated_puzzle_id, {
            "status": "APPROVED",
            "reviewed_by": reviewed_by,
            "reviewed_at": utc_now()
        })

    async def reject(self, generated_puzzle_id: str, reviewed_by: str, reason: str) -> GeneratedPuzzle:
        return await self.update(generated_puzzle_id, {
            "status": "REJECTED",
            "reviewed_by": reviewed_by,
            "rejection_reason": reason,
            "reviewed_at": utc_now()
        })

    async def get_stats(self) -> GeneratedPuzzleStats:
        rows = await self._fetch_all(
            select(self.table.c.status, func.count().label("count")).group_by(self.table.c.status)
        )
        counts = {row["status"]: row["count"] for row in rows}
        return GeneratedPuzzleStats(
            total=sum(counts.values()),
            pending=counts.get("PENDING", 0),
            approved=counts.get("APPROVED", 0),
            rejected=counts.get("REJECTED", 0)
        )

"""Weekly puzzle rotation"""

import logging
from datetime import datetime, timezone
from typing import Optional

from bamboozled.database.exceptions import DatabaseError
from bamboozled.models.puzzle import Puzzle

from .puzzle_service import PuzzleService
from .stats_service import StatsService

logger = logging.getLogger(__name__)


class RotationService:
    """Closes out the active puzzle's week and activates the next puzzle.

    Nothing here runs on a timer; call ``check_and_rotate`` from cron or
    ``bamboozled puzzles:rotate --check``.
    """

    def __init__(self):
        self.puzzle_service = PuzzleService()
        self.stats_service = StatsService()

    async def check_and_rotate(self, now: Optional[datetime] = None) -> Optional[Puzzle]:
        """Rotate if the active puzzle's week has ended; returns the newly active puzzle"""
        now = now or datetime.now(timezone.utc)

        active = await self.puzzle_service.get_active_puzzle()
        if active is None:
            logger.warning("No active puzzle found during rotation check")
            return None

        if not active.is_expired(now):
            hours_left = int((active.week_end_date - now).total_seconds() // 3600)
            logger.info(f"Current puzzle: {active.puzzle_key} ({hours_left}h remaining)")
            return None

        logger.info(f"Week ended for puzzle {active.puzzle_key}. Rotating to next puzzle...")
        try:
            await self.stats_service.persist_weekly_leaderboard(active.puzzle_id, active.week_start_date)
        except DatabaseError as e:
            logger.error(f"Failed to persist leaderboard for {active.puzzle_key}: {e}")

        next_puzzle = await self.puzzle_service.rotate_to_next_puzzle()
        if next_puzzle is None:
            logger.warning("No next puzzle available")
        return next_puzzle

    async def manual_rotate(self) -> Optional[Puzzle]:
        """Persist the current leaderboard and rotate regardless of the date"""
        logger.info("Manual puzzle rotation triggered")

        active = await self.puzzle_service.get_active_puzzle()
        if active is not None:
            await self.stats_service.persist_weekly_leaderboard(active.puzzle_id, active.week_start_date)

        return await self.puzzle_service.rotate_to_next_puzzle()

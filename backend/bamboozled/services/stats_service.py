"""Player statistics and leaderboards"""

import logging
from datetime import datetime
from typing import List, Optional

from bamboozled.models.leaderboard import AllTimeLeaderboardEntry, LeaderboardEntry, WeeklyLeaderboardCreate
from bamboozled.models.user import UserStats
from bamboozled.repositories.guess_repository import GuessRepository
from bamboozled.repositories.user_repository import UserRepository
from bamboozled.repositories.weekly_leaderboard_repository import WeeklyLeaderboardRepository

from .mood_service import MoodService

logger = logging.getLogger(__name__)


class StatsService:
    """Service for user statistics and leaderboard operations"""

    def __init__(self):
        self.guess_repository = GuessRepository()
        self.user_repository = UserRepository()
        self.leaderboard_repository = WeeklyLeaderboardRepository()
        self.mood_service = MoodService()

    async def get_user_stats(self, user_id: str) -> Optional[UserStats]:
        """Aggregate statistics for a user, or None if the user does not exist"""
        user = await self.user_repository.find_by_id(user_id)
        if user is None:
            return None

        total_solves = await self.guess_repository.count_solves(user_id)
        total_guesses = await self.guess_repository.count_guesses(user_id)
        first_places = await self.leaderboard_repository.get_user_first_place_count(user_id)
        current_streak = await self.mood_service.get_user_streak(user_id)

        avg_guesses = round(total_guesses / total_solves, 2) if total_solves > 0 else 0.0

        return UserStats(
            user_id=user.user_id,
            display_name=user.display_name,
            total_solves=total_solves,
            total_guesses=total_guesses,
            avg_guesses_per_solve=avg_guesses,
            current_streak=current_streak,
            best_streak=max(user.best_streak, current_streak),
            first_place_finishes=first_places,
            mood_tier=user.mood_tier,
            mood_tier_name=self.mood_service.get_mood_tier_info(user.mood_tier).name,
            hint_coins=user.hint_coins
        )

    async def get_weekly_leaderboard(self, puzzle_id: str) -> List[LeaderboardEntry]:
        """Solvers of a puzzle ranked by the time of their first correct guess"""
        solvers = await self.guess_repository.get_puzzle_solvers(puzzle_id)
        return [
            LeaderboardEntry(
                user_id=solver["user_id"],
                display_name=solver["display_name"],
                solve_time=solver["solve_time"],
                total_guesses=solver["guess_number"],
                rank=rank
            )
            for rank, solver in enumerate(solvers, start=1)
        ]

    async def get_all_time_leaderboard(self) -> List[AllTimeLeaderboardEntry]:
        """Every user ranked by solves (desc), then average guesses per solve (asc)"""
        stats = []
        for user in await self.user_repository.get_all():
            user_stats = await self.get_user_stats(user.user_id)
            if user_stats is not None:
                stats.append(user_stats)

        stats.sort(key=lambda s: (-s.total_solves, s.avg_guesses_per_solve))

        return [
            AllTimeLeaderboardEntry(**s.model_dump(), rank=rank)
            for rank, s in enumerate(stats, start=1)
        ]

    async def persist_weekly_leaderboard(self, puzzle_id: str, week_start: datetime) -> int:
        """Replace the stored leaderboard rows of a puzzle with its current ranking"""
        entries = await self.get_weekly_leaderboard(puzzle_id)

        removed = await self.leaderboard_repository.delete_by_puzzle(puzzle_id)
        if removed:
            logger.info(f"Replacing {removed} leaderboard rows for puzzle {puzzle_id}")

        for entry in entries:
            await self.leaderboard_repository.create(WeeklyLeaderboardCreate(
                week_start_date=week_start,
                user_id=entry.user_id,
                puzzle_id=puzzle_id,
                solve_time=entry.solve_time,
                total_guesses=entry.total_guesses,
                rank=entry.rank
            ))

        logger.info(f"Persisted {len(entries)} leaderboard entries for puzzle {puzzle_id}")
        return len(entries)

    async def get_user_guess_count_for_puzzle(self, user_id: str, puzzle_id: str) -> int:
        return len(await self.guess_repository.get_user_guesses_for_puzzle(user_id, puzzle_id))

    async def has_user_solved_puzzle(self, user_id: str, puzzle_id: str) -> bool:
        return await self.guess_repository.has_user_solved_puzzle(user_id, puzzle_id)

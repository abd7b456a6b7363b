"""Achievement rules and unlocks"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from bamboozled.models.achievement import (
    ACHIEVEMENT_CATEGORIES,
    Achievement,
    AchievementProgress,
    AchievementUnlock,
    CategoryProgress,
    UserAchievementWithDetails,
)
from bamboozled.models.user import UserStats
from bamboozled.models.validation import ProgressValidation
from bamboozled.repositories.achievement_repository import AchievementRepository
from bamboozled.repositories.guess_repository import GuessRepository
from bamboozled.repositories.mood_history_repository import MoodHistoryRepository
from bamboozled.repositories.puzzle_repository import PuzzleRepository
from bamboozled.repositories.weekly_leaderboard_repository import WeeklyLeaderboardRepository

from .stats_service import StatsService

logger = logging.getLogger(__name__)

SOCIAL_BUTTERFLY_VIEWS = 25


@dataclass
class SolveContext:
    """Everything the rules look at for one correct guess"""
    stats: UserStats
    guess_number: int
    solve_minutes: float
    solve_hour: int
    low_guess_solves: int
    redeemed_lost_streak: bool


AchievementRule = Tuple[str, Callable[[SolveContext], bool]]

ACHIEVEMENT_RULES: List[AchievementRule] = [
    # streak
    ("streak_first_blood", lambda c: c.stats.total_solves == 1),
    ("streak_hat_trick", lambda c: c.stats.current_streak == 3),
    ("streak_week_warrior", lambda c: c.stats.current_streak == 7),
    ("streak_unstoppable", lambda c: c.stats.current_streak == 15),
    ("streak_legendary", lambda c: c.stats.current_streak == 25),
    # solve
    ("solve_rookie", lambda c: c.stats.total_solves == 5),
    ("solve_veteran", lambda c: c.stats.total_solves == 20),
    ("solve_master", lambda c: c.stats.total_solves == 50),
    ("solve_legend", lambda c: c.stats.total_solves == 100),
    # speed
    ("speed_flash", lambda c: c.solve_minutes < 1),
    ("speed_speedrun", lambda c: c.solve_minutes < 5),
    ("speed_quick_draw", lambda c: c.stats.first_place_finishes == 5),
    # efficiency
    ("efficiency_one_shot", lambda c: c.guess_number == 1),
    ("efficiency_sharp", lambda c: c.low_guess_solves >= 10),
    ("efficiency_sniper", lambda c: c.stats.total_solves >= 10 and c.stats.avg_guesses_per_solve <= 2.0),
    # comeback
    ("comeback_phoenix", lambda c: c.stats.current_streak == 5 and c.stats.best_streak > 5),
    ("comeback_redemption", lambda c: c.redeemed_lost_streak),
    # special
    ("special_night_owl", lambda c: c.solve_hour >= 23 or c.solve_hour < 3),
    ("special_early_bird", lambda c: 5 <= c.solve_hour < 7),
    ("special_lucky13", lambda c: c.guess_number == 13),
    ("special_perfectionist", lambda c: c.stats.mood_tier == 6),
    ("special_comeback_kid", lambda c: c.guess_number >= 10),
    ("special_century_club", lambda c: c.stats.total_guesses >= 100),
]


def format_achievement_message(unlocks: List[AchievementUnlock]) -> str:
    """Chat suffix announcing new achievements; empty when there are none"""
    if not unlocks:
        return ""

    lines = [
        f"{u.achievement.emoji} *{u.achievement.name}* unlocked!\n_{u.achievement.description}_"
        for u in unlocks
    ]
    return "\n\n🎉 *New Achievement(s)!*\n" + "\n\n".join(lines)


class AchievementService:
    """Service for checking and granting achievements"""

    def __init__(self):
        self.achievement_repository = AchievementRepository()
        self.guess_repository = GuessRepository()
        self.puzzle_repository = PuzzleRepository()
        self.mood_history_repository = MoodHistoryRepository()
        self.leaderboard_repository = WeeklyLeaderboardRepository()
        self.stats_service = StatsService()

    async def _build_context(
        self,
        user_id: str,
        puzzle_id: str,
        guess_number: int,
        solve_time: datetime
    ) -> Optional[SolveContext]:
        stats = await self.stats_service.get_user_stats(user_id)
        puzzle = await self.puzzle_repository.find_by_id(puzzle_id)
        if stats is None or puzzle is None:
            return None

        if solve_time.tzinfo is None:
            solve_time = solve_time.replace(tzinfo=timezone.utc)
        solve_minutes = (solve_time - puzzle.week_start_date).total_seconds() / 60

        redeemed = False
        if stats.best_streak >= 5 and stats.current_streak == stats.best_streak:
            redeemed = await self.mood_history_repository.has_streak_break_at_least(
                user_id, stats.best_streak
            )

        return SolveContext(
            stats=stats,
            guess_number=guess_number,
            solve_minutes=solve_minutes,
            solve_hour=solve_time.astimezone(timezone.utc).hour,
            low_guess_solves=await self.guess_repository.count_solves_within_guesses(user_id, 3),
            redeemed_lost_streak=redeemed
        )

    async def check_and_award_achievements(
        self,
        user_id: str,
        puzzle_id: str,
        guess_number: int,
        solve_time: datetime
    ) -> List[AchievementUnlock]:
        """Apply every rule to a correct guess and grant what it earns"""
        context = await self._build_context(user_id, puzzle_id, guess_number, solve_time)
        if context is None:
            return []

        unlocked: List[AchievementUnlock] = []
        for achievement_id, rule in ACHIEVEMENT_RULES:
            if rule(context):
                unlock = await self.unlock_achievement(user_id, achievement_id)
                if unlock is not None:
                    unlocked.append(unlock)
        return unlocked

    async def track_leaderboard_view(self, user_id: str) -> List[AchievementUnlock]:
        """Unlock the social achievement once the user appears on enough leaderboards"""
        achievement_id = "special_social_butterfly"
        if await self.achievement_repository.user_has_achievement(user_id, achievement_id):
            return []

        appearances = await self.leaderboard_repository.count_entries_for_user(user_id)
        if appearances < SOCIAL_BUTTERFLY_VIEWS:
            return []

        unlock = await self.unlock_achievement(user_id, achievement_id)
        return [unlock] if unlock else []

    async def unlock_achievement(self, user_id: str, achievement_id: str) -> Optional[AchievementUnlock]:
        """Grant an achievement; None when already held or not in the catalogue"""
        if await self.achievement_repository.user_has_achievement(user_id, achievement_id):
            return None

        achievement = await self.achievement_repository.find_by_id(achievement_id)
        if achievement is None:
            logger.error(f"Achievement {achievement_id} not found")
            return None

        progress = ProgressValidation.complete(ProgressValidation.create(1, 1))
        await self.achievement_repository.grant(user_id, achievement_id, progress)
        logger.info(f"User {user_id} unlocked achievement: {achievement.name}")
        return AchievementUnlock(achievement=achievement, is_new=True)

    async def get_user_achievements(self, user_id: str) -> List[UserAchievementWithDetails]:
        return await self.achievement_repository.get_user_achievements(user_id)

    async def get_all_achievements(self, include_secret: bool = False) -> List[Achievement]:
        return await self.achievement_repository.get_all(include_secret=include_secret)

    async def get_achievement_progress(self, user_id: str) -> AchievementProgress:
        total = await self.achievement_repository.count()
        unlocked = await self.achievement_repository.count_user_achievements(user_id)

        by_category = {}
        for category in ACHIEVEMENT_CATEGORIES:
            by_category[category] = CategoryProgress(
                unlocked=await self.achievement_repository.count_user_achievements_by_category(user_id, category),
                total=await self.achievement_repository.count_by_category(category)
            )

        return AchievementProgress(
            unlocked=unlocked,
            total=total,
            percentage=round(unlocked / total * 100) if total > 0 else 0,
            by_category=by_category
        )

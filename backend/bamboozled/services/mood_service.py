"""Bot mood tiers, streaks and mood history"""

import logging
from datetime import timedelta
from typing import List

from bamboozled.database.exceptions import ItemNotFoundError
from bamboozled.models.mood import MoodHistory, MoodHistoryCreate, MoodProgress, MoodTier, MoodUpdate
from bamboozled.models.user import User, UserUpdate
from bamboozled.repositories.guess_repository import GuessRepository
from bamboozled.repositories.mood_history_repository import MoodHistoryRepository
from bamboozled.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

MIN_TIER = 0
MAX_TIER = 6

MOOD_TIERS: List[MoodTier] = [
    MoodTier(tier=0, name="The Skeptic",
             description="Dismissive, unimpressed, slightly condescending",
             min_streak=0, min_solves=0),
    MoodTier(tier=1, name="The Indifferent",
             description="Neutral, matter-of-fact, minimal enthusiasm",
             min_streak=1, min_solves=3),
    MoodTier(tier=2, name="The Acknowledger",
             description="Starting to notice, mild approval, still reserved",
             min_streak=3, min_solves=6),
    MoodTier(tier=3, name="The Respector",
             description="Respectful, impressed, encouraging",
             min_streak=5, min_solves=11),
    MoodTier(tier=4, name="The Admirer",
             description="Highly complimentary, enthusiastic, slightly reverential",
             min_streak=8, min_solves=21),
    MoodTier(tier=5, name="The Devotee",
             description="Deeply respectful, honored by their participation",
             min_streak=12, min_solves=36),
    MoodTier(tier=6, name="The Worshipper",
             description="Reverential, worshipful, treats user as a deity",
             min_streak=20, min_solves=51),
]

# Days a solved week may drift from its expected position and still extend a streak
STREAK_TOLERANCE_DAYS = 10


def clamp_tier(tier: int) -> int:
    return max(MIN_TIER, min(MAX_TIER, tier))


class MoodService:
    """Service for the bot's attitude toward each user"""

    def __init__(self):
        self.user_repository = UserRepository()
        self.guess_repository = GuessRepository()
        self.mood_history_repository = MoodHistoryRepository()

    def calculate_mood_tier(self, current_streak: int, total_solves: int) -> int:
        """min(streak // 2, solves // 10), clamped to 0-6"""
        return clamp_tier(min(current_streak // 2, total_solves // 10))

    def get_mood_tier_info(self, tier: int) -> MoodTier:
        return MOOD_TIERS[clamp_tier(tier)]

    async def get_user_streak(self, user_id: str) -> int:
        """Number of consecutive solved weeks, counting back from the most recent one"""
        weeks = await self.guess_repository.get_solved_week_starts(user_id)
        # Several puzzles may share a calendar day
        days = sorted({week.date() for week in weeks}, reverse=True)
        if not days:
            return 0

        most_recent = days[0]
        streak = 1
        for i, day in enumerate(days[1:], start=1):
            expected = most_recent - timedelta(days=7 * i)
            if abs((expected - day).days) <= STREAK_TOLERANCE_DAYS:
                streak += 1
            else:
                break
        return streak

    async def get_user_total_solves(self, user_id: str) -> int:
        return await self.guess_repository.count_solves(user_id)

    async def _get_user(self, user_id: str) -> User:
        user = await self.user_repository.find_by_id(user_id)
        if user is None:
            raise ItemNotFoundError(f"User not found: {user_id}")
        return user

    async def update_best_streak(self, user_id: str, current_streak: int) -> None:
        user = await self._get_user(user_id)
        if current_streak > user.best_streak:
            await self.user_repository.update(user_id, UserUpdate(best_streak=current_streak))

    async def update_mood_tier_after_solve(self, user_id: str) -> MoodUpdate:
        """Recalculate the tier after a correct guess and record any change"""
        user = await self._get_user(user_id)
        old_tier = user.mood_tier

        streak = await self.get_user_streak(user_id)
        total_solves = await self.get_user_total_solves(user_id)
        new_tier = self.calculate_mood_tier(streak, total_solves)

        await self.update_best_streak(user_id, streak)

        if new_tier == old_tier:
            return MoodUpdate(user=user, tier_changed=False, old_tier=old_tier, new_tier=new_tier)

        updated_user = await self.user_repository.update_mood_tier(user_id, new_tier)
        await self.mood_history_repository.create(MoodHistoryCreate(
            user_id=user_id,
            old_tier=old_tier,
            new_tier=new_tier,
            reason="TIER_UP" if new_tier > old_tier else "SOLVE",
            streak_at_change=streak,
            total_solves_at_change=total_solves
        ))
        logger.info(f"Mood tier for {user_id} changed {old_tier} -> {new_tier}")

        return MoodUpdate(user=updated_user, tier_changed=True, old_tier=old_tier, new_tier=new_tier)

    async def handle_streak_break(self, user_id: str, total_solves: int, lost_streak: int = 0) -> User:
        """Drop the tier after a missed week; long-time players keep some respect"""
        user = await self._get_user(user_id)

        if total_solves <= 5:
            new_tier = 0
        elif total_solves <= 15:
            new_tier = 1
        else:
            new_tier = 2

        if new_tier == user.mood_tier:
            return user

        updated_user = await self.user_repository.update_mood_tier(user_id, new_tier)
        await self.mood_history_repository.create(MoodHistoryCreate(
            user_id=user_id,
            old_tier=user.mood_tier,
            new_tier=new_tier,
            reason="STREAK_BREAK",
            streak_at_change=lost_streak,
            total_solves_at_change=total_solves
        ))
        logger.info(f"Streak break for {user_id}: tier {user.mood_tier} -> {new_tier}")
        return updated_user

    async def get_user_mood_history(self, user_id: str) -> List[MoodHistory]:
        return await self.mood_history_repository.get_by_user(user_id)

    async def get_progress_to_next_tier(self, user_id: str) -> MoodProgress:
        user = await self._get_user(user_id)
        streak = await self.get_user_streak(user_id)
        total_solves = await self.get_user_total_solves(user_id)
        current_tier = self.get_mood_tier_info(user.mood_tier)

        if user.mood_tier >= MAX_TIER:
            return MoodProgress(current_tier=current_tier, streak=streak, total_solves=total_solves)

        next_tier = self.get_mood_tier_info(user.mood_tier + 1)
        return MoodProgress(
            current_tier=current_tier,
            next_tier=next_tier,
            streak=streak,
            total_solves=total_solves,
            streaks_needed=max(0, next_tier.min_streak - streak),
            solves_needed=max(0, next_tier.min_solves - total_solves)
        )

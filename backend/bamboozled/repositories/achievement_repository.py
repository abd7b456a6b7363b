"""Achievement catalogue and user achievement repository"""

import logging
from typing import List, Optional

from sqlalchemy import func, insert, select

from bamboozled.database import schema
from bamboozled.database.helpers import generate_id, utc_now
from bamboozled.models.achievement import Achievement, UserAchievement, UserAchievementWithDetails

from .base import BaseRepository

logger = logging.getLogger(__name__)


class AchievementRepository(BaseRepository[Achievement]):
    """Reads the achievement catalogue and records unlocks"""

    table = schema.achievements
    model = Achievement

    async def find_by_id(self, achievement_id: str) -> Optional[Achievement]:
        return await self.get_by_id(achievement_id)

    async def get_all(self, include_secret: bool = False) -> List[Achievement]:
        conditions = [] if include_secret else [self.table.c.is_secret == 0]
        return await self.query(*conditions, order_by=[self.table.c.tier, self.table.c.category])

    async def count_by_category(self, category: str) -> int:
        return await self.count(self.table.c.category == category)

    async def user_has_achievement(self, user_id: str, achievement_id: str) -> bool:
        ua = schema.user_achievements
        count = await self._scalar(
            select(func.count()).select_from(ua).where(
                ua.c.user_id == user_id,
                ua.c.achievement_id == achievement_id
            )
        )
        return bool(count)

    async def grant(
        self,
        user_id: str,
        achievement_id: str,
        progress_data: Optional[str] = None
    ) -> UserAchievement:
        """Record an unlock; duplicates raise DuplicateItemError"""
        ua = schema.user_achievements
        values = {
            "user_achievement_id": generate_id("ua"),
            "user_id": user_id,
            "achievement_id": achievement_id,
            "unlocked_at": utc_now(),
            "progress_data": progress_data,
        }
        await self._execute(insert(ua).values(**values))
        logger.info(f"User {user_id} unlocked achievement {achievement_id}")
        return UserAchievement.model_validate(values)

    async def get_user_achievements(self, user_id: str) -> List[UserAchievementWithDetails]:
        """Unlocked achievements with catalogue details, newest first"""
        ua = schema.user_achievements
        rows = await self._fetch_all(
            select(ua, *[c for c in self.table.c if c.name != "achievement_id"])
            .select_from(ua.join(self.table, self.table.c.achievement_id == ua.c.achievement_id))
            .where(ua.c.user_id == user_id)
            .order_by(ua.c.unlocked_at.desc())
        )

        results = []
        for row in rows:
            achievement = Achievement.model_validate(
                {c.name: row[c.name] for c in self.table.c}
            )
            results.append(UserAchievementWithDetails(
                user_achievement_id=row["user_achievement_id"],
                user_id=row["user_id"],
                achievement_id=row["achievement_id"],
                unlocked_at=row["unlocked_at"],
                progress_data=row["progress_data"],
                achievement=achievement
            ))
        return results

    async def count_user_achievements(self, user_id: str) -> int:
        ua = schema.user_achievements
        count = await self._scalar(select(func.count()).select_from(ua).where(ua.c.user_id == user_id))
        return count or 0

    async def count_user_achievements_by_category(self, user_id: str, category: str) -> int:
        ua = schema.user_achievements
        count = await self._scalar(
            select(func.count())
            .select_from(ua.join(self.table, self.table.c.achievement_id == ua.c.achievement_id))
            .where(ua.c.user_id == user_id, self.table.c.category == category)
        )
        return count or 0

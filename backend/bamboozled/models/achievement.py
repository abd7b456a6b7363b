from datetime import datetime
from typing import Dict, Literal, Optional

from pydantic import BaseModel, Field

AchievementCategory = Literal["streak", "solve", "speed", "efficiency", "comeback", "special"]
AchievementTier = Literal["bronze", "silver", "gold", "platinum", "legendary"]

ACHIEVEMENT_CATEGORIES = ["streak", "solve", "speed", "efficiency", "comeback", "special"]


class Achievement(BaseModel):
    """Entry of the achievement catalogue"""

    achievement_id: str
    achievement_key: str = Field(..., description="Stable upper-case key, e.g. FIRST_BLOOD")
    name: str
    description: str
    emoji: str
    category: AchievementCategory
    tier: AchievementTier
    is_secret: bool = Field(default=False, description="Hidden from discovery until unlocked")
    created_at: datetime


class UserAchievement(BaseModel):
    """Achievement unlocked by a user"""
    user_achievement_id: str
    user_id: str
    achievement_id: str
    unlocked_at: datetime
    progress_data: Optional[str] = Field(None, description="JSON progress document")


class UserAchievementWithDetails(UserAchievement):
    achievement: Achievement


class AchievementUnlock(BaseModel):
    achievement: Achievement
    is_new: bool = True


class CategoryProgress(BaseModel):
    unlocked: int = 0
    total: int = 0


class AchievementProgress(BaseModel):
    """How much of the catalogue a user has unlocked"""
    unlocked: int = 0
    total: int = 0
    percentage: int = Field(default=0, ge=0, le=100)
    by_category: Dict[str, CategoryProgress] = Field(default_factory=dict)

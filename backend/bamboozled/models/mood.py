from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from .user import User

MoodReason = Literal["SOLVE", "STREAK_BREAK", "TIER_UP"]


class MoodTier(BaseModel):
    """One level of the bot's attitude"""
    tier: int = Field(..., ge=0, le=6)
    name: str
    description: str
    min_streak: int = Field(..., ge=0)
    min_solves: int = Field(..., ge=0)


class MoodHistory(BaseModel):
    mood_history_id: str
    user_id: str
    old_tier: int = Field(..., ge=0, le=6)
    new_tier: int = Field(..., ge=0, le=6)
    reason: MoodReason
    streak_at_change: int = Field(..., ge=0)
    total_solves_at_change: int = Field(..., ge=0)
    timestamp: datetime


class MoodHistoryCreate(BaseModel):
    user_id: str
    old_tier: int = Field(..., ge=0, le=6)
    new_tier: int = Field(..., ge=0, le=6)
    reason: MoodReason
    streak_at_change: int = Field(default=0, ge=0)
    total_solves_at_change: int = Field(default=0, ge=0)


class MoodProgress(BaseModel):
    """Where a user stands relative to the next tier"""
    current_tier: MoodTier
    next_tier: Optional[MoodTier] = None
    streak: int = 0
    total_solves: int = 0
    streaks_needed: int = 0
    solves_needed: int = 0


class MoodUpdate(BaseModel):
    user: User
    tier_changed: bool
    old_tier: int
    new_tier: int

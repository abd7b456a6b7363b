from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

DISPLAY_NAME_MAX_LENGTH = 50


class User(BaseModel):
    """Player account"""

    user_id: str = Field(..., description="Unique user identifier")
    slack_user_id: Optional[str] = Field(None, description="Slack member id for Slack-created users")
    display_name: str = Field(..., description="Name shown on leaderboards")
    mood_tier: int = Field(default=0, ge=0, le=6, description="Bot attitude toward the user (0-6)")
    best_streak: int = Field(default=0, ge=0, description="Longest run of consecutive solved weeks")
    hint_coins: int = Field(default=0, ge=0, description="Coins available for buying hints")
    created_at: datetime = Field(..., description="Account creation timestamp")
    updated_at: datetime = Field(..., description="Last modification timestamp")


class UserCreate(BaseModel):
    """Model for creating a new user"""
    user_id: Optional[str] = Field(None, description="Explicit id; generated when omitted")
    slack_user_id: Optional[str] = None
    display_name: str = Field(..., min_length=1, max_length=DISPLAY_NAME_MAX_LENGTH)
    mood_tier: int = Field(default=0, ge=0, le=6)
    best_streak: int = Field(default=0, ge=0)
    hint_coins: int = Field(default=0, ge=0)

    @field_validator('display_name')
    @classmethod
    def validate_display_name(cls, v):
        if not v.strip():
            raise ValueError('Display name cannot be empty')
        return v.strip()


class UserUpdate(BaseModel):
    """Model for updating user information"""
    slack_user_id: Optional[str] = None
    display_name: Optional[str] = Field(None, min_length=1, max_length=DISPLAY_NAME_MAX_LENGTH)
    mood_tier: Optional[int] = Field(None, ge=0, le=6)
    best_streak: Optional[int] = Field(None, ge=0)
    hint_coins: Optional[int] = Field(None, ge=0)

    @field_validator('display_name')
    @classmethod
    def validate_display_name_update(cls, v):
        if v is not None:
            if not v.strip():
                raise ValueError('Display name cannot be empty')
            return v.strip()
        return v


class UserStats(BaseModel):
    """Aggregated statistics for one user"""
    user_id: str
    display_name: str
    total_solves: int = Field(default=0, ge=0, description="Distinct puzzles solved")
    total_guesses: int = Field(default=0, ge=0)
    avg_guesses_per_solve: float = Field(default=0.0, ge=0, description="Rounded to two decimals")
    current_streak: int = Field(default=0, ge=0)
    best_streak: int = Field(default=0, ge=0)
    first_place_finishes: int = Field(default=0, ge=0)
    mood_tier: int = Field(default=0, ge=0, le=6)
    mood_tier_name: str
    hint_coins: int = Field(default=0, ge=0)

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .achievement import AchievementUnlock

GUESS_MAX_LENGTH = 500


class Guess(BaseModel):
    """Guess model for user puzzle attempts"""

    guess_id: str = Field(..., description="Unique guess identifier")
    user_id: str = Field(..., description="ID of the user making the guess")
    puzzle_id: str = Field(..., description="ID of the puzzle being guessed")
    guess_text: str = Field(..., description="Text the user submitted")
    is_correct: bool = Field(..., description="Whether the guess was correct")
    guess_number: int = Field(..., ge=1, description="1-based attempt number for this puzzle")
    mood_tier_at_time: int = Field(..., ge=0, le=6, description="User's mood tier when guessing")
    timestamp: datetime = Field(..., description="When the guess was made")


class GuessCreate(BaseModel):
    """Model for recording a guess"""
    user_id: str = Field(..., min_length=1)
    puzzle_id: str = Field(..., min_length=1)
    guess_text: str = Field(..., min_length=1, max_length=GUESS_MAX_LENGTH)
    is_correct: bool
    guess_number: int = Field(..., ge=1)
    mood_tier_at_time: int = Field(default=0, ge=0, le=6)

    @field_validator('guess_text')
    @classmethod
    def validate_guess_text(cls, v):
        """Collapse whitespace"""
        if not v.strip():
            raise ValueError('Guess cannot be empty')
        return ' '.join(v.strip().split())


class SubmitGuessResult(BaseModel):
    """Outcome of one submitted guess"""
    is_correct: bool
    message: str
    guess: Optional[Guess] = None
    tier_changed: bool = False
    old_tier: Optional[int] = None
    new_tier: Optional[int] = None
    coins_awarded: int = 0
    achievements: List[AchievementUnlock] = Field(default_factory=list)
    show_leaderboard: bool = False

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class Puzzle(BaseModel):
    """Weekly picture puzzle"""

    puzzle_id: str = Field(..., description="Unique puzzle identifier")
    puzzle_key: str = Field(..., description="Stable key derived from the image name")
    answer: str = Field(..., description="Expected answer")
    image_path: str = Field(..., description="Image file name relative to the images directory")
    week_start_date: datetime = Field(..., description="Start of the week the puzzle is live")
    week_end_date: datetime = Field(..., description="End of the week the puzzle is live")
    is_active: bool = Field(default=False, description="Whether this is the current puzzle")
    created_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.week_end_date <= now


class PuzzleCreate(BaseModel):
    """Model for creating a new puzzle"""
    puzzle_key: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)
    image_path: str = Field(..., min_length=1)
    week_start_date: datetime
    week_end_date: datetime
    is_active: bool = False

    @field_validator('answer')
    @classmethod
    def validate_answer(cls, v):
        if not v.strip():
            raise ValueError('Answer cannot be empty')
        return v.strip()

    @model_validator(mode='after')
    def validate_week(self):
        if self.week_end_date < self.week_start_date:
            raise ValueError('Week end cannot be before week start')
        return self


class PuzzleUpdate(BaseModel):
    """Model for updating a puzzle"""
    answer: Optional[str] = None
    image_path: Optional[str] = None
    week_start_date: Optional[datetime] = None
    week_end_date: Optional[datetime] = None
    is_active: Optional[bool] = None


class PuzzleResponse(BaseModel):
    """Puzzle as shown to players (no answer)"""
    puzzle_id: str
    puzzle_key: str
    image_path: str
    week_start_date: datetime
    week_end_date: datetime
    is_active: bool

    @classmethod
    def from_puzzle(cls, puzzle: Puzzle) -> "PuzzleResponse":
        return cls(**puzzle.model_dump(exclude={"answer", "created_at"}))

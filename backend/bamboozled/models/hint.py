from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class Hint(BaseModel):
    """Hint bought by a user for a puzzle"""
    hint_id: str
    user_id: str
    puzzle_id: str
    hint_level: int = Field(..., ge=1, le=3)
    hint_text: str
    coins_spent: int = Field(..., ge=0)
    timestamp: datetime


class HintCreate(BaseModel):
    user_id: str
    puzzle_id: str
    hint_level: int = Field(..., ge=1, le=3)
    hint_text: str = Field(..., min_length=1)
    coins_spent: int = Field(..., ge=0)


class HintCost(BaseModel):
    level: int
    cost: int
    description: str


class HintResult(BaseModel):
    """Outcome of a hint request; ``error`` carries a code when unsuccessful"""
    success: bool
    message: str
    hint: Optional[Hint] = None
    remaining_coins: Optional[int] = None
    error: Optional[str] = None

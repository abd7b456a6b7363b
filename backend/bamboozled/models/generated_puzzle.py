from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

PuzzleDifficulty = Literal["EASY", "MEDIUM", "HARD"]
GeneratedPuzzleStatus = Literal["PENDING", "APPROVED", "REJECTED"]


class GeneratedPuzzle(BaseModel):
    """Puzzle idea submitted for review"""
    generated_puzzle_id: str
    puzzle_concept: str
    answer: str
    visual_description: str
    difficulty: PuzzleDifficulty
    theme: Optional[str] = None
    status: GeneratedPuzzleStatus = "PENDING"
    generated_by: str = Field(..., description="User who generated the puzzle")
    reviewed_by: Optional[str] = None
    rejection_reason: Optional[str] = None
    created_at: datetime
    reviewed_at: Optional[datetime] = None


class GeneratedPuzzleCreate(BaseModel):
    puzzle_concept: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)
    visual_description: str = Field(..., min_length=1)
    difficulty: PuzzleDifficulty
    theme: Optional[str] = None
    generated_by: str


class GeneratedPuzzleUpdate(BaseModel):
    puzzle_concept: Optional[str] = None
    answer: Optional[str] = None
    visual_description: Optional[str] = None
    difficulty: Optional[PuzzleDifficulty] = None
    theme: Optional[str] = None
    status: Optional[GeneratedPuzzleStatus] = None
    reviewed_by: Optional[str] = None
    rejection_reason: Optional[str] = None
    reviewed_at: Optional[datetime] = None


class GeneratedPuzzleStats(BaseModel):
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0

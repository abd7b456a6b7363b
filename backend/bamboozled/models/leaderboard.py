from datetime import datetime

from pydantic import BaseModel, Field

from .user import UserStats


class WeeklyLeaderboard(BaseModel):
    """Persisted leaderboard row for a finished week"""
    leaderboard_id: str
    week_start_date: datetime
    user_id: str
    puzzle_id: str
    solve_time: datetime
    total_guesses: int = Field(..., ge=1)
    rank: int = Field(..., ge=1)


class WeeklyLeaderboardCreate(BaseModel):
    week_start_date: datetime
    user_id: str
    puzzle_id: str
    solve_time: datetime
    total_guesses: int = Field(..., ge=1)
    rank: int = Field(..., ge=1)


class LeaderboardEntry(BaseModel):
    """Live ranking entry for a puzzle"""
    user_id: str
    display_name: str
    solve_time: datetime
    total_guesses: int = Field(..., description="Guess number of the solving guess")
    rank: int


class AllTimeLeaderboardEntry(UserStats):
    rank: int

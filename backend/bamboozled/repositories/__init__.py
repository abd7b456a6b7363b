"""Data access repositories, one per table"""

from .base import BaseRepository
from .user_repository import UserRepository
from .puzzle_repository import PuzzleRepository
from .guess_repository import GuessRepository
from .hint_repository import HintRepository
from .weekly_leaderboard_repository import WeeklyLeaderboardRepository
from .mood_history_repository import MoodHistoryRepository
from .achievement_repository import AchievementRepository
from .generated_puzzle_repository import GeneratedPuzzleRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "PuzzleRepository",
    "GuessRepository",
    "HintRepository",
    "WeeklyLeaderboardRepository",
    "MoodHistoryRepository",
    "AchievementRepository",
    "GeneratedPuzzleRepository"
]

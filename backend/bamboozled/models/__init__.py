"""Pydantic models for rows, service results and chat messages"""

from .achievement import (
    ACHIEVEMENT_CATEGORIES,
    Achievement,
    AchievementProgress,
    AchievementUnlock,
    CategoryProgress,
    UserAchievement,
    UserAchievementWithDetails
)
from .chat import ChatMessage, ChatMetadata, IncomingMessage
from .generated_puzzle import (
    GeneratedPuzzle,
    GeneratedPuzzleCreate,
    GeneratedPuzzleStats,
    GeneratedPuzzleUpdate
)
from .guess import Guess, GuessCreate, SubmitGuessResult
from .hint import Hint, HintCost, HintCreate, HintResult
from .leaderboard import (
    AllTimeLeaderboardEntry,
    LeaderboardEntry,
    WeeklyLeaderboard,
    WeeklyLeaderboardCreate
)
from .mood import MoodHistory, MoodHistoryCreate, MoodProgress, MoodTier, MoodUpdate
from .puzzle import Puzzle, PuzzleCreate, PuzzleResponse, PuzzleUpdate
from .user import User, UserCreate, UserStats, UserUpdate
from .validation import AchievementProgressData, ProgressValidation

__all__ = [
    "ACHIEVEMENT_CATEGORIES",
    "Achievement",
    "AchievementProgress",
    "AchievementUnlock",
    "CategoryProgress",
    "UserAchievement",
    "UserAchievementWithDetails",
    "ChatMessage",
    "ChatMetadata",
    "IncomingMessage",
    "GeneratedPuzzle",
    "GeneratedPuzzleCreate",
    "GeneratedPuzzleStats",
    "GeneratedPuzzleUpdate",
    "Guess",
    "GuessCreate",
    "SubmitGuessResult",
    "Hint",
    "HintCost",
    "HintCreate",
    "HintResult",
    "AllTimeLeaderboardEntry",
    "LeaderboardEntry",
    "WeeklyLeaderboard",
    "WeeklyLeaderboardCreate",
    "MoodHistory",
    "MoodHistoryCreate",
    "MoodProgress",
    "MoodTier",
    "MoodUpdate",
    "Puzzle",
    "PuzzleCreate",
    "PuzzleResponse",
    "PuzzleUpdate",
    "User",
    "UserCreate",
    "UserStats",
    "UserUpdate",
    "AchievementProgressData",
    "ProgressValidation"
]

from .achievement_service import AchievementService, format_achievement_message
from .answer_validator import AnswerValidator
from .guess_service import GuessService
from .hint_service import HINT_COSTS, HintService
from .mood_service import MOOD_TIERS, MoodService
from .puzzle_service import PuzzleService
from .rotation_service import RotationService
from .stats_service import StatsService
from .user_service import UserService

__all__ = [
    "AchievementService",
    "AnswerValidator",
    "GuessService",
    "HINT_COSTS",
    "HintService",
    "MOOD_TIERS",
    "MoodService",
    "PuzzleService",
    "RotationService",
    "StatsService",
    "UserService",
    "format_achievement_message",
]

"""Relational schema for the Bamboozled database.

Timestamps are stored as ISO-8601 text and flags as 0/1 integers so that the
export format stays a plain JSON dump of each table.
"""

from typing import Dict, List

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
    text
)

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("user_id", Text, primary_key=True),
    Column("slack_user_id", Text, nullable=True),
    Column("display_name", Text, nullable=False),
    Column("mood_tier", Integer, nullable=False, server_default=text("0")),
    Column("best_streak", Integer, nullable=False, server_default=text("0")),
    Column("hint_coins", Integer, nullable=False, server_default=text("0")),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
    CheckConstraint("mood_tier >= 0 AND mood_tier <= 6", name="ck_users_mood_tier"),
)

puzzles = Table(
    "puzzles",
    metadata,
    Column("puzzle_id", Text, primary_key=True),
    Column("puzzle_key", Text, nullable=False, unique=True),
    Column("answer", Text, nullable=False),
    Column("image_path", Text, nullable=False),
    Column("week_start_date", Text, nullable=False),
    Column("week_end_date", Text, nullable=False),
    Column("is_active", Integer, nullable=False, server_default=text("0")),
    Column("created_at", Text, nullable=False),
    Index("idx_puzzles_is_active", "is_active"),
)

guesses = Table(
    "guesses",
    metadata,
    Column("guess_id", Text, primary_key=True),
    Column("user_id", Text, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
    Column("puzzle_id", Text, ForeignKey("puzzles.puzzle_id", ondelete="CASCADE"), nullable=False),
    Column("guess_text", Text, nullable=False),
    Column("is_correct", Integer, nullable=False),
    Column("guess_number", Integer, nullable=False),
    Column("mood_tier_at_time", Integer, nullable=False),
    Column("timestamp", Text, nullable=False),
    Index("idx_guesses_user_id", "user_id"),
    Index("idx_guesses_puzzle_id", "puzzle_id"),
    Index("idx_guesses_is_correct", "is_correct"),
)

hints = Table(
    "hints",
    metadata,
    Column("hint_id", Text, primary_key=True),
    Column("user_id", Text, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
    Column("puzzle_id", Text, ForeignKey("puzzles.puzzle_id", ondelete="CASCADE"), nullable=False),
    Column("hint_level", Integer, nullable=False),
    Column("hint_text", Text, nullable=False),
    Column("coins_spent", Integer, nullable=False),
    Column("timestamp", Text, nullable=False),
    Index("idx_hints_user_puzzle", "user_id", "puzzle_id"),
)

weekly_leaderboards = Table(
    "weekly_leaderboards",
    metadata,
    Column("leaderboard_id", Text, primary_key=True),
    Column("week_start_date", Text, nullable=False),
    Column("user_id", Text, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
    Column("puzzle_id", Text, ForeignKey("puzzles.puzzle_id", ondelete="CASCADE"), nullable=False),
    Column("solve_time", Text, nullable=False),
    Column("total_guesses", Integer, nullable=False),
    Column("rank", Integer, nullable=False),
    Index("idx_weekly_leaderboards_week", "week_start_date"),
    Index("idx_weekly_leaderboards_rank", "rank"),
)

mood_history = Table(
    "mood_history",
    metadata,
    Column("mood_history_id", Text, primary_key=True),
    Column("user_id", Text, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
    Column("old_tier", Integer, nullable=False),
    Column("new_tier", Integer, nullable=False),
    Column("reason", Text, nullable=False),
    Column("streak_at_change", Integer, nullable=False),
    Column("total_solves_at_change", Integer, nullable=False),
    Column("timestamp", Text, nullable=False),
    CheckConstraint("reason IN ('SOLVE', 'STREAK_BREAK', 'TIER_UP')", name="ck_mood_history_reason"),
    Index("idx_mood_history_user_id", "user_id"),
)

achievements = Table(
    "achievements",
    metadata,
    Column("achievement_id", Text, primary_key=True),
    Column("achievement_key", Text, nullable=False, unique=True),
    Column("name", Text, nullable=False),
    Column("description", Text, nullable=False),
    Column("emoji", Text, nullable=False),
    Column("category", Text, nullable=False),
    Column("tier", Text, nullable=False),
    Column("is_secret", Integer, nullable=False, server_default=text("0")),
    Column("created_at", Text, nullable=False),
    Index("idx_achievements_category", "category"),
)

user_achievements = Table(
    "user_achievements",
    metadata,
    Column("user_achievement_id", Text, primary_key=True),
    Column("user_id", Text, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
    Column(
        "achievement_id",
        Text,
        ForeignKey("achievements.achievement_id", ondelete="CASCADE"),
        nullable=False
    ),
    Column("unlocked_at", Text, nullable=False),
    Column("progress_data", Text, nullable=True),
    UniqueConstraint("user_id", "achievement_id", name="uq_user_achievements_user_achievement"),
    Index("idx_user_achievements_user_id", "user_id"),
    Index("idx_user_achievements_achievement_id", "achievement_id"),
)

generated_puzzles = Table(
    "generated_puzzles",
    metadata,
    Column("generated_puzzle_id", Text, primary_key=True),
    Column("puzzle_concept", Text, nullable=False),
    Column("answer", Text, nullable=False),
    Column("visual_description", Text, nullable=False),
    Column("difficulty", Text, nullable=False),
    Column("theme", Text, nullable=True),
    Column("status", Text, nullable=False, server_default=text("'PENDING'")),
    Column("generated_by", Text, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
    Column("reviewed_by", Text, ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True),
    Column("rejection_reason", Text, nullable=True),
    Column("created_at", Text, nullable=False),
    Column("reviewed_at", Text, nullable=True),
    CheckConstraint("difficulty IN ('EASY', 'MEDIUM', 'HARD')", name="ck_generated_puzzles_difficulty"),
    CheckConstraint("status IN ('PENDING', 'APPROVED', 'REJECTED')", name="ck_generated_puzzles_status"),
    Index("idx_generated_puzzles_status", "status"),
)

REQUIRED_TABLES: List[str] = [
    "users",
    "puzzles",
    "guesses",
    "hints",
    "weekly_leaderboards",
    "mood_history",
    "achievements",
    "user_achievements",
    "generated_puzzles",
]

# Export key -> table, in insert (dependency) order
EXPORT_TABLES: Dict[str, Table] = {
    "users": users,
    "puzzles": puzzles,
    "guesses": guesses,
    "hints": hints,
    "weeklyLeaderboards": weekly_leaderboards,
    "moodHistory": mood_history,
    "achievements": achievements,
    "userAchievements": user_achievements,
    "generatedPuzzles": generated_puzzles,
}

# Delete order that never leaves a dangling reference
CLEAR_ORDER: List[Table] = [
    hints,
    generated_puzzles,
    user_achievements,
    mood_history,
    weekly_leaderboards,
    guesses,
    puzzles,
    achievements,
    users,
]

"""
Migration: initial_schema
Creates every game table and seeds the achievement catalogue.
"""

from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncConnection

from bamboozled.database import schema
from bamboozled.database.helpers import utc_now

TABLES = [
    schema.users,
    schema.puzzles,
    schema.guesses,
    schema.hints,
    schema.weekly_leaderboards,
    schema.mood_history,
    schema.achievements,
    schema.user_achievements,
    schema.generated_puzzles,
]

# (achievement_id, achievement_key, name, description, emoji, category, tier, is_secret)
ACHIEVEMENTS = [
    ("streak_first_blood", "FIRST_BLOOD", "First Blood", "Solve your first puzzle", "🎯", "streak", "bronze", 0),
    ("streak_hat_trick", "HAT_TRICK", "Hat Trick", "Solve 3 puzzles in a row", "🎩", "streak", "bronze", 0),
    ("streak_week_warrior", "WEEK_WARRIOR", "Week Warrior", "Maintain a 7-week streak", "⚔️", "streak", "silver", 0),
    ("streak_unstoppable", "UNSTOPPABLE", "Unstoppable Force", "Maintain a 15-week streak", "💪", "streak", "gold", 0),
    ("streak_legendary", "LEGENDARY_STREAK", "Legendary Streak", "Maintain a 25-week streak", "🔥", "streak", "legendary", 0),
    ("solve_rookie", "ROOKIE_RIDDLER", "Rookie Riddler", "Solve 5 total puzzles", "🌱", "solve", "bronze", 0),
    ("solve_veteran", "VETERAN_SOLVER", "Veteran Solver", "Solve 20 total puzzles", "🎖️", "solve", "silver", 0),
    ("solve_master", "PUZZLE_MASTER", "Puzzle Master", "Solve 50 total puzzles", "👑", "solve", "gold", 0),
    ("solve_legend", "LIVING_LEGEND", "Living Legend", "Solve 100 total puzzles", "🏆", "solve", "legendary", 0),
    ("speed_flash", "THE_FLASH", "The Flash", "Solve a puzzle in under 1 minute", "⚡", "speed", "gold", 0),
    ("speed_speedrun", "SPEEDRUNNER", "Speedrunner", "Solve a puzzle in under 5 minutes", "🏃", "speed", "silver", 0),
    ("speed_quick_draw", "QUICK_DRAW", "Quick Draw", "Finish in 1st place 5 times", "🥇", "speed", "gold", 0),
    ("efficiency_one_shot", "ONE_SHOT_WONDER", "One-Shot Wonder", "Solve a puzzle on your first guess", "🎯", "efficiency", "legendary", 0),
    ("efficiency_sharp", "SHARP_SHOOTER", "Sharp Shooter", "Solve 10 puzzles with 3 or fewer guesses", "🎪", "efficiency", "gold", 0),
    ("efficiency_sniper", "SNIPER", "Sniper", "Maintain an average of 2 guesses or less", "🎯", "efficiency", "platinum", 0),
    ("comeback_phoenix", "PHOENIX_RISING", "Phoenix Rising", "Start a new 5-week streak after breaking one", "🔥", "comeback", "silver", 0),
    ("comeback_redemption", "REDEMPTION_ARC", "Redemption Arc", "Regain your best streak after losing it", "✨", "comeback", "gold", 0),
    ("special_night_owl", "NIGHT_OWL", "Night Owl", "Solve a puzzle between 11pm and 3am", "🦉", "special", "bronze", 1),
    ("special_early_bird", "EARLY_BIRD", "Early Bird", "Solve a puzzle between 5am and 7am", "🐦", "special", "bronze", 1),
    ("special_lucky13", "LUCKY_13", "Lucky 13", "Solve a puzzle on your 13th guess", "🍀", "special", "silver", 1),
    ("special_perfectionist", "PERFECTIONIST", "The Perfectionist", "Reach tier 6 (The Worshipper)", "💎", "special", "platinum", 0),
    ("special_comeback_kid", "COMEBACK_KID", "Comeback Kid", "Solve after 10+ incorrect guesses", "🎭", "special", "bronze", 1),
    ("special_century_club", "CENTURY_CLUB", "Century Club", "Make 100 total guesses (correct or not)", "💯", "special", "silver", 0),
    ("special_social_butterfly", "SOCIAL_BUTTERFLY", "Social Butterfly", "Check the leaderboard 25 times", "🦋", "special", "bronze", 1),
]


async def up(conn: AsyncConnection) -> None:
    await conn.run_sync(schema.metadata.create_all, tables=TABLES)

    created_at = utc_now()
    await conn.execute(
        insert(schema.achievements),
        [
            {
                "achievement_id": achievement_id,
                "achievement_key": key,
                "name": name,
                "description": description,
                "emoji": emoji,
                "category": category,
                "tier": tier,
                "is_secret": is_secret,
                "created_at": created_at,
            }
            for achievement_id, key, name, description, emoji, category, tier, is_secret in ACHIEVEMENTS
        ]
    )


async def down(conn: AsyncConnection) -> None:
    await conn.run_sync(schema.metadata.drop_all, tables=TABLES)

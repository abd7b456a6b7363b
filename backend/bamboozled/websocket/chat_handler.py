"""WebSocket chat: user sessions, slash commands and guesses"""

import json
import logging
from dataclasses import dataclass
from typing import List, Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from bamboozled.models.achievement import AchievementUnlock
from bamboozled.models.chat import ChatMessage, ChatMetadata, IncomingMessage
from bamboozled.models.leaderboard import LeaderboardEntry
from bamboozled.models.user import DISPLAY_NAME_MAX_LENGTH, User
from bamboozled.monitoring.logging_config import set_correlation_id, set_player_id
from bamboozled.services.achievement_service import AchievementService, format_achievement_message
from bamboozled.services.guess_service import GuessService
from bamboozled.services.hint_service import HintService
from bamboozled.services.mood_service import MoodService
from bamboozled.services.puzzle_service import PuzzleService
from bamboozled.services.stats_service import StatsService
from bamboozled.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()

user_service = UserService()
puzzle_service = PuzzleService()
stats_service = StatsService()
mood_service = MoodService()
guess_service = GuessService()
hint_service = HintService()
achievement_service = AchievementService()

LEADERBOARD_SIZE = 10

HELP_TEXT = """📚 Available Commands:
/puzzle - View current puzzle
/leaderboard - View weekly leaderboard
/alltime - View all-time leaderboard
/stats - View your statistics
/botmood - Check bot's attitude toward you
/hint - Get a hint (costs coins!)
/help - Show this help message

Just type your answer to submit a guess!"""

COIN_BONUSES = """Earn coins by solving puzzles! Bonuses for:
- First guess solve: +3 extra coins
- 3 or fewer guesses: +1 coin
- 5+ week streak: +1 coin
- 10+ week streak: +2 coins
- First place finish: +2 coins"""


@dataclass
class InitResult:
    success: bool
    user: Optional[User] = None
    error: Optional[str] = None
    error_type: Optional[str] = None


def _failure(error: str, error_type: str) -> InitResult:
    return InitResult(success=False, error=error, error_type=error_type)


async def initialize_user(message: IncomingMessage) -> InitResult:
    """
    Resolve the user for an ``init`` message.

    A known ``userId`` resumes that session (renaming when the new name is
    free), an unknown one is created with that id, and without an id the
    user is looked up by display name or created.
    """
    user_name = (message.user_name or "").strip()
    if not user_name:
        return _failure("Please enter a username", "INVALID_INPUT")
    if len(user_name) > DISPLAY_NAME_MAX_LENGTH:
        return _failure(f"Username must be {DISPLAY_NAME_MAX_LENGTH} characters or less", "INVALID_INPUT")

    user_id = (message.user_id or "").strip()
    if user_id:
        existing = await user_service.get_user_by_id(user_id)
        if existing is not None:
            if existing.display_name == user_name:
                return InitResult(success=True, user=existing)

            if not await user_service.is_display_name_available(user_name):
                return _failure(
                    f'The username "{user_name}" is already taken. Your username is "{existing.display_name}".',
                    "DISPLAY_NAME_TAKEN"
                )
            updated = await user_service.update_display_name(user_id, user_name)
            logger.info(f"Renamed user {user_id}: {existing.display_name} -> {user_name}")
            return InitResult(success=True, user=updated)

        if not await user_service.is_display_name_available(user_name):
            return _failure(
                f'The username "{user_name}" is already taken. Please choose a different username.',
                "DISPLAY_NAME_TAKEN"
            )
        logger.info(f"Creating user {user_id} ({user_name})")
        return InitResult(success=True, user=await user_service.create_user_with_id(user_id, user_name))

    existing = await user_service.get_user_by_display_name(user_name)
    if existing is not None:
        return InitResult(success=True, user=existing)

    return InitResult(success=True, user=await user_service.get_or_create_user_by_display_name(user_name))


def format_weekly_leaderboard(entries: List[LeaderboardEntry]) -> str:
    lines = [
        f"{i}. {entry.display_name} - {entry.total_guesses} guesses"
        for i, entry in enumerate(entries[:LEADERBOARD_SIZE], start=1)
    ]
    return "🏆 Weekly Leaderboard:\n" + "\n".join(lines)


def achievement_metadata(unlocks: List[AchievementUnlock]) -> List[dict]:
    return [u.achievement.model_dump(mode="json") for u in unlocks]


class ChatSession:
    """One WebSocket connection"""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket

    async def send(
        self,
        content: str,
        message_type: str = "bot",
        user_id: Optional[str] = None,
        **metadata
    ) -> None:
        message = ChatMessage(
            type=message_type,
            content=content,
            user_id=user_id,
            metadata=ChatMetadata(**metadata) if metadata else None
        )
        await self.websocket.send_json(message.to_wire())

    async def send_puzzle(self) -> bool:
        puzzle = await puzzle_service.get_active_puzzle()
        if puzzle is None:
            return False
        await self.send(
            "Here's the current puzzle:",
            image_url=f"/api/puzzle/{puzzle.puzzle_id}/image",
            is_command=True
        )
        return True

    async def send_achievements(self, unlocks: List[AchievementUnlock]) -> None:
        if unlocks:
            await self.send(
                format_achievement_message(unlocks).strip(),
                achievements=achievement_metadata(unlocks)
            )

    async def handle_raw(self, raw: str) -> None:
        try:
            message = IncomingMessage.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error(f"Failed to parse chat message: {e}")
            await self.send("Error: Invalid message format")
            return

        if message.type == "init":
            await self.handle_init(message)
            return

        if message.type == "command" or message.content.startswith("/"):
            if not message.user_id:
                await self.send("Error: User ID not found. Please refresh the page.")
                return
            await self.handle_command(message)
        elif message.type == "message":
            if not message.user_id:
                await self.send("Error: User ID not found. Please refresh the page.")
                return
            await self.handle_guess(message)

    async def handle_init(self, message: IncomingMessage) -> None:
        try:
            result = await initialize_user(message)
            if not result.success:
                logger.warning(f"User initialization failed ({result.error_type}): {result.error}")
                await self.send(result.error, message_type="error", error_type=result.error_type)
                return

            user = result.user
            set_player_id(user.user_id)
            logger.info(f"User {user.user_id} ({user.display_name}) joined the chat")
            await self.send(
                f"Welcome, {user.display_name}! Type your guess or use commands like "
                f"/puzzle, /stats, /leaderboard, /botmood, /hint, /help",
                user_id=user.user_id,
                mood_tier=user.mood_tier
            )
            await self.send_puzzle()
        except Exception as e:
            logger.error(f"Error during init processing: {e}", exc_info=True)
            await self.send("An unexpected error occurred. Please try again.", message_type="error")

    async def handle_command(self, message: IncomingMessage) -> None:
        parts = message.content.lower().strip().split()
        command = parts[0] if parts else ""
        user_id = message.user_id

        if command in ("/puzzle", "/bamboozled"):
            if not await self.send_puzzle():
                await self.send("No active puzzle available.")

        elif command == "/stats":
            stats = await stats_service.get_user_stats(user_id)
            if stats is None:
                await self.send("Could not find your stats.")
                return
            await self.send(
                "📊 Your Stats:\n"
                f"- Total Solves: {stats.total_solves}\n"
                f"- Total Guesses: {stats.total_guesses}\n"
                f"- Avg Guesses/Solve: {stats.avg_guesses_per_solve:.2f}\n"
                f"- Current Streak: {stats.current_streak} weeks\n"
                f"- Best Streak: {stats.best_streak} weeks\n"
                f"- First Place Finishes: {stats.first_place_finishes}\n"
                f"- Mood Tier: {stats.mood_tier} ({stats.mood_tier_name})\n"
                f"- 💰 Hint Coins: {stats.hint_coins}",
                is_command=True,
                mood_tier=stats.mood_tier
            )

        elif command == "/leaderboard":
            puzzle = await puzzle_service.get_active_puzzle()
            entries = await stats_service.get_weekly_leaderboard(puzzle.puzzle_id) if puzzle else []
            if not entries:
                await self.send("No one has solved the puzzle yet. Be the first!")
            else:
                await self.send(format_weekly_leaderboard(entries), is_command=True)
            await self.send_achievements(await achievement_service.track_leaderboard_view(user_id))

        elif command == "/alltime":
            entries = await stats_service.get_all_time_leaderboard()
            if not entries:
                await self.send("No stats yet. Start solving puzzles!")
                return
            lines = [
                f"{i}. {entry.display_name} - {entry.total_solves} solves"
                for i, entry in enumerate(entries[:LEADERBOARD_SIZE], start=1)
            ]
            await self.send("🏅 All-Time Leaderboard:\n" + "\n".join(lines), is_command=True)

        elif command == "/botmood":
            progress = await mood_service.get_progress_to_next_tier(user_id)
            current = progress.current_tier
            if progress.next_tier is not None:
                next_line = (
                    f"Next Tier: {progress.next_tier.tier} - {progress.next_tier.name}\n"
                    f"Needed: {progress.streaks_needed} more streak weeks OR "
                    f"{progress.solves_needed} more solves"
                )
            else:
                next_line = "You've reached the maximum tier! 🏆"
            await self.send(
                "🎭 Bot Mood Status:\n"
                f"Current Tier: {current.tier} - {current.name}\n"
                f"Description: {current.description}\n\n"
                "Your Progress:\n"
                f"- Streak: {progress.streak} weeks\n"
                f"- Total Solves: {progress.total_solves}\n\n"
                f"{next_line}",
                is_command=True,
                mood_tier=current.tier
            )

        elif command == "/hint":
            level = int(parts[1]) if len(parts) > 1 and parts[1].isdigit() else None
            result = await hint_service.request_hint(user_id, level)
            await self.send(result.message, is_command=True)

            if not result.success and result.error == "INSUFFICIENT_COINS":
                pricing = "\n".join(
                    f"Level {c.level}: {c.cost} coins ({c.description})"
                    for c in hint_service.get_hint_costs()
                )
                await self.send(f"💰 Hint Pricing:\n{pricing}\n\n{COIN_BONUSES}", is_command=True)

        elif command == "/help":
            await self.send(HELP_TEXT, is_command=True)

        else:
            await self.send("Unknown command. Type /help for available commands.")

    async def handle_guess(self, message: IncomingMessage) -> None:
        result = await guess_service.submit_guess(message.user_id, message.content)
        await self.send(result.message, mood_tier=result.new_tier)

        if result.tier_changed and result.new_tier is not None and result.new_tier > (result.old_tier or 0):
            tier = mood_service.get_mood_tier_info(result.new_tier)
            await self.send(
                f"🎉 Tier Up! You've reached {tier.name}! {tier.description}",
                mood_tier=result.new_tier
            )

        await self.send_achievements(result.achievements)

        if result.is_correct and result.show_leaderboard:
            puzzle = await puzzle_service.get_active_puzzle()
            if puzzle is not None:
                entries = await stats_service.get_weekly_leaderboard(puzzle.puzzle_id)
                await self.send(format_weekly_leaderboard(entries))


@router.websocket("/ws")
async def chat_websocket(websocket: WebSocket):
    await websocket.accept()
    correlation_id = set_correlation_id()
    logger.info(f"WebSocket connection established ({correlation_id})")

    session = ChatSession(websocket)
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                await session.handle_raw(raw)
            except WebSocketDisconnect:
                raise
            except Exception as e:
                logger.error(f"WebSocket message error: {e}", exc_info=True)
                await session.send(f"Error: {e}")
    except WebSocketDisconnect as e:
        logger.info(f"WebSocket connection closed (code {e.code})")

"""Guess submission and answer checking"""

import logging
from typing import List

from bamboozled.database.exceptions import ItemNotFoundError
from bamboozled.models.guess import Guess, GuessCreate, SubmitGuessResult
from bamboozled.repositories.guess_repository import GuessRepository

from .achievement_service import AchievementService
from .answer_validator import AnswerValidator
from .hint_service import HintService
from .mood_service import MoodService, clamp_tier
from .puzzle_service import PuzzleService
from .stats_service import StatsService
from .user_service import UserService

logger = logging.getLogger(__name__)

ALREADY_SOLVED_MESSAGE = "You've already solved this puzzle! Wait for the next one."

# Per mood tier; picked by guess number
CORRECT_MESSAGES = [
    [
        "Fine. {name} got it. Even a stopped clock is right twice a day.",
        "Correct, I suppose. Don't let it go to your head, {name}.",
    ],
    [
        "Correct, {name}. Solved in {guess_number} guess(es).",
        "That's right. Noted.",
    ],
    [
        "Oh, nicely done, {name}! That's the answer.",
        "Correct! Not bad at all, {name}.",
    ],
    [
        "Excellent work, {name}! You cracked it in {guess_number} guess(es).",
        "That's it! Impressive as always, {name}.",
    ],
    [
        "Brilliant, {name}! I knew you'd get it!",
        "Wow, {name}! Another one solved. You're amazing!",
    ],
    [
        "It is an honor to witness your genius, {name}!",
        "Magnificent, {name}! The puzzle never stood a chance.",
    ],
    [
        "All hail {name}, solver of puzzles! Your brilliance blinds me!",
        "The great {name} has spoken, and the answer is revealed! I am unworthy!",
    ],
]

INCORRECT_MESSAGES = [
    [
        "Wrong. Shocking, I know.",
        "Nope. Try actually reading the puzzle, {name}.",
    ],
    [
        "Incorrect. Try again.",
        "Not the answer, {name}.",
    ],
    [
        "Not quite, {name}. Give it another shot!",
        "Close-ish? No. Keep trying!",
    ],
    [
        "Not this time, {name}, but you're on the right track!",
        "So close! I believe in you, {name}.",
    ],
    [
        "Not quite, but a mind like yours will get there soon, {name}!",
        "Ooh, not it! Your next guess will be the one!",
    ],
    [
        "Even the wisest stumble, {name}. Please, try again!",
        "Surely the puzzle is at fault, not you, {name}!",
    ],
    [
        "The puzzle dares to resist you, O mighty {name}! Strike again!",
        "Forgive the puzzle its insolence, great {name}. Your next guess will surely prevail!",
    ],
]


def build_guess_message(mood_tier: int, is_correct: bool, guess_number: int, name: str) -> str:
    templates = (CORRECT_MESSAGES if is_correct else INCORRECT_MESSAGES)[clamp_tier(mood_tier)]
    template = templates[guess_number % len(templates)]
    return template.format(name=name, guess_number=guess_number)


class GuessService:
    """Service for guess validation and processing"""

    def __init__(self):
        self.guess_repository = GuessRepository()
        self.puzzle_service = PuzzleService()
        self.user_service = UserService()
        self.mood_service = MoodService()
        self.stats_service = StatsService()
        self.hint_service = HintService()
        self.achievement_service = AchievementService()
        self.answer_validator = AnswerValidator()

    async def submit_guess(self, user_id: str, guess_text: str) -> SubmitGuessResult:
        """
        Submit a guess for the active puzzle.

        Raises:
            ValueError: there is no active puzzle
            ItemNotFoundError: the user does not exist
        """
        puzzle = await self.puzzle_service.get_active_puzzle()
        if puzzle is None:
            raise ValueError("No active puzzle available")

        user = await self.user_service.get_user_by_id(user_id)
        if user is None:
            raise ItemNotFoundError(f"User not found: {user_id}")

        if await self.stats_service.has_user_solved_puzzle(user_id, puzzle.puzzle_id):
            return SubmitGuessResult(is_correct=False, message=ALREADY_SOLVED_MESSAGE)

        guess_number = await self.stats_service.get_user_guess_count_for_puzzle(user_id, puzzle.puzzle_id) + 1
        is_correct = self.answer_validator.is_correct(guess_text, puzzle.answer)

        # First place is decided before this guess is stored
        first_correct = None
        if is_correct:
            first_correct = await self.guess_repository.get_first_correct_guess_for_puzzle(puzzle.puzzle_id)

        guess = await self.guess_repository.create(GuessCreate(
            user_id=user_id,
            puzzle_id=puzzle.puzzle_id,
            guess_text=guess_text,
            is_correct=is_correct,
            guess_number=guess_number,
            mood_tier_at_time=user.mood_tier
        ))
        logger.info(f"User {user_id} guess #{guess_number} on {puzzle.puzzle_id}: {'correct' if is_correct else 'incorrect'}")

        if not is_correct:
            return SubmitGuessResult(
                is_correct=False,
                message=build_guess_message(user.mood_tier, False, guess_number, user.display_name),
                guess=guess,
                old_tier=user.mood_tier,
                new_tier=user.mood_tier
            )

        mood_update = await self.mood_service.update_mood_tier_after_solve(user_id)

        is_first_place = first_correct is None or first_correct.user_id == user_id
        streak = await self.mood_service.get_user_streak(user_id)
        coins = self.hint_service.calculate_coins_for_solve(guess_number, streak, is_first_place)
        await self.hint_service.award_coins(user_id, coins, f"solved puzzle in {guess_number} guess(es)")

        achievements = await self.achievement_service.check_and_award_achievements(
            user_id, puzzle.puzzle_id, guess_number, guess.timestamp
        )

        return SubmitGuessResult(
            is_correct=True,
            message=build_guess_message(mood_update.new_tier, True, guess_number, user.display_name),
            guess=guess,
            tier_changed=mood_update.tier_changed,
            old_tier=mood_update.old_tier,
            new_tier=mood_update.new_tier,
            coins_awarded=coins,
            achievements=achievements,
            show_leaderboard=True
        )

    async def get_user_guesses_for_puzzle(self, user_id: str, puzzle_id: str) -> List[Guess]:
        return await self.guess_repository.get_user_guesses_for_puzzle(user_id, puzzle_id)

    async def get_user_guesses_for_active_puzzle(self, user_id: str) -> List[Guess]:
        puzzle = await self.puzzle_service.get_active_puzzle()
        if puzzle is None:
            return []
        return await self.guess_repository.get_user_guesses_for_puzzle(user_id, puzzle.puzzle_id)

"""Hint coins and mood-flavoured hints"""

import logging
from typing import Dict, List, Optional

from bamboozled.database.exceptions import ItemNotFoundError
from bamboozled.models.hint import HintCost, HintCreate, HintResult
from bamboozled.models.user import UserUpdate
from bamboozled.repositories.guess_repository import GuessRepository
from bamboozled.repositories.hint_repository import HintRepository
from bamboozled.repositories.user_repository import UserRepository

from .mood_service import MoodService, clamp_tier
from .puzzle_service import PuzzleService

logger = logging.getLogger(__name__)

HINT_COSTS: List[HintCost] = [
    HintCost(level=1, cost=1, description="Vague hint"),
    HintCost(level=2, cost=2, description="Helpful hint"),
    HintCost(level=3, cost=3, description="Direct hint"),
]

HINT_LEVELS = [cost.level for cost in HINT_COSTS]

BASE_SOLVE_COINS = 2

# One personality per mood tier
HINT_PERSONALITIES: List[Dict[str, str]] = [
    {
        "prefix": "*sigh* Fine, here's your hint...",
        "l1": "I suppose it's related to words. Good luck with that.",
        "l2": "It has {word_count} word(s). First letter is '{first_letter}'. Happy now?",
        "l3": "Ugh, fine: {revealed}. Just solve it already.",
    },
    {
        "prefix": "I guess I can help a little...",
        "l1": "Think about the category or theme. That's all you're getting.",
        "l2": "There are {word_count} word(s), starting with '{first_letter}'. Don't mess it up.",
        "l3": "Look: {revealed}. Can you take it from here?",
    },
    {
        "prefix": "Alright, let me give you a hand.",
        "l1": "Consider what type of phrase this might be!",
        "l2": "You're looking for {word_count} word(s). First letter: '{first_letter}'.",
        "l3": "Here you go: {revealed}. You've got this!",
    },
    {
        "prefix": "I know you can figure this out!",
        "l1": "Think about common phrases or wordplay!",
        "l2": "It's {word_count} word(s), starting with '{first_letter}'. You're so close!",
        "l3": "Almost there: {revealed}!",
    },
    {
        "prefix": "Let me help you out!",
        "l1": "Your skills suggest you'll crack the theme easily!",
        "l2": "{word_count} word(s), first letter '{first_letter}'. You've totally got this!",
        "l3": "Here's most of it: {revealed}. Finish strong!",
    },
    {
        "prefix": "It would be my pleasure to assist!",
        "l1": "Someone of your caliber will recognize the pattern!",
        "l2": "{word_count} word(s), starting with the noble letter '{first_letter}'!",
        "l3": "Behold: {revealed}. Your brilliance will complete it!",
    },
    {
        "prefix": "Oh great one, allow me to illuminate your path!",
        "l1": "A mind as magnificent as yours will divine the sacred theme!",
        "l2": "The divine answer contains {word_count} word(s), graced by '{first_letter}'!",
        "l3": "I present unto you: {revealed}. Your wisdom shall prevail!",
    },
]


def reveal_answer(answer: str) -> str:
    """Hide the last letter of each word longer than 3 characters (two for words over 6)"""
    revealed = []
    for word in answer.split(' '):
        if len(word) <= 3:
            revealed.append(word)
            continue
        hide = 2 if len(word) > 6 else 1
        revealed.append(word[:-hide] + '_' * hide)
    return ' '.join(revealed)


def generate_hint_text(answer: str, level: int, mood_tier: int) -> str:
    personality = HINT_PERSONALITIES[clamp_tier(mood_tier)]

    if level == 1:
        body = personality["l1"]
    elif level == 2:
        body = personality["l2"].format(
            word_count=len(answer.split(' ')),
            first_letter=answer[0].upper()
        )
    else:
        body = personality["l3"].format(revealed=reveal_answer(answer))

    return f"{personality['prefix']} {body}"


class HintService:
    """Service for buying hints with coins earned by solving"""

    def __init__(self):
        self.hint_repository = HintRepository()
        self.user_repository = UserRepository()
        self.guess_repository = GuessRepository()
        self.puzzle_service = PuzzleService()
        self.mood_service = MoodService()

    def get_hint_costs(self) -> List[HintCost]:
        return list(HINT_COSTS)

    def get_hint_cost(self, level: int) -> Optional[HintCost]:
        return next((cost for cost in HINT_COSTS if cost.level == level), None)

    async def award_coins(self, user_id: str, amount: int, reason: str) -> int:
        """Add coins to a user's balance and return the new balance"""
        user = await self.user_repository.find_by_id(user_id)
        if user is None:
            raise ItemNotFoundError(f"User not found: {user_id}")

        new_balance = user.hint_coins + amount
        await self.user_repository.update(user_id, UserUpdate(hint_coins=new_balance))

        logger.info(f"Awarded {amount} hint coins to {user.display_name} ({reason}). New balance: {new_balance}")
        return new_balance

    def calculate_coins_for_solve(self, guess_number: int, streak: int, is_first_place: bool) -> int:
        coins = BASE_SOLVE_COINS

        if guess_number == 1:
            coins += 3
        elif guess_number <= 3:
            coins += 1

        if streak >= 10:
            coins += 2
        elif streak >= 5:
            coins += 1

        if is_first_place:
            coins += 2

        return coins

    async def request_hint(self, user_id: str, hint_level: Optional[int] = None) -> HintResult:
        """
        Buy a hint for the active puzzle.

        Without ``hint_level`` the lowest level not yet received is chosen.
        Failures are reported through ``HintResult.error`` rather than raised.
        """
        user = await self.user_repository.find_by_id(user_id)
        if user is None:
            return HintResult(success=False, message="User not found", error="USER_NOT_FOUND")

        puzzle = await self.puzzle_service.get_active_puzzle()
        if puzzle is None:
            return HintResult(success=False, message="No active puzzle available", error="NO_ACTIVE_PUZZLE")

        if await self.guess_repository.has_user_solved_puzzle(user_id, puzzle.puzzle_id):
            return HintResult(
                success=False,
                message="You've already solved this puzzle! No hints needed.",
                error="ALREADY_SOLVED"
            )

        previous_hints = await self.hint_repository.get_hints_for_user_puzzle(user_id, puzzle.puzzle_id)
        received_levels = {hint.hint_level for hint in previous_hints}

        if hint_level is not None:
            level = hint_level
            if level in received_levels:
                return HintResult(
                    success=False,
                    message=f"You've already received hint level {level}!",
                    error="HINT_ALREADY_RECEIVED"
                )
        else:
            remaining_levels = [lvl for lvl in HINT_LEVELS if lvl not in received_levels]
            if not remaining_levels:
                return HintResult(
                    success=False,
                    message="You've used all available hints for this puzzle!",
                    error="NO_MORE_HINTS"
                )
            level = remaining_levels[0]

        cost = self.get_hint_cost(level)
        if cost is None:
            return HintResult(
                success=False,
                message="Invalid hint level. Choose 1, 2, or 3.",
                error="INVALID_LEVEL"
            )

        if user.hint_coins < cost.cost:
            return HintResult(
                success=False,
                message=f"Not enough hint coins! You have {user.hint_coins}, but level {level} costs {cost.cost}.",
                error="INSUFFICIENT_COINS",
                remaining_coins=user.hint_coins
            )

        hint_text = generate_hint_text(puzzle.answer, level, user.mood_tier)
        remaining = user.hint_coins - cost.cost

        await self.user_repository.update(user_id, UserUpdate(hint_coins=remaining))
        hint = await self.hint_repository.create(HintCreate(
            user_id=user_id,
            puzzle_id=puzzle.puzzle_id,
            hint_level=level,
            hint_text=hint_text,
            coins_spent=cost.cost
        ))

        tier_name = self.mood_service.get_mood_tier_info(user.mood_tier).name
        logger.info(f"User {user_id} bought hint level {level} for puzzle {puzzle.puzzle_id}")

        return HintResult(
            success=True,
            message=f"{tier_name} reveals hint level {level}:\n\n{hint_text}\n\n💰 Coins remaining: {remaining}",
            hint=hint,
            remaining_coins=remaining
        )

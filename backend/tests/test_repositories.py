"""Tests for the repository layer"""

import warnings
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import SAWarning

from bamboozled.database.exceptions import DuplicateItemError, ItemNotFoundError, QueryError
from bamboozled.models.generated_puzzle import GeneratedPuzzleCreate
from bamboozled.models.hint import HintCreate
from bamboozled.models.leaderboard import WeeklyLeaderboardCreate
from bamboozled.models.mood import MoodHistoryCreate
from bamboozled.models.user import UserUpdate
from bamboozled.repositories.achievement_repository import AchievementRepository
from bamboozled.repositories.generated_puzzle_repository import GeneratedPuzzleRepository
from bamboozled.repositories.guess_repository import GuessRepository
from bamboozled.repositories.hint_repository import HintRepository
from bamboozled.repositories.mood_history_repository import MoodHistoryRepository
from bamboozled.repositories.puzzle_repository import PuzzleRepository
from bamboozled.repositories.user_repository import UserRepository
from bamboozled.repositories.weekly_leaderboard_repository import WeeklyLeaderboardRepository

WEEK_START = datetime(2025, 1, 5, tzinfo=timezone.utc)


class TestUserRepository:
    """Test cases for UserRepository"""

    @pytest.fixture
    def repo(self, db):
        return UserRepository()

    async def test_create_generates_id(self, repo):
        user = await repo.create({"display_name": "  Alice  "})

        assert user.user_id.startswith("user_")
        assert user.display_name == "Alice"
        assert user.mood_tier == 0
        assert user.hint_coins == 0
        assert user.created_at.tzinfo is not None

    async def test_create_with_explicit_id(self, repo):
        user = await repo.create({"user_id": "web_1_abc", "display_name": "Bob"})

        assert user.user_id == "web_1_abc"
        assert await repo.find_by_id("web_1_abc") == user

    async def test_duplicate_id(self, repo):
        await repo.create({"user_id": "dup", "display_name": "Bob"})

        with pytest.raises(DuplicateItemError):
            await repo.create({"user_id": "dup", "display_name": "Bob again"})

    async def test_find_by_slack_user_id(self, repo):
        user = await repo.create({"display_name": "Carol", "slack_user_id": "U123"})

        assert (await repo.find_by_slack_user_id("U123")).user_id == user.user_id
        assert await repo.find_by_slack_user_id("U999") is None

    async def test_find_by_display_name_returns_oldest(self, repo):
        first = await repo.create({"display_name": "Dana"})
        await repo.create({"display_name": "Dana"})

        assert (await repo.find_by_display_name("Dana")).user_id == first.user_id

    async def test_update_bumps_updated_at(self, repo):
        user = await repo.create({"display_name": "Eve"})

        updated = await repo.update(user.user_id, UserUpdate(hint_coins=5, best_streak=2))

        assert updated.hint_coins == 5
        assert updated.best_streak == 2
        assert updated.display_name == "Eve"
        assert updated.updated_at >= user.updated_at

    async def test_update_missing_user(self, repo):
        with pytest.raises(ItemNotFoundError) as exc_info:
            await repo.update("nobody", {"hint_coins": 1})

        assert str(exc_info.value) == "User not found: nobody"

    async def test_update_mood_tier(self, repo):
        user = await repo.create({"display_name": "Finn"})

        assert (await repo.update_mood_tier(user.user_id, 4)).mood_tier == 4

    async def test_get_all_in_creation_order(self, repo):
        for name in ("A", "B", "C"):
            await repo.create({"display_name": name})

        assert [u.display_name for u in await repo.get_all()] == ["A", "B", "C"]

    async def test_delete(self, repo):
        user = await repo.create({"display_name": "Gus"})

        assert await repo.delete(user.user_id) is True
        assert await repo.delete(user.user_id) is False
        assert await repo.exists(user.user_id) is False


class TestPuzzleRepository:
    """Test cases for PuzzleRepository"""

    @pytest.fixture
    def repo(self, db):
        return PuzzleRepository()

    async def test_create_and_find_by_key(self, repo, make_puzzle):
        puzzle = await make_puzzle("puzzle1-1", "Falling Temperature")

        found = await repo.find_by_key("puzzle1-1")
        assert found.puzzle_id == puzzle.puzzle_id
        assert found.answer == "Falling Temperature"
        assert found.is_active is False

    async def test_duplicate_key(self, make_puzzle):
        await make_puzzle("puzzle1-1")

        with pytest.raises(DuplicateItemError):
            await make_puzzle("puzzle1-1")

    async def test_single_active_puzzle(self, repo, make_puzzle):
        first = await make_puzzle("puzzle1-1", active=True)
        second = await make_puzzle("puzzle1-2")

        await repo.set_active_puzzle(second.puzzle_id)

        assert (await repo.get_active_puzzle()).puzzle_id == second.puzzle_id
        assert (await repo.find_by_id(first.puzzle_id)).is_active is False

    async def test_set_active_missing_puzzle_keeps_current(self, repo, make_puzzle):
        current = await make_puzzle("puzzle1-1", active=True)

        with pytest.raises(ItemNotFoundError):
            await repo.set_active_puzzle("puzzle_missing")

        assert (await repo.get_active_puzzle()).puzzle_id == current.puzzle_id

    async def test_no_active_puzzle(self, repo, make_puzzle):
        await make_puzzle("puzzle1-1")
        assert await repo.get_active_puzzle() is None

    async def test_update_week(self, repo, make_puzzle):
        puzzle = await make_puzzle("puzzle1-1")

        updated = await repo.update(puzzle.puzzle_id, {
            "week_start_date": WEEK_START,
            "week_end_date": WEEK_START + timedelta(days=7)
        })

        assert updated.week_start_date == WEEK_START
        assert await repo.get_puzzles_by_week(WEEK_START) == [updated]

    async def test_get_all_in_creation_order(self, repo, make_puzzle):
        for key in ("puzzle1-1", "puzzle1-2", "puzzle1-3"):
            await make_puzzle(key)

        assert [p.puzzle_key for p in await repo.get_all()] == ["puzzle1-1", "puzzle1-2", "puzzle1-3"]


class TestGuessRepository:
    """Test cases for GuessRepository"""

    @pytest.fixture
    def repo(self, db):
        return GuessRepository()

    @pytest.fixture
    async def setup(self, make_user, make_puzzle):
        user = await make_user("Alice")
        puzzle = await make_puzzle("puzzle1-1", week_start=WEEK_START)
        return user, puzzle

    async def test_guesses_in_order(self, repo, setup, make_guess):
        user, puzzle = setup
        base = datetime(2025, 1, 6, 12, tzinfo=timezone.utc)
        await make_guess(user.user_id, puzzle.puzzle_id, "one", guess_number=1, timestamp=base)
        await make_guess(user.user_id, puzzle.puzzle_id, "two", guess_number=2, timestamp=base + timedelta(minutes=1))

        guesses = await repo.get_user_guesses_for_puzzle(user.user_id, puzzle.puzzle_id)

        assert [g.guess_text for g in guesses] == ["one", "two"]
        assert guesses[0].timestamp == base

    async def test_solve_queries(self, repo, setup, make_guess):
        user, puzzle = setup
        await make_guess(user.user_id, puzzle.puzzle_id, "wrong", guess_number=1)
        assert await repo.has_user_solved_puzzle(user.user_id, puzzle.puzzle_id) is False

        await make_guess(user.user_id, puzzle.puzzle_id, "Falling Temperature", is_correct=True, guess_number=2)

        assert await repo.has_user_solved_puzzle(user.user_id, puzzle.puzzle_id) is True
        assert (await repo.get_correct_guess_for_puzzle(user.user_id, puzzle.puzzle_id)).guess_number == 2
        assert await repo.count_solves(user.user_id) == 1
        assert await repo.count_guesses(user.user_id) == 2
        assert await repo.count_solves_within_guesses(user.user_id, 1) == 0
        assert await repo.count_solves_within_guesses(user.user_id, 3) == 1

    async def test_first_correct_guess(self, repo, setup, make_user, make_guess):
        user, puzzle = setup
        other = await make_user("Bob")
        base = datetime(2025, 1, 6, 12, tzinfo=timezone.utc)
        await make_guess(other.user_id, puzzle.puzzle_id, "x", is_correct=True, timestamp=base + timedelta(hours=1))
        await make_guess(user.user_id, puzzle.puzzle_id, "x", is_correct=True, timestamp=base)

        first = await repo.get_first_correct_guess_for_puzzle(puzzle.puzzle_id)
        assert first.user_id == user.user_id

    async def test_solved_week_starts(self, repo, setup, make_puzzle, make_guess):
        user, puzzle = setup
        later = await make_puzzle("puzzle1-2", week_start=WEEK_START + timedelta(days=7))
        await make_guess(user.user_id, puzzle.puzzle_id, "x", is_correct=True)
        await make_guess(user.user_id, later.puzzle_id, "x", is_correct=True)

        weeks = await repo.get_solved_week_starts(user.user_id)

        assert weeks == [WEEK_START + timedelta(days=7), WEEK_START]

    async def test_solved_week_starts_are_distinct(self, repo, setup, make_puzzle, make_guess):
        user, puzzle = setup
        same_week = await make_puzzle("puzzle1-3", week_start=WEEK_START)
        await make_guess(user.user_id, puzzle.puzzle_id, "x", is_correct=True)
        await make_guess(user.user_id, same_week.puzzle_id, "x", is_correct=True)

        with warnings.catch_warnings():
            warnings.simplefilter("error", SAWarning)
            weeks = await repo.get_solved_week_starts(user.user_id)

        assert weeks == [WEEK_START]

    async def test_puzzle_solvers(self, repo, setup, make_user, make_guess):
        user, puzzle = setup
        bob = await make_user("Bob")
        base = datetime(2025, 1, 6, 12, tzinfo=timezone.utc)
        await make_guess(bob.user_id, puzzle.puzzle_id, "x", is_correct=True, guess_number=3, timestamp=base)
        await make_guess(user.user_id, puzzle.puzzle_id, "x", is_correct=True, guess_number=1,
                         timestamp=base + timedelta(minutes=5))

        solvers = await repo.get_puzzle_solvers(puzzle.puzzle_id)

        assert [s["display_name"] for s in solvers] == ["Bob", "Alice"]
        assert solvers[0]["guess_number"] == 3
        assert solvers[0]["solve_time"] == base

    async def test_guess_requires_existing_user(self, repo, setup, make_guess):
        _, puzzle = setup

        with pytest.raises(QueryError):
            await make_guess("ghost", puzzle.puzzle_id)


class TestHintRepository:
    @pytest.fixture
    def repo(self, db):
        return HintRepository()

    async def test_hints_and_spend(self, repo, make_user, make_puzzle):
        user = await make_user()
        puzzle = await make_puzzle()

        for level in (2, 1):
            await repo.create(HintCreate(
                user_id=user.user_id,
                puzzle_id=puzzle.puzzle_id,
                hint_level=level,
                hint_text=f"hint {level}",
                coins_spent=level
            ))

        hints = await repo.get_hints_for_user_puzzle(user.user_id, puzzle.puzzle_id)
        assert [h.hint_level for h in hints] == [1, 2]
        assert len(await repo.get_hints_by_user(user.user_id)) == 2
        assert await repo.get_total_coins_spent(user.user_id) == 3

    async def test_total_spent_without_hints(self, repo, make_user):
        user = await make_user()
        assert await repo.get_total_coins_spent(user.user_id) == 0


class TestMoodHistoryRepository:
    @pytest.fixture
    def repo(self, db):
        return MoodHistoryRepository()

    async def test_history_newest_first(self, repo, make_user):
        user = await make_user()
        await repo.create(MoodHistoryCreate(user_id=user.user_id, old_tier=0, new_tier=1, reason="TIER_UP"))
        await repo.create(MoodHistoryCreate(user_id=user.user_id, old_tier=1, new_tier=1, reason="SOLVE"))

        history = await repo.get_by_user(user.user_id)

        assert [h.reason for h in history] == ["SOLVE", "TIER_UP"]

    async def test_streak_break_lookup(self, repo, make_user):
        user = await make_user()
        await repo.create(MoodHistoryCreate(
            user_id=user.user_id, old_tier=3, new_tier=1, reason="STREAK_BREAK", streak_at_change=6
        ))

        assert await repo.has_streak_break_at_least(user.user_id, 5) is True
        assert await repo.has_streak_break_at_least(user.user_id, 7) is False


class TestWeeklyLeaderboardRepository:
    @pytest.fixture
    def repo(self, db):
        return WeeklyLeaderboardRepository()

    async def test_persisted_rankings(self, repo, make_user, make_puzzle):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        puzzle = await make_puzzle(week_start=WEEK_START)

        for rank, user in enumerate((bob, alice), start=1):
            await repo.create(WeeklyLeaderboardCreate(
                week_start_date=WEEK_START,
                user_id=user.user_id,
                puzzle_id=puzzle.puzzle_id,
                solve_time=WEEK_START + timedelta(hours=rank),
                total_guesses=rank,
                rank=rank
            ))

        assert [e.user_id for e in await repo.get_by_week(WEEK_START)] == [bob.user_id, alice.user_id]
        assert await repo.exists_for_puzzle(puzzle.puzzle_id) is True
        assert await repo.get_all_weeks() == [WEEK_START]
        assert await repo.get_user_first_place_count(bob.user_id) == 1
        assert await repo.get_user_first_place_count(alice.user_id) == 0
        assert await repo.count_entries_for_user(alice.user_id) == 1

        assert await repo.delete_by_puzzle(puzzle.puzzle_id) == 2
        assert await repo.get_by_puzzle(puzzle.puzzle_id) == []

    async def test_all_weeks_are_distinct(self, repo, make_user, make_puzzle):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        puzzle = await make_puzzle(week_start=WEEK_START)
        for week in range(2):
            for rank, user in enumerate((alice, bob), start=1):
                await repo.create(WeeklyLeaderboardCreate(
                    week_start_date=WEEK_START + timedelta(days=7 * week),
                    user_id=user.user_id,
                    puzzle_id=puzzle.puzzle_id,
                    solve_time=WEEK_START + timedelta(days=7 * week, hours=rank),
                    total_guesses=rank,
                    rank=rank
                ))

        with warnings.catch_warnings():
            warnings.simplefilter("error", SAWarning)
            weeks = await repo.get_all_weeks()

        assert weeks == [WEEK_START + timedelta(days=7), WEEK_START]


class TestAchievementRepository:
    @pytest.fixture
    def repo(self, db):
        return AchievementRepository()

    async def test_catalogue(self, repo):
        assert len(await repo.get_all(include_secret=True)) == 24
        visible = await repo.get_all()
        assert len(visible) == 19
        assert not any(a.is_secret for a in visible)
        assert await repo.count_by_category("streak") == 5

    async def test_grant_and_lookup(self, repo, make_user):
        user = await make_user()

        await repo.grant(user.user_id, "streak_first_blood")

        assert await repo.user_has_achievement(user.user_id, "streak_first_blood") is True
        assert await repo.count_user_achievements(user.user_id) == 1
        assert await repo.count_user_achievements_by_category(user.user_id, "streak") == 1

        unlocked = await repo.get_user_achievements(user.user_id)
        assert unlocked[0].achievement.achievement_key == "FIRST_BLOOD"

    async def test_grant_twice(self, repo, make_user):
        user = await make_user()
        await repo.grant(user.user_id, "streak_first_blood")

        with pytest.raises(DuplicateItemError):
            await repo.grant(user.user_id, "streak_first_blood")


class TestGeneratedPuzzleRepository:
    @pytest.fixture
    def repo(self, db):
        return GeneratedPuzzleRepository()

    def idea(self, user_id, answer="Mind over matter"):
        return GeneratedPuzzleCreate(
            puzzle_concept="Word stacked above another",
            answer=answer,
            visual_description="MIND written above MATTER",
            difficulty="EASY",
            generated_by=user_id
        )

    async def test_review_workflow(self, repo, make_user):
        author = await make_user("Author")
        reviewer = await make_user("Reviewer")

        first = await repo.create(self.idea(author.user_id))
        second = await repo.create(self.idea(author.user_id, "Split second"))
        assert first.status == "PENDING"

        approved = await repo.approve(first.generated_puzzle_id, reviewer.user_id)
        assert approved.status == "APPROVED"
        assert approved.reviewed_by == reviewer.user_id
        assert approved.reviewed_at is not None

        rejected = await repo.reject(second.generated_puzzle_id, reviewer.user_id, "Too easy")
        assert rejected.rejection_reason == "Too easy"

        assert [p.generated_puzzle_id for p in await repo.find_approved()] == [first.generated_puzzle_id]
        assert await repo.find_pending() == []
        assert len(await repo.find_by_user(author.user_id)) == 2

        stats = await repo.get_stats()
        assert (stats.total, stats.pending, stats.approved, stats.rejected) == (2, 0, 1, 1)

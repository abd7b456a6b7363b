"""Tests for puzzle loading, activation and rotation"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from bamboozled.database.exceptions import ItemNotFoundError
from bamboozled.services.puzzle_service import PuzzleService

PAGES = [
    {
        "puzzleImageName": ["puzzle1-1.png", "puzzle1-2.png"],
        "answers": ["1. Falling Temperature", "2.  Split Second"]
    },
    {
        "puzzleImageName": ["puzzle2-1.png", "puzzle2-2.png"],
        "answers": ["1. Mind Over Matter"]
    }
]


class TestPuzzleLoading:
    """Test cases for loading the puzzle data file"""

    @pytest.fixture
    def puzzle_service(self, db, settings_env):
        return PuzzleService()

    @pytest.fixture
    def data_file(self, tmp_path):
        path = tmp_path / "pages.json"
        path.write_text(json.dumps(PAGES))
        return path

    async def test_load_creates_inactive_puzzles(self, puzzle_service, data_file):
        created = await puzzle_service.load_puzzles_from_file(data_file)

        assert created == 3
        puzzles = await puzzle_service.get_all_puzzles()
        assert [p.puzzle_key for p in puzzles] == ["puzzle1-1", "puzzle1-2", "puzzle2-1"]
        assert [p.answer for p in puzzles] == ["Falling Temperature", "Split Second", "Mind Over Matter"]
        assert puzzles[0].image_path == "puzzle1-1.png"
        assert not any(p.is_active for p in puzzles)

    async def test_load_skips_existing_keys(self, puzzle_service, data_file):
        await puzzle_service.load_puzzles_from_file(data_file)

        assert await puzzle_service.load_puzzles_from_file(data_file) == 0
        assert len(await puzzle_service.get_all_puzzles()) == 3

    async def test_load_default_path(self, puzzle_service, settings_env, tmp_path):
        (tmp_path / "puzzle-data.json").write_text(json.dumps(PAGES[:1]))

        assert await puzzle_service.load_puzzles_from_file() == 2

    async def test_missing_file(self, puzzle_service, tmp_path):
        assert await puzzle_service.load_puzzles_from_file(tmp_path / "missing.json") == 0


class TestPuzzleActivation:
    """Test cases for activation and rotation"""

    @pytest.fixture
    def puzzle_service(self, db, settings_env):
        return PuzzleService()

    async def test_activate_by_key(self, puzzle_service, make_puzzle):
        await make_puzzle("puzzle1-1", active=True)
        await make_puzzle("puzzle1-2", week_start=datetime(2024, 1, 1, tzinfo=timezone.utc))
        before = datetime.now(timezone.utc)

        activated = await puzzle_service.activate_puzzle("puzzle1-2")

        assert activated.is_active is True
        assert activated.week_start_date >= before - timedelta(seconds=1)
        assert activated.week_end_date - activated.week_start_date == timedelta(days=7)
        assert (await puzzle_service.get_active_puzzle()).puzzle_key == "puzzle1-2"
        assert (await puzzle_service.get_puzzle_by_key("puzzle1-1")).is_active is False

    async def test_activate_unknown_key(self, puzzle_service):
        with pytest.raises(ValueError) as exc_info:
            await puzzle_service.activate_puzzle("nope")

        assert str(exc_info.value) == "Puzzle not found: nope"

    async def test_activate_unknown_id(self, puzzle_service):
        with pytest.raises(ItemNotFoundError):
            await puzzle_service.activate_puzzle_by_id("puzzle_missing")

    async def test_rotate_without_puzzles(self, puzzle_service):
        assert await puzzle_service.rotate_to_next_puzzle() is None

    async def test_rotate_without_active_takes_first(self, puzzle_service, make_puzzle):
        first = await make_puzzle("puzzle1-1")
        await make_puzzle("puzzle1-2")

        rotated = await puzzle_service.rotate_to_next_puzzle()

        assert rotated.puzzle_id == first.puzzle_id

    async def test_rotate_advances_and_wraps(self, puzzle_service, make_puzzle):
        await make_puzzle("puzzle1-1", active=True)
        await make_puzzle("puzzle1-2")
        await make_puzzle("puzzle1-3")

        keys = []
        for _ in range(3):
            keys.append((await puzzle_service.rotate_to_next_puzzle()).puzzle_key)

        assert keys == ["puzzle1-2", "puzzle1-3", "puzzle1-1"]

    async def test_image_path(self, puzzle_service, make_puzzle, settings_env, tmp_path):
        puzzle = await make_puzzle("puzzle1-1")

        path = puzzle_service.get_puzzle_image_path(puzzle)
        assert path == tmp_path / "images" / "puzzle1-1.png"
        assert puzzle_service.puzzle_image_exists(puzzle) is False

        path.parent.mkdir(parents=True)
        path.write_bytes(b"\x89PNG")
        assert puzzle_service.puzzle_image_exists(puzzle) is True

"""Puzzle catalogue and weekly activation"""

import json
import logging
import re
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional, Union

import aiofiles

from bamboozled.config import get_settings
from bamboozled.models.puzzle import Puzzle, PuzzleCreate, PuzzleUpdate
from bamboozled.repositories.puzzle_repository import PuzzleRepository

logger = logging.getLogger(__name__)

PUZZLE_WEEK = timedelta(days=7)

_ANSWER_NUMBER_PREFIX = re.compile(r'^\d+\.\s*')
_IMAGE_EXTENSION = re.compile(r'\.png$')


class PuzzleService:
    """Service for puzzle loading, lookup and rotation"""

    def __init__(self):
        self.puzzle_repository = PuzzleRepository()

    async def get_active_puzzle(self) -> Optional[Puzzle]:
        return await self.puzzle_repository.get_active_puzzle()

    async def get_puzzle_by_id(self, puzzle_id: str) -> Optional[Puzzle]:
        return await self.puzzle_repository.find_by_id(puzzle_id)

    async def get_puzzle_by_key(self, puzzle_key: str) -> Optional[Puzzle]:
        return await self.puzzle_repository.find_by_key(puzzle_key)

    async def get_all_puzzles(self) -> List[Puzzle]:
        return await self.puzzle_repository.get_all()

    async def load_puzzles_from_file(self, path: Optional[Union[str, Path]] = None) -> int:
        """
        Create puzzles listed in a scraped page file.

        The file holds a list of pages, each with parallel ``puzzleImageName``
        and ``answers`` arrays. Answers look like ``"1. Falling Temperature"``
        and image names like ``"puzzle1-1.png"``. Existing keys are skipped
        and new puzzles start inactive.

        Returns:
            Number of puzzles created
        """
        data_path = Path(path or get_settings().puzzle_data_path)
        if not data_path.exists():
            logger.warning(f"Puzzle data file not found: {data_path}")
            return 0

        async with aiofiles.open(data_path, "r", encoding="utf-8") as f:
            pages = json.loads(await f.read())

        created = 0
        for page in pages:
            for image_name, answer_text in zip(page.get("puzzleImageName", []), page.get("answers", [])):
                answer = _ANSWER_NUMBER_PREFIX.sub('', answer_text).strip()
                puzzle_key = _IMAGE_EXTENSION.sub('', image_name)

                if await self.puzzle_repository.find_by_key(puzzle_key):
                    continue

                now = datetime.now(timezone.utc)
                await self.puzzle_repository.create(PuzzleCreate(
                    puzzle_key=puzzle_key,
                    answer=answer,
                    image_path=image_name,
                    week_start_date=now,
                    week_end_date=now,
                    is_active=False
                ))
                created += 1

        logger.info(f"Loaded {created} puzzles from {len(pages)} pages in {data_path}")
        return created

    async def activate_puzzle_by_id(self, puzzle_id: str) -> Puzzle:
        """Make the puzzle the only active one, running from now for a week"""
        await self.puzzle_repository.set_active_puzzle(puzzle_id)

        now = datetime.now(timezone.utc)
        return await self.puzzle_repository.update(puzzle_id, PuzzleUpdate(
            week_start_date=now,
            week_end_date=now + PUZZLE_WEEK,
            is_active=True
        ))

    async def activate_puzzle(self, puzzle_key: str) -> Puzzle:
        puzzle = await self.puzzle_repository.find_by_key(puzzle_key)
        if puzzle is None:
            raise ValueError(f"Puzzle not found: {puzzle_key}")
        return await self.activate_puzzle_by_id(puzzle.puzzle_id)

    def get_puzzle_image_path(self, puzzle: Puzzle) -> Path:
        return Path(get_settings().puzzle_images_path) / puzzle.image_path

    def puzzle_image_exists(self, puzzle: Puzzle) -> bool:
        return self.get_puzzle_image_path(puzzle).is_file()

    async def rotate_to_next_puzzle(self) -> Optional[Puzzle]:
        """Activate the puzzle after the current one, wrapping to the first"""
        puzzles = await self.get_all_puzzles()
        if not puzzles:
            logger.warning("No puzzles available to rotate to")
            return None

        current = await self.get_active_puzzle()
        if current is None:
            next_puzzle = puzzles[0]
        else:
            ids = [p.puzzle_id for p in puzzles]
            index = ids.index(current.puzzle_id) if current.puzzle_id in ids else -1
            next_puzzle = puzzles[(index + 1) % len(puzzles)]

        activated = await self.activate_puzzle_by_id(next_puzzle.puzzle_id)
        logger.info(f"Rotated to puzzle {activated.puzzle_key}")
        return activated

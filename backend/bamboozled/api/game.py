"""Game API endpoints for puzzle, guess and hint operations"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from bamboozled.database.exceptions import ItemNotFoundError
from bamboozled.models.puzzle import PuzzleResponse
from bamboozled.services.guess_service import GuessService
from bamboozled.services.hint_service import HintService
from bamboozled.services.puzzle_service import PuzzleService

from .schemas import GuessRequest, HintRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["game"])

puzzle_service = PuzzleService()
guess_service = GuessService()
hint_service = HintService()


@router.get("/puzzle/active")
async def get_active_puzzle() -> Dict[str, Any]:
    """Current puzzle, without its answer"""
    try:
        puzzle = await puzzle_service.get_active_puzzle()
    except Exception as e:
        logger.error(f"Error getting active puzzle: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

    if puzzle is None:
        raise HTTPException(status_code=404, detail="No active puzzle")
    return {"puzzle": PuzzleResponse.from_puzzle(puzzle)}


@router.get("/puzzle/{puzzle_id}/image")
async def get_puzzle_image(puzzle_id: str) -> FileResponse:
    try:
        puzzle = await puzzle_service.get_puzzle_by_id(puzzle_id)
    except Exception as e:
        logger.error(f"Error getting puzzle {puzzle_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

    if puzzle is None:
        raise HTTPException(status_code=404, detail="Puzzle not found")
    if not puzzle_service.puzzle_image_exists(puzzle):
        logger.warning(f"Image missing for puzzle {puzzle.puzzle_key}: {puzzle.image_path}")
        raise HTTPException(status_code=404, detail="Image not found")

    return FileResponse(puzzle_service.get_puzzle_image_path(puzzle), media_type="image/png")


@router.post("/guess")
async def submit_guess(request: GuessRequest) -> Dict[str, Any]:
    """
    Submit a guess for the active puzzle

    - **userId**: ID of the user making the guess
    - **guessText**: the answer guess
    """
    try:
        result = await guess_service.submit_guess(request.user_id, request.guess_text)
        return {"result": result}
    except ItemNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error processing guess: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/hint")
async def request_hint(request: HintRequest) -> Dict[str, Any]:
    """Buy a hint; failures such as missing coins are reported in the result"""
    try:
        result = await hint_service.request_hint(request.user_id, request.level)
        return {"result": result}
    except Exception as e:
        logger.error(f"Error requesting hint: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

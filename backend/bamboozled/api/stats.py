"""Statistics, leaderboard, mood and achievement endpoints"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException

from bamboozled.database.exceptions import ItemNotFoundError
from bamboozled.services.achievement_service import AchievementService
from bamboozled.services.mood_service import MoodService
from bamboozled.services.puzzle_service import PuzzleService
from bamboozled.services.stats_service import StatsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["stats"])

stats_service = StatsService()
puzzle_service = PuzzleService()
mood_service = MoodService()
achievement_service = AchievementService()


@router.get("/stats/{user_id}")
async def get_user_stats(user_id: str) -> Dict[str, Any]:
    try:
        stats = await stats_service.get_user_stats(user_id)
    except Exception as e:
        logger.error(f"Error getting stats for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

    if stats is None:
        raise HTTPException(status_code=404, detail="User not found")
    return {"stats": stats}


@router.get("/leaderboard/weekly")
async def get_weekly_leaderboard() -> Dict[str, Any]:
    """Ranking for the active puzzle; empty when there is none"""
    try:
        puzzle = await puzzle_service.get_active_puzzle()
        if puzzle is None:
            return {"leaderboard": []}
        return {"leaderboard": await stats_service.get_weekly_leaderboard(puzzle.puzzle_id)}
    except Exception as e:
        logger.error(f"Error getting weekly leaderboard: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/leaderboard/alltime")
async def get_all_time_leaderboard() -> Dict[str, Any]:
    try:
        return {"leaderboard": await stats_service.get_all_time_leaderboard()}
    except Exception as e:
        logger.error(f"Error getting all-time leaderboard: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/mood/{user_id}")
async def get_mood_progress(user_id: str) -> Dict[str, Any]:
    try:
        return {"progress": await mood_service.get_progress_to_next_tier(user_id)}
    except ItemNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error getting mood progress for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/achievements/{user_id}")
async def get_user_achievements(user_id: str) -> Dict[str, Any]:
    try:
        achievements = await achievement_service.get_user_achievements(user_id)
        progress = await achievement_service.get_achievement_progress(user_id)
        return {"achievements": achievements, "progress": progress}
    except Exception as e:
        logger.error(f"Error getting achievements for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

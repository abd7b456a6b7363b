"""User API endpoints"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException

from bamboozled.services.user_service import UserService

from .schemas import CreateUserRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["users"])

user_service = UserService()


@router.post("/users")
async def create_user(request: CreateUserRequest) -> Dict[str, Any]:
    """
    Get or create a user

    - **displayName**: name shown on leaderboards
    - **slackUserId**: Slack member id; users are matched on it when present,
      otherwise on display name
    """
    try:
        if request.slack_user_id:
            user = await user_service.get_or_create_user_by_slack_id(request.slack_user_id, request.display_name)
        else:
            user = await user_service.get_or_create_user_by_display_name(request.display_name)
        return {"user": user}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating user: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

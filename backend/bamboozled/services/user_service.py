"""Player accounts: creation, lookup and renaming"""

import logging
import random
import string
import time
from typing import List, Optional

from bamboozled.models.user import User, UserCreate, UserUpdate
from bamboozled.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


def generate_web_user_id() -> str:
    """``web_<epoch ms>_<random suffix>`` for users created from the web chat"""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=6))
    return f"web_{int(time.time() * 1000)}_{suffix}"


class UserService:
    """Service for player accounts"""

    def __init__(self):
        self.user_repository = UserRepository()

    async def get_or_create_user(self, user_id: str, display_name: str) -> User:
        user = await self.user_repository.find_by_id(user_id)
        if user is None:
            user = await self.user_repository.create(
                UserCreate(user_id=user_id, display_name=display_name)
            )
        return user

    async def create_user_with_id(self, user_id: str, display_name: str) -> User:
        return await self.user_repository.create(UserCreate(user_id=user_id, display_name=display_name))

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        return await self.user_repository.find_by_id(user_id)

    async def get_user_by_display_name(self, display_name: str) -> Optional[User]:
        return await self.user_repository.find_by_display_name(display_name)

    async def update_display_name(self, user_id: str, display_name: str) -> User:
        return await self.user_repository.update(user_id, UserUpdate(display_name=display_name))

    async def update_mood_tier(self, user_id: str, new_tier: int) -> User:
        return await self.user_repository.update_mood_tier(user_id, new_tier)

    async def get_all_users(self) -> List[User]:
        return await self.user_repository.get_all()

    async def get_or_create_user_by_slack_id(self, slack_user_id: str, display_name: str) -> User:
        user = await self.user_repository.find_by_slack_user_id(slack_user_id)
        if user is None:
            user = await self.user_repository.create(UserCreate(
                user_id=f"slack_{slack_user_id}",
                slack_user_id=slack_user_id,
                display_name=display_name
            ))
            logger.info(f"Created Slack user {user.user_id}")
        return user

    async def get_or_create_user_by_display_name(self, display_name: str) -> User:
        user = await self.user_repository.find_by_display_name(display_name)
        if user is None:
            user = await self.user_repository.create(
                UserCreate(user_id=generate_web_user_id(), display_name=display_name)
            )
            logger.info(f"Created web user {user.user_id}")
        return user

    async def is_display_name_available(self, display_name: str) -> bool:
        return await self.user_repository.find_by_display_name(display_name) is None

"""User repository"""

import logging
from typing import Any, Dict, List, Optional, Union

from bamboozled.database import schema
from bamboozled.database.exceptions import ItemNotFoundError
from bamboozled.database.helpers import utc_now
from bamboozled.models.user import User, UserCreate, UserUpdate

from .base import ROWID, BaseRepository, to_db_values

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Repository for user data operations"""

    table = schema.users
    model = User
    id_prefix = "user"

    async def create(self, user_data: Union[UserCreate, Dict[str, Any]]) -> User:
        """Create a new user; ``user_id`` is generated when not given"""
        if isinstance(user_data, dict):
            user_data = UserCreate(**user_data)

        now = utc_now()
        values = to_db_values(user_data.model_dump())
        values.update(created_at=now, updated_at=now)

        user = await super().create(values)
        logger.info(f"Created user {user.user_id} ({user.display_name})")
        return user

    async def find_by_id(self, user_id: str) -> Optional[User]:
        return await self.get_by_id(user_id)

    async def find_by_slack_user_id(self, slack_user_id: str) -> Optional[User]:
        users = await self.query(self.table.c.slack_user_id == slack_user_id, limit=1)
        return users[0] if users else None

    async def find_by_display_name(self, display_name: str) -> Optional[User]:
        users = await self.query(
            self.table.c.display_name == display_name,
            order_by=[ROWID],
            limit=1
        )
        return users[0] if users else None

    async def update(self, user_id: str, updates: Union[UserUpdate, Dict[str, Any]]) -> User:
        """Update user fields and bump ``updated_at``"""
        if isinstance(updates, dict):
            updates = UserUpdate(**updates)

        values = to_db_values(updates)
        values["updated_at"] = utc_now()
        try:
            return await super().update(user_id, values)
        except ItemNotFoundError:
            raise ItemNotFoundError(f"User not found: {user_id}")

    async def update_mood_tier(self, user_id: str, mood_tier: int) -> User:
        return await self.update(user_id, UserUpdate(mood_tier=mood_tier))

    async def get_all(self) -> List[User]:
        return await self.query(order_by=[self.table.c.created_at, ROWID])

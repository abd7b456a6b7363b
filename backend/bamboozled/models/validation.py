"""Validation of the JSON progress document stored on user achievements"""

import json
import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from bamboozled.database.helpers import utc_now

logger = logging.getLogger(__name__)


class AchievementProgressData(BaseModel):
    """Progress toward one achievement"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    current: int = Field(..., ge=0, description="Current progress value")
    target: int = Field(..., ge=1, description="Target value to complete the achievement")
    last_updated: str = Field(default_factory=utc_now, description="ISO timestamp of last update")
    completed_at: Optional[str] = Field(None, description="ISO timestamp when completed")
    metadata: Optional[Dict[str, Any]] = Field(None, description="Achievement-specific details")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


class ProgressValidation:
    """Helpers for reading and writing ``user_achievements.progress_data``"""

    @staticmethod
    def parse(raw: Optional[str]) -> Optional[AchievementProgressData]:
        """Parsed progress, or None when missing or invalid"""
        if not raw:
            return None

        try:
            return AchievementProgressData.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error(f"Invalid achievement progress data: {e}")
            return None

    @staticmethod
    def is_valid(raw: Optional[str]) -> bool:
        if not raw:
            return False
        try:
            AchievementProgressData.model_validate(json.loads(raw))
            return True
        except (json.JSONDecodeError, ValidationError):
            return False

    @staticmethod
    def create(current: int, target: int, metadata: Optional[Dict[str, Any]] = None) -> str:
        return AchievementProgressData(current=current, target=target, metadata=metadata).to_json()

    @classmethod
    def update(cls, raw: Optional[str], **updates: Any) -> str:
        """Merge field updates into existing progress (a 0/100 document when missing)"""
        existing = cls.parse(raw) or AchievementProgressData(current=0, target=100)
        data = existing.model_dump()
        data.update(updates)
        data["last_updated"] = utc_now()
        return AchievementProgressData.model_validate(data).to_json()

    @classmethod
    def complete(cls, raw: Optional[str]) -> str:
        existing = cls.parse(raw)
        if existing is None:
            raise ValueError("Cannot complete missing progress data")

        now = utc_now()
        return existing.model_copy(
            update={"current": existing.target, "last_updated": now, "completed_at": now}
        ).to_json()

    @classmethod
    def increment(cls, raw: Optional[str], amount: int = 1) -> str:
        """Advance progress, capped at the target; completion is stamped on reaching it"""
        existing = cls.parse(raw)
        if existing is None:
            raise ValueError("Cannot increment missing progress data")

        now = utc_now()
        current = min(existing.current + amount, existing.target)
        update: Dict[str, Any] = {"current": current, "last_updated": now}
        if current >= existing.target and not existing.completed_at:
            update["completed_at"] = now
        return existing.model_copy(update=update).to_json()

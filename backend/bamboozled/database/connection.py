"""Access to the engine of the active database provider"""

from sqlalchemy.ext.asyncio import AsyncEngine

from .helpers import generate_id, utc_now
from .providers.factory import get_database_provider

__all__ = ["generate_id", "utc_now", "get_engine"]


def get_engine() -> AsyncEngine:
    """Engine of the active provider; raises ConnectionError when there is none"""
    return get_database_provider().engine

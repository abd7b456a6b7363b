"""Database initialization and health checks"""

import logging
from typing import Any, Dict

from .exceptions import DatabaseError
from .providers.factory import create_database_provider, get_database_provider

logger = logging.getLogger(__name__)


async def initialize_database(reset: bool = False) -> Dict[str, Any]:
    """Bring the schema of the active provider up to date.

    Creates (and connects) the provider when needed. A fresh database gets
    every migration; an existing one only the pending ones. With ``reset``
    all tables are dropped and rebuilt first.
    """
    logger.info("Starting database initialization...")

    try:
        provider = await create_database_provider()

        if reset:
            await provider.reset()
            action = "reset"
        elif not await provider.is_initialized():
            logger.info("Creating database tables...")
            await provider.migrate()
            action = "created"
        else:
            await provider.migrate()
            action = "up_to_date"

    except DatabaseError as e:
        logger.error(f"Database initialization failed: {e}")
        raise

    logger.info(f"Database initialization completed ({action})")
    return {
        "status": "success",
        "provider": provider.name,
        "action": action,
        "initialized": await provider.is_initialized()
    }


async def check_database_health() -> bool:
    """True when the active provider answers a probe query"""
    try:
        provider = get_database_provider()
    except DatabaseError as e:
        logger.error(f"Database health check failed: {e}")
        return False

    return await provider.health_check()

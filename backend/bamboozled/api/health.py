"""
Health check endpoint
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException

from bamboozled.database.exceptions import ConnectionError, DatabaseError
from bamboozled.database.providers.factory import get_database_provider

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """
    Database health check for load balancers.
    Returns 503 when the database is unreachable or has no schema.
    """
    try:
        provider = get_database_provider()
        healthy = await provider.health_check()
        initialized = await provider.is_initialized()
    except ConnectionError as e:
        raise HTTPException(status_code=503, detail={"status": "unhealthy", "error": str(e)})
    except DatabaseError as e:
        logger.error(f"Health check failed: {e}")
        raise HTTPException(status_code=503, detail={"status": "unhealthy", "error": str(e)})

    status = {
        "status": "healthy" if healthy and initialized else "unhealthy",
        "provider": provider.name,
        "initialized": initialized,
        "healthy": healthy,
    }
    if status["status"] != "healthy":
        raise HTTPException(status_code=503, detail=status)
    return status

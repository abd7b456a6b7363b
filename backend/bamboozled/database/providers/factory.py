"""Provider selection and the process-wide provider instance"""

import logging
from typing import Dict, Optional, Type

from bamboozled.config import get_settings
from bamboozled.database.exceptions import (
    ConnectionError,
    ProviderNotImplementedError,
    UnknownProviderError
)

from .base import DatabaseConfig, DatabaseProvider
from .sqlite import SQLiteProvider

logger = logging.getLogger(__name__)

PROVIDERS: Dict[str, Type[DatabaseProvider]] = {
    "sqlite": SQLiteProvider,
}

PLANNED_PROVIDERS = ("postgres", "dynamodb")

_provider: Optional[DatabaseProvider] = None


def build_provider(config: DatabaseConfig) -> DatabaseProvider:
    """Instantiate the provider named in the config without connecting it"""
    name = (config.provider or "").lower()

    provider_class = PROVIDERS.get(name)
    if provider_class is not None:
        return provider_class(config)

    if name in PLANNED_PROVIDERS:
        raise ProviderNotImplementedError(f"{name.capitalize()} provider not yet implemented")

    raise UnknownProviderError(f"Unknown database provider: {config.provider}")


async def create_database_provider(config: Optional[DatabaseConfig] = None) -> DatabaseProvider:
    """Return the connected provider, creating it on first use"""
    global _provider

    if _provider is not None:
        return _provider

    if config is None:
        config = get_settings().database_config()

    provider = build_provider(config)
    logger.info(f"Using {provider.name} database provider")
    await provider.connect()

    _provider = provider
    return provider


def get_database_provider() -> DatabaseProvider:
    """Get the active provider; it must have been created first"""
    if _provider is None:
        raise ConnectionError("Database provider not initialized. Call create_database_provider() first.")
    return _provider


async def close_database_provider() -> None:
    """Disconnect and forget the active provider"""
    global _provider

    if _provider is not None:
        await _provider.disconnect()
        _provider = None

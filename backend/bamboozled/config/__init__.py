"""Application configuration"""

from .settings import (
    Settings,
    DevelopmentSettings,
    StagingSettings,
    ProductionSettings,
    TestSettings,
    get_settings
)

__all__ = [
    "Settings",
    "DevelopmentSettings",
    "StagingSettings",
    "ProductionSettings",
    "TestSettings",
    "get_settings"
]

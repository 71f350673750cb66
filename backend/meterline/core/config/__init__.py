"""Configuration module for the Meterline backend.

Provides centralized configuration management with type-safe enums.

Usage:
    from meterline.core.config import settings, Environment

    # Access settings
    if settings.USAGE_ALERT_WEBHOOK_URL:
        ...

    # Use enums for type safety
    if settings.ENVIRONMENT == Environment.PRD:
        ...
"""

from meterline.core.config.enums import Environment
from meterline.core.config.settings import Settings

__all__ = [
    "Settings",
    "Environment",
    "settings",
]

# Singleton settings instance
settings = Settings()

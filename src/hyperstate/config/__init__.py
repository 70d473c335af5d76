"""Configuration package.

Usage:
    from hyperstate.config import get_settings

    settings = get_settings()
    settings.base_uri
"""

from .settings import (
    DevelopmentSettings,
    HyperstateSettings,
    ProductionSettings,
    TestSettings,
    get_settings,
    reset_settings,
)

__all__ = [
    "HyperstateSettings",
    "DevelopmentSettings",
    "ProductionSettings",
    "TestSettings",
    "get_settings",
    "reset_settings",
]

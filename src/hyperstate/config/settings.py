"""Configuration management for hyperstate using pydantic-settings.

Settings are read from environment variables prefixed with ``HYPERSTATE_``
and from an optional ``.env`` file, with type validation.
"""

import os
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class HyperstateSettings(BaseSettings):
    """Main configuration settings for hyperstate."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="HYPERSTATE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Link generation
    base_uri: str = Field("", description="Prefix prepended to every generated href")
    strict_templates: bool = Field(
        True, description="Skip links whose URI template still has unresolved placeholders"
    )
    link_header_max_rels: int = Field(
        8, ge=1, description="Maximum relations inspected from a custom Link header"
    )

    # Logging
    debug_mode: bool = Field(False, description="Enable debug logging")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "INFO", description="Log level used when debug mode is off"
    )
    structured_logging: bool = Field(True, description="Render log events as JSON")

    def effective_log_level(self) -> str:
        """Log level after applying debug mode."""
        return "DEBUG" if self.debug_mode else self.log_level


class DevelopmentSettings(HyperstateSettings):
    """Development-specific settings."""

    debug_mode: bool = True
    structured_logging: bool = False


class ProductionSettings(HyperstateSettings):
    """Production-specific settings."""

    debug_mode: bool = False
    structured_logging: bool = True


class TestSettings(HyperstateSettings):
    """Test-specific settings."""

    __test__ = False

    base_uri: str = "/baseuri"
    structured_logging: bool = False


# Singleton instance
_settings: HyperstateSettings | None = None


def get_settings(env: str | None = None) -> HyperstateSettings:
    """Get the singleton settings instance.

    Args:
        env: Environment name ('development', 'production', 'test'). Falls back
            to the ``HYPERSTATE_ENV`` environment variable.

    Returns:
        HyperstateSettings instance
    """
    global _settings

    if _settings is None:
        env_name = env or os.getenv("HYPERSTATE_ENV", "")
        if env_name == "development":
            _settings = DevelopmentSettings()
        elif env_name == "production":
            _settings = ProductionSettings()
        elif env_name == "test":
            _settings = TestSettings()
        else:
            _settings = HyperstateSettings()

    return _settings


def reset_settings() -> None:
    """Reset the settings singleton (mainly for testing)."""
    global _settings
    _settings = None

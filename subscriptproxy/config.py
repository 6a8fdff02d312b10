"""
Configuration Management for SubscriptProxy

Uses Pydantic Settings for environment-based defaults of layer
options, so a deployment can change the defaults without touching
every install call.
"""

from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Package configuration loaded from environment variables.

    Environment variables should be prefixed with SUBSCRIPTPROXY_.
    Example: SUBSCRIPTPROXY_FALLBACK=false
    """

    model_config = SettingsConfigDict(
        env_prefix="SUBSCRIPTPROXY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Layer Option Defaults
    # =========================================================================

    fallback: bool = Field(
        default=True,
        description="Default for falling back to inherited lookup"
    )

    evaluate_functions: bool = Field(
        default=True,
        description="Default for invoking callable source values on access"
    )

    copy_parent_prototype: bool = Field(
        default=True,
        description="Default for inserting a fresh class above the target's class"
    )

    excluded_keys: list[str] = Field(
        default_factory=list,
        description="Names excluded from every layer unless overridden"
    )

    # =========================================================================
    # Diagnostics
    # =========================================================================

    trace_access: bool = Field(
        default=False,
        description="Emit a debug log line for every intercepted attribute read"
    )

    def layer_defaults(self) -> dict[str, Any]:
        """Option defaults in the shape expected by LayerOptions."""
        return {
            "fallback": self.fallback,
            "evaluate_functions": self.evaluate_functions,
            "copy_parent_prototype": self.copy_parent_prototype,
            "excluded_keys": tuple(self.excluded_keys),
        }


# Global settings instance - lazy loaded
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the package settings instance.

    Uses lazy loading to defer configuration parsing until first use.
    This allows environment variables and .env files to be set up
    before the settings are accessed.

    Returns:
        Settings: The package configuration.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """
    Reset the settings instance.

    Useful for testing or when environment variables change.
    """
    global _settings
    _settings = None

"""Configuration management using pydantic-settings.

Provides environment-based configuration with type safety and validation.
"""

from .settings import (
    DEFAULT_SOCKET_PATH,
    DEFAULT_SYSTEM_PROMPT,
    EngineSettings,
    LoggingSettings,
    RuntimeSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "DEFAULT_SOCKET_PATH",
    "DEFAULT_SYSTEM_PROMPT",
    "EngineSettings",
    "LoggingSettings",
    "RuntimeSettings",
    "clear_settings_cache",
    "get_settings",
]

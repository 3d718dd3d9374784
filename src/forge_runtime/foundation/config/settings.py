"""Environment-based configuration using pydantic-settings.

Provides type-safe, validated configuration from environment variables
with sensible defaults. Supports .env files and nested configuration.

Example:
    >>> from forge_runtime.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.socket_path
    '/tmp/forge-ai.sock'
    >>> settings.engine.n_ctx
    2048

    # Or with environment variables:
    # FORGE_SOCKET_PATH=/run/forge.sock
    # FORGE_ENGINE_N_CTX=4096
    # FORGE_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Literal

import orjson
from pydantic import Field, PositiveFloat, PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SOCKET_PATH = "/tmp/forge-ai.sock"
DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful AI assistant with access to tools. "
    "When you need to use a tool, respond with JSON in this format:\n"
    '{"tool":"tool_name","arguments":{...}}\n'
    "Only use tools when necessary."
)

# Keys persisted by save_to_file; from_file accepts any EngineSettings field
_PERSISTED_ENGINE_KEYS = (
    "model_path", "n_threads", "n_ctx", "n_batch", "max_tokens",
    "temperature", "top_p", "top_k", "repeat_penalty", "verbose",
)


class EngineSettings(BaseSettings):
    """Text generation engine configuration.

    The dispatcher applies the generation defaults and the system prompt;
    the remaining fields are for whichever engine is attached.
    """

    model_config = SettingsConfigDict(
        env_prefix="FORGE_ENGINE_",
        extra="ignore",
        protected_namespaces=(),
    )

    model_path: str = ""
    n_threads: PositiveInt = 4
    n_threads_batch: PositiveInt = 4
    n_ctx: PositiveInt = Field(default=2048, description="Context window in tokens")
    n_batch: PositiveInt = 512
    n_ubatch: PositiveInt = 512
    use_mmap: bool = True
    use_mlock: bool = False
    max_tokens: PositiveInt = Field(default=512, description="Default generation limit")
    temperature: Annotated[float, Field(ge=0.0)] = 0.7
    top_p: Annotated[float, Field(gt=0.0, le=1.0)] = 0.9
    top_k: PositiveInt = 40
    repeat_penalty: PositiveFloat = 1.1
    stop_sequences: list[str] = Field(default_factory=lambda: ["\n\n", "###"])
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    verbose: bool = False

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> EngineSettings:
        """Load settings from a JSON file. Unknown keys are ignored.

        Raises:
            FileNotFoundError: If ``path`` does not exist
        """
        data = orjson.loads(Path(path).read_bytes())
        if not isinstance(data, dict):
            raise ValueError(f"engine config must be a JSON object: {path}")
        return cls(**data)

    def save_to_file(self, path: str | os.PathLike[str]) -> None:
        """Write the persisted subset of settings as indented JSON."""
        data = self.model_dump(include=set(_PERSISTED_ENGINE_KEYS))
        Path(path).write_bytes(orjson.dumps(data, option=orjson.OPT_INDENT_2))


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FORGE_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "text"] = "text"


class RuntimeSettings(BaseSettings):
    """Root settings for the runtime.

    Loads configuration from environment variables with FORGE_ prefix.
    Supports nested configuration and .env files.

    Example environment variables:
        FORGE_SOCKET_PATH=/run/forge.sock
        FORGE_TOOL_WORKERS=8
        FORGE_ENGINE_MODEL_PATH=/models/q4.gguf
        FORGE_LOG_FORMAT=json
    """

    model_config = SettingsConfigDict(
        env_prefix="FORGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    socket_path: str = DEFAULT_SOCKET_PATH
    max_request_bytes: PositiveInt = Field(default=1024 * 1024, description="Largest accepted request document")
    tool_workers: PositiveInt = Field(default=min(32, (os.cpu_count() or 1) + 4), description="Worker threads for tool tasks")

    engine: EngineSettings = Field(default_factory=EngineSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> RuntimeSettings:
    """Get the global settings instance (cached)."""
    return RuntimeSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    After calling this, the next get_settings() call will
    reload configuration from environment.
    """
    get_settings.cache_clear()

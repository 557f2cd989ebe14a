"""Environment-bound configuration objects.

This module provides Pydantic BaseSettings-based configuration loading from .env files.
All settings classes automatically load from environment variables with support for
multiple alias names (e.g., MODEL_CHAT and OPENAI_MODEL both work).

Example:
    from aimeAgent.config.settings import get_settings

    settings = get_settings()  # Cached singleton
    api_key = settings.model.api_key
    max_turns = settings.governance.max_turns
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


load_dotenv()


class ModelSettings(BaseSettings):
    """Chat model identifier and credentials for the AI collaborator.

    Any OpenAI-compatible endpoint works; point base_url at the vendor gateway.
    """

    model: str = Field(
        default="gpt-4o-mini",
        validation_alias=AliasChoices("MODEL_CHAT", "MODEL_CHAT_ID", "OPENAI_MODEL"),
    )
    api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("MODEL_CHAT_API_KEY", "OPENAI_API_KEY"),
    )
    base_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("MODEL_CHAT_BASE_URL", "MODEL_CHAT_URL", "OPENAI_BASE_URL"),
    )
    temperature: float = Field(
        default=0.2,
        ge=0.0,
        le=2.0,
        validation_alias=AliasChoices("MODEL_TEMPERATURE", "TEMPERATURE"),
    )
    max_tokens: Optional[int] = Field(
        default=None,
        ge=1,
        validation_alias=AliasChoices("MODEL_MAX_TOKENS", "MAX_TOKENS"),
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


class GovernanceSettings(BaseSettings):
    """Loop budgets for the orchestrator and its actors.

    - max_turns: Orchestrator turns per run (1-500, default: 50)
    - max_iterations: ReAct iterations per actor (1-50, default: 5)
    """

    max_turns: int = Field(default=50, ge=1, le=500, alias="MAX_TURNS")
    max_iterations: int = Field(default=5, ge=1, le=50, alias="MAX_ITERATIONS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


class ToolSettings(BaseSettings):
    """Tool bus configuration.

    mcp_config_path is resolved against the project root when relative.
    """

    mcp_config_path: str = Field(
        default="aimeAgent/config/mcp_servers.yaml",
        alias="MCP_CONFIG_PATH",
    )
    default_startup_timeout: float = Field(default=30.0, gt=0, alias="MCP_STARTUP_TIMEOUT")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


class ObservabilitySettings(BaseSettings):
    """Logging configuration."""

    log_level: str = Field(default="WARNING", alias="LOG_LEVEL")
    log_dir: str = Field(default="logs", alias="LOG_DIR")

    # Prompt and tool output previews are cut to this many characters
    log_prompt_max_length: int = Field(default=500, ge=100, le=5000, alias="LOG_PROMPT_MAX_LENGTH")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


class Settings(BaseSettings):
    """Root application settings loaded from .env file.

    Hierarchical structure containing four nested settings groups:
    - model: Chat model routing and API credentials (ModelSettings)
    - governance: Turn and iteration budgets (GovernanceSettings)
    - tools: MCP server configuration (ToolSettings)
    - observability: Logging (ObservabilitySettings)

    Use get_settings() to obtain a cached singleton instance.
    """

    environment: str = Field(default="dev", alias="APP_ENV")
    model: ModelSettings = Field(default_factory=ModelSettings)
    governance: GovernanceSettings = Field(default_factory=GovernanceSettings)
    tools: ToolSettings = Field(default_factory=ToolSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_assignment=True,
        case_sensitive=False,
        protected_namespaces=(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton Settings instance.

    Returns:
        Settings: Cached application settings instance
    """
    return Settings()

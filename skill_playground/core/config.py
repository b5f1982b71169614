"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from typing import List, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# Completion Backend Configuration Models
# =====================================================================


class CompletionConfig(BaseModel):
    """Completion backend configuration."""

    service_type: str = Field(
        default="openai",
        alias="SKILL_PLAYGROUND_SERVICE_TYPE",
        description="Completion service type (openai, azure-openai, test)",
    )
    model_id: str = Field(
        default="gpt-4o-mini",
        alias="SKILL_PLAYGROUND_MODEL_ID",
        description="Model name or Azure deployment id used for completions",
    )
    endpoint: Optional[str] = Field(
        default=None,
        alias="SKILL_PLAYGROUND_ENDPOINT",
        description="Custom completion endpoint base URL (required for azure-openai)",
    )
    api_key: Optional[str] = Field(
        default=None, alias="SKILL_PLAYGROUND_API_KEY", description="API key for the completion service"
    )
    org_id: Optional[str] = Field(
        default=None, alias="SKILL_PLAYGROUND_ORG_ID", description="OpenAI organization id (optional)"
    )
    api_version: str = Field(
        default="2024-06-01",
        alias="SKILL_PLAYGROUND_API_VERSION",
        description="Azure OpenAI API version",
    )

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    # =====================================================================
    # Pydantic Configuration
    # =====================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # Skill Store Configuration
    # =====================================================================
    skills_root: str = Field(
        default="skills",
        description="Directory holding semantic skill plugins, relative to the working directory",
        alias="SKILL_PLAYGROUND_SKILLS_ROOT",
    )
    skill_plugins: List[str] = Field(
        default_factory=list,
        description="Plugin directories to import from the skills root (empty imports all)",
        alias="SKILL_PLAYGROUND_SKILL_PLUGINS",
    )

    # =====================================================================
    # Planner Configuration
    # =====================================================================
    planner_strategy: str = Field(
        default="sequential",
        description="Planner variant used by the orchestrator (sequential or action)",
        alias="SKILL_PLAYGROUND_PLANNER",
    )
    planner_max_steps: int = Field(
        default=10,
        description="Maximum number of steps accepted in a generated plan",
        alias="SKILL_PLAYGROUND_PLANNER_MAX_STEPS",
    )

    # =====================================================================
    # Completion Backend Configuration
    # =====================================================================
    service_type: str = Field(default="openai", alias="SKILL_PLAYGROUND_SERVICE_TYPE")
    model_id: str = Field(default="gpt-4o-mini", alias="SKILL_PLAYGROUND_MODEL_ID")
    endpoint: Optional[str] = Field(default=None, alias="SKILL_PLAYGROUND_ENDPOINT")
    api_key: Optional[str] = Field(default=None, alias="SKILL_PLAYGROUND_API_KEY")
    org_id: Optional[str] = Field(default=None, alias="SKILL_PLAYGROUND_ORG_ID")
    api_version: str = Field(default="2024-06-01", alias="SKILL_PLAYGROUND_API_VERSION")

    # =====================================================================
    # Native Plugin Configuration
    # =====================================================================
    enable_http_plugin: bool = Field(default=True, alias="SKILL_PLAYGROUND_ENABLE_HTTP_PLUGIN")
    enable_keygen_plugin: bool = Field(default=True, alias="SKILL_PLAYGROUND_ENABLE_KEYGEN_PLUGIN")
    enable_secrets_plugin: bool = Field(default=True, alias="SKILL_PLAYGROUND_ENABLE_SECRETS_PLUGIN")
    http_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout applied by the HTTP plugin to each request",
        alias="SKILL_PLAYGROUND_HTTP_TIMEOUT",
    )

    # =====================================================================
    # Logging Configuration
    # =====================================================================
    log_level: str = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="SKILL_PLAYGROUND_LOG_LEVEL",
    )

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def completion(self) -> CompletionConfig:
        """Get completion backend configuration from environment variables."""
        return CompletionConfig.model_validate(self.model_dump(by_alias=True))


def load_settings() -> Settings:
    """Build a fresh ``Settings`` from the current environment."""
    return Settings()

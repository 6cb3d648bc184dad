"""subagent-mcp configuration.

Resolution order: programmatic, environment vars (``SUBAGENT_MCP_`` prefix),
.env file, defaults.
"""

from __future__ import annotations

from typing import Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

from subagent_mcp.core.models import GroupingConstraints, LLMProviderConfig
from subagent_mcp.core.models.agent import LLMProviderType
from subagent_mcp.mcp.server import DEFAULT_SERVER_NAME, ToolCallSchema

load_dotenv(find_dotenv())


class Settings(BaseSettings):
    """Settings shared by the build and serve commands."""

    # LLM
    llm_provider: LLMProviderType = Field(
        default="anthropic", description="anthropic | openai | google_genai"
    )
    llm_model: str | None = Field(
        default=None, description="Model id; provider default when unset"
    )
    llm_endpoint: str | None = Field(
        default=None, description="Custom API base URL for the provider"
    )

    # Persistence
    groups_path: str = Field(
        default=".subagent-mcp/groups.json",
        description="Groups JSON file or directory-per-group layout",
    )

    # Grouping constraints
    min_tools_per_group: int = 5
    max_tools_per_group: int = 20
    min_groups: int = 3
    max_groups: int = 10
    enforce_numeric_constraints: bool = Field(
        default=True,
        description="Reject partitions outside the numeric bounds (False = prompt-only)",
    )

    # Retry
    max_attempts: int = 3
    max_repair_attempts: int = 3
    completion_timeout_seconds: float | None = None

    # Server
    tool_call_schema: ToolCallSchema = ToolCallSchema.PROMPT
    server_name: str = DEFAULT_SERVER_NAME

    log_level: str = "INFO"

    class Config:
        env_prefix = "SUBAGENT_MCP_"

    def grouping_constraints(self) -> GroupingConstraints:
        return GroupingConstraints(
            min_tools_per_group=self.min_tools_per_group,
            max_tools_per_group=self.max_tools_per_group,
            min_groups=self.min_groups,
            max_groups=self.max_groups,
        )

    def llm_provider_config(self) -> LLMProviderConfig:
        return LLMProviderConfig(
            type=self.llm_provider,
            model=self.llm_model,
            endpoint_override=self.llm_endpoint,
        )


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Optional[Settings]) -> None:
    """Replace the global settings instance (None resets to environment)."""
    global _settings
    _settings = settings

"""Sub-agent models and the request/response pair used at call time."""

import uuid
from datetime import UTC, datetime
from typing import Any, Dict, List, Literal

from pydantic import ConfigDict, Field, model_validator

from subagent_mcp.core.models.tool import CamelModel, ToolGroup

LLMProviderType = Literal["anthropic", "openai", "google_genai"]


def generate_request_id() -> str:
    """Generate a unique request ID."""
    return str(uuid.uuid4())


class LLMProviderConfig(CamelModel):
    """Which model a sub-agent runs on."""

    type: LLMProviderType = Field(default="anthropic", description="Provider name")
    model: str | None = Field(default=None, description="Model identifier")
    endpoint_override: str | None = Field(
        default=None, description="Custom API base URL"
    )


SUB_AGENT_PROMPT_TEMPLATE = """You are {name}.

Description: {description}

Available tools:
{tools}

Your role is to help users by using these tools effectively. When given a task, analyze which tools are needed and execute them to provide accurate results."""


class SubAgent(CamelModel):
    """A ToolGroup bound to an LLM configuration and an execution prompt.

    Built once when the registry is created and never mutated afterwards.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Same as the tool group id")
    name: str = Field(..., description="Same as the tool group name")
    description: str = Field(..., description="Same as the tool group description")
    tool_group: ToolGroup = Field(..., description="The tools this agent owns")
    llm_provider: LLMProviderConfig = Field(
        default_factory=LLMProviderConfig, description="Model used for execution"
    )
    system_prompt: str = Field(..., description="Execution system prompt")

    @classmethod
    def from_group(
        cls, group: ToolGroup, llm_config: LLMProviderConfig | None = None
    ) -> "SubAgent":
        """Create a sub-agent from a tool group.

        The group's own system prompt wins; groups persisted without one
        get a prompt listing their tools.
        """
        system_prompt = group.system_prompt.strip()
        if not system_prompt:
            tools = "\n".join(f"- {t.name}: {t.description}" for t in group.tools)
            system_prompt = SUB_AGENT_PROMPT_TEMPLATE.format(
                name=group.name, description=group.description, tools=tools
            )

        return cls(
            id=group.id,
            name=group.name,
            description=group.description,
            tool_group=group,
            llm_provider=llm_config or LLMProviderConfig(),
            system_prompt=system_prompt,
        )


class AgentRequest(CamelModel):
    """A single prompt addressed to one sub-agent."""

    request_id: str = Field(default_factory=generate_request_id)
    agent_id: str = Field(..., description="ID of the target sub-agent")
    prompt: str = Field(..., description="Task for the sub-agent")
    context: Dict[str, Any] | None = Field(
        default=None, description="Opaque caller context, passed through"
    )
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class AgentResponse(CamelModel):
    """Outcome of an agent request: exactly one of ``result`` or ``error``."""

    request_id: str
    agent_id: str
    result: str | None = None
    tools_used: List[str] | None = None
    error: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @model_validator(mode="after")
    def _exactly_one_outcome(self) -> "AgentResponse":
        if (self.result is None) == (self.error is None):
            raise ValueError("AgentResponse must set exactly one of result or error")
        return self

    @property
    def is_error(self) -> bool:
        return self.error is not None

"""Tool and tool-group models - the unit of partitioning."""

from typing import Any, Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model persisted with camelCase keys.

    Both the camelCase alias and the Python attribute name are accepted
    on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_record(self) -> Dict[str, Any]:
        """Dump to a JSON-ready dict using camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Tool(CamelModel):
    """A tool discovered from an upstream MCP server.

    Tool names are only unique per server, so identity is the
    ``server_name:name`` key.
    """

    model_config = ConfigDict(frozen=True)

    server_name: str = Field(..., description="Upstream MCP server that owns the tool")
    name: str = Field(..., description="Tool name as reported by the server")
    description: str = Field(default="", description="Tool description")
    input_schema: Dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}},
        description="JSON Schema of the tool arguments",
    )

    @property
    def key(self) -> str:
        return f"{self.server_name}:{self.name}"


class GroupingConstraints(CamelModel):
    """Numeric policy for a grouping run.

    No field validators here: a malformed policy is reported by
    ``validate_constraints`` rather than rejected at construction.
    """

    min_tools_per_group: int = Field(..., description="Lower bound of tools per group")
    max_tools_per_group: int = Field(..., description="Upper bound of tools per group")
    min_groups: int = Field(..., description="Lower bound of group count")
    max_groups: int = Field(..., description="Upper bound of group count")


DEFAULT_GROUPING_CONSTRAINTS = GroupingConstraints(
    min_tools_per_group=5,
    max_tools_per_group=20,
    min_groups=3,
    max_groups=10,
)


class ProjectContext(CamelModel):
    """Optional project information that steers the analysis phase."""

    domain: str | None = Field(default=None, description="Project domain, e.g. 'web backend'")
    custom_hints: List[str] = Field(
        default_factory=list, description="Free-text grouping hints"
    )
    full_content: str | None = Field(
        default=None, description="Merged project documentation"
    )


class ToolGroup(CamelModel):
    """A named subset of tools that becomes one sub-agent.

    The same tool may belong to several groups; it must not appear twice
    within one group.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Kebab-case identifier, unique per partition")
    name: str = Field(..., description="Human-readable name, unique per partition")
    description: str = Field(..., description="When and how to use this agent")
    tools: Tuple[Tool, ...] = Field(default=(), description="Tools owned by the group")
    system_prompt: str = Field(
        default="", description="Execution prompt for the sub-agent"
    )
    complementarity_score: float | None = Field(
        default=None, description="How well the tools complement each other, 0-1"
    )
    metadata: Dict[str, Any] | None = Field(
        default=None, description="Free-form extra data"
    )

    @property
    def tool_keys(self) -> List[str]:
        return [tool.key for tool in self.tools]

"""Data models shared by the grouping and serving sides."""

from subagent_mcp.core.models.agent import (
    AgentRequest,
    AgentResponse,
    LLMProviderConfig,
    SubAgent,
    generate_request_id,
)
from subagent_mcp.core.models.conversation import Conversation, ConversationTurn
from subagent_mcp.core.models.tool import (
    DEFAULT_GROUPING_CONSTRAINTS,
    GroupingConstraints,
    ProjectContext,
    Tool,
    ToolGroup,
)

__all__ = [
    "AgentRequest",
    "AgentResponse",
    "Conversation",
    "ConversationTurn",
    "DEFAULT_GROUPING_CONSTRAINTS",
    "GroupingConstraints",
    "LLMProviderConfig",
    "ProjectContext",
    "SubAgent",
    "Tool",
    "ToolGroup",
    "generate_request_id",
]

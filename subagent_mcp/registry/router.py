"""Request routing and response envelopes.

Routing never raises: an unknown agent is ``None`` and the caller turns it
into an error response.
"""

from typing import List, Sequence

from subagent_mcp.core.models import AgentRequest, AgentResponse, SubAgent
from subagent_mcp.registry.registry import SubAgentRegistry


def route(
    request: AgentRequest, agents: SubAgentRegistry | Sequence[SubAgent]
) -> SubAgent | None:
    """Return the sub-agent whose id equals ``request.agent_id``, if any.

    ``agents`` is a registry or a plain sequence of sub-agents.
    """
    if isinstance(agents, SubAgentRegistry):
        return agents.get(request.agent_id)
    return find_agent_by_id(agents, request.agent_id)


def find_agent_by_id(agents: Sequence[SubAgent], agent_id: str) -> SubAgent | None:
    for agent in agents:
        if agent.id == agent_id:
            return agent
    return None


def validate_request(request: AgentRequest) -> bool:
    """Check that a request can be dispatched.

    ``context`` is opaque and not inspected.
    """
    if not isinstance(request.request_id, str) or not request.request_id:
        return False
    if not isinstance(request.agent_id, str) or not request.agent_id:
        return False
    if not isinstance(request.prompt, str) or not request.prompt.strip():
        return False
    return True


def create_success_response(
    request: AgentRequest, result: str, tools_used: List[str] | None = None
) -> AgentResponse:
    return AgentResponse(
        request_id=request.request_id,
        agent_id=request.agent_id,
        result=result,
        tools_used=tools_used,
    )


def create_error_response(request: AgentRequest, error: str) -> AgentResponse:
    return AgentResponse(
        request_id=request.request_id,
        agent_id=request.agent_id,
        error=error,
    )

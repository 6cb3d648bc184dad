"""Running a request against a sub-agent.

Upstream tool execution is not performed here: the default executor
answers with a single completion seeded by the agent's system prompt.
"""

import json
import logging
from typing import Callable, Dict, Protocol, Tuple

from subagent_mcp.core.models import AgentRequest, AgentResponse, LLMProviderConfig, SubAgent
from subagent_mcp.interfaces.llm import CompletionError, CompletionProvider
from subagent_mcp.registry.router import create_error_response, create_success_response

logger = logging.getLogger(__name__)


class AgentExecutor(Protocol):
    """Executes one request on behalf of a sub-agent."""

    async def execute(self, agent: SubAgent, request: AgentRequest) -> AgentResponse:
        """Run the request and return a success or error response."""
        ...


def render_context(request: AgentRequest) -> str | None:
    if not request.context:
        return None
    return "Additional context:\n" + json.dumps(request.context, indent=2, default=str)


class CompletionAgentExecutor:
    """AgentExecutor that answers with one completion call.

    Each agent runs on the provider built for its own ``llm_provider``
    config. Providers are built on first use and reused for every agent
    sharing that config.
    """

    def __init__(
        self,
        provider_factory: Callable[[LLMProviderConfig], CompletionProvider],
        temperature: float | None = None,
    ):
        self.provider_factory = provider_factory
        self.temperature = temperature
        self._providers: Dict[Tuple[str, str | None, str | None], CompletionProvider] = {}

    def provider_for(self, config: LLMProviderConfig) -> CompletionProvider:
        key = (config.type, config.model, config.endpoint_override)
        if key not in self._providers:
            logger.info(f"Creating {config.type} provider (model={config.model})")
            self._providers[key] = self.provider_factory(config)
        return self._providers[key]

    async def execute(self, agent: SubAgent, request: AgentRequest) -> AgentResponse:
        if not agent.tool_group.tools:
            return create_error_response(request, "No tools available in this group")

        try:
            completion = self.provider_for(agent.llm_provider)
        except ValueError as e:
            logger.error(f"No {agent.llm_provider.type} provider for agent {agent.id}: {e}")
            return create_error_response(request, str(e))

        messages = [{"role": "system", "content": agent.system_prompt}]
        context = render_context(request)
        if context:
            messages.append({"role": "user", "content": context})
        messages.append({"role": "user", "content": request.prompt})

        logger.debug(f"Executing request {request.request_id} on agent {agent.id}")
        try:
            result = await completion.complete(
                request.prompt, messages=messages, temperature=self.temperature
            )
        except CompletionError as e:
            logger.warning(f"Agent {agent.id} failed request {request.request_id}: {e}")
            return create_error_response(request, str(e))

        return create_success_response(request, result)

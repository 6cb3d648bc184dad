"""MCP adapter: exposes every sub-agent as one synthetic tool.

A sub-agent with id ``code-search`` becomes the tool ``agent_code-search``.
Calls are routed through the registry and handed to an AgentExecutor;
every outcome, including routing failures, is returned as a tool result
rather than a protocol error.
"""

import logging
from enum import Enum
from typing import Any, Dict, List

from mcp import types as mcp_types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from subagent_mcp.agents.executor import AgentExecutor
from subagent_mcp.core.models import AgentRequest, SubAgent
from subagent_mcp.registry.registry import SubAgentRegistry
from subagent_mcp.registry.router import route, validate_request

logger = logging.getLogger(__name__)

AGENT_TOOL_PREFIX = "agent_"
DEFAULT_SERVER_NAME = "subagent-mcp"


class ToolCallSchema(str, Enum):
    """Input schema variant of the synthetic agent tools."""

    PROMPT = "prompt"  # target agent is the tool name
    PROMPT_AND_AGENT_ID = "prompt_and_agent_id"  # target agent is the agentId argument


CONTEXT_PROPERTY: Dict[str, Any] = {
    "type": "object",
    "description": "Additional context for the agent",
}


def agent_tool_name(agent_id: str) -> str:
    return f"{AGENT_TOOL_PREFIX}{agent_id}"


def strip_agent_prefix(name: str) -> str:
    if name.startswith(AGENT_TOOL_PREFIX):
        return name[len(AGENT_TOOL_PREFIX):]
    return name


def _error_result(message: str) -> mcp_types.CallToolResult:
    return mcp_types.CallToolResult(
        content=[mcp_types.TextContent(type="text", text=message)],
        isError=True,
    )


def _text_result(text: str) -> mcp_types.CallToolResult:
    return mcp_types.CallToolResult(
        content=[mcp_types.TextContent(type="text", text=text)],
        isError=False,
    )


class SubAgentMCPServer:
    """Serves a SubAgentRegistry over MCP.

    Example usage:
        ```python
        server = SubAgentMCPServer(registry, CompletionAgentExecutor(completion_for))
        await server.run_stdio()
        ```
    """

    def __init__(
        self,
        registry: SubAgentRegistry,
        executor: AgentExecutor,
        schema_variant: ToolCallSchema = ToolCallSchema.PROMPT,
        instructions: str | None = None,
        name: str = DEFAULT_SERVER_NAME,
    ):
        """Initialize the adapter.

        Args:
            registry: Sub-agents to expose, in tool-list order.
            executor: Runs routed requests.
            schema_variant: Input schema of the synthetic tools.
            instructions: Optional usage instructions sent on initialize.
            name: Server name reported to clients.
        """
        self.registry = registry
        self.executor = executor
        self.schema_variant = ToolCallSchema(schema_variant)
        self.instructions = instructions
        self.name = name

    def input_schema(self) -> Dict[str, Any]:
        """JSON Schema of every synthetic agent tool."""
        properties: Dict[str, Any] = {
            "prompt": {
                "type": "string",
                "description": "The task or question for the agent",
            },
            "context": CONTEXT_PROPERTY,
        }
        required = ["prompt"]

        if self.schema_variant is ToolCallSchema.PROMPT_AND_AGENT_ID:
            properties = {
                "agentId": {"type": "string", "description": "ID of the sub-agent to call"},
                **properties,
            }
            required = ["agentId", "prompt"]

        return {"type": "object", "properties": properties, "required": required}

    def agent_tool(self, agent: SubAgent) -> mcp_types.Tool:
        return mcp_types.Tool(
            name=agent_tool_name(agent.id),
            description=f"Sub-agent for {agent.name}: {agent.description}",
            inputSchema=self.input_schema(),
        )

    def list_tools(self) -> List[mcp_types.Tool]:
        """One synthetic tool per sub-agent, in registry order."""
        return [self.agent_tool(agent) for agent in self.registry]

    def _required_arguments(self) -> List[str]:
        if self.schema_variant is ToolCallSchema.PROMPT_AND_AGENT_ID:
            return ["agentId", "prompt"]
        return ["prompt"]

    async def call_tool(
        self, name: str, arguments: Dict[str, Any] | None
    ) -> mcp_types.CallToolResult:
        """Route a tools/call to a sub-agent and wrap the outcome.

        Never raises for bad input or unknown agents; those come back as
        results with ``isError=True``.
        """
        arguments = arguments or {}

        missing = [
            key
            for key in self._required_arguments()
            if not isinstance(arguments.get(key), str)
        ]
        if missing:
            return _error_result(f"Missing required arguments: {', '.join(missing)}")

        context = arguments.get("context")
        if context is not None and not isinstance(context, dict):
            return _error_result("Argument 'context' must be an object")

        if self.schema_variant is ToolCallSchema.PROMPT_AND_AGENT_ID:
            agent_id = strip_agent_prefix(arguments["agentId"].strip())
        else:
            agent_id = strip_agent_prefix(name)

        request = AgentRequest(agent_id=agent_id, prompt=arguments["prompt"], context=context)
        if not validate_request(request):
            return _error_result("Invalid request: agent id and prompt must not be blank")

        agent = route(request, self.registry)
        if agent is None:
            logger.warning(f"Tool call for unknown agent: {name}")
            return _error_result(f"Agent {agent_id} not found")

        try:
            response = await self.executor.execute(agent, request)
        except Exception as e:
            logger.exception(f"Agent {agent.id} raised while handling {request.request_id}")
            return _error_result(f"Agent {agent.name} failed: {e}")

        if response.error is not None:
            return _error_result(response.error)
        return _text_result(response.result or "No result")

    def build_server(self) -> Server:
        """Create a low-level MCP server with tools/list and tools/call wired in."""
        server: Server = Server(self.name, instructions=self.instructions)

        @server.list_tools()
        async def handle_list_tools() -> List[mcp_types.Tool]:
            return self.list_tools()

        @server.call_tool(validate_input=False)
        async def handle_call_tool(
            name: str, arguments: Dict[str, Any]
        ) -> mcp_types.CallToolResult:
            return await self.call_tool(name, arguments)

        return server

    async def run_stdio(self) -> None:
        """Serve over stdin/stdout until the client disconnects."""
        server = self.build_server()
        logger.info(f"Serving {len(self.registry)} sub-agents over stdio as {self.name}")
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream, write_stream, server.create_initialization_options()
            )

"""Tests for the MCP adapter."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from mcp.server.lowlevel import Server

from subagent_mcp.core.models import AgentResponse
from subagent_mcp.mcp.server import SubAgentMCPServer, ToolCallSchema
from subagent_mcp.registry import SubAgentRegistry, create_error_response, create_success_response


@pytest.fixture
def registry(sample_groups) -> SubAgentRegistry:
    return SubAgentRegistry.from_groups(sample_groups)


@pytest.fixture
def executor() -> MagicMock:
    """Executor double that echoes the prompt."""
    mock = MagicMock()

    async def execute(agent, request) -> AgentResponse:
        return create_success_response(request, f"{agent.id} handled: {request.prompt}")

    mock.execute = AsyncMock(side_effect=execute)
    return mock


class TestListTools:
    """Tests for the synthetic tool list."""

    def test_one_tool_per_agent(self, registry, executor) -> None:
        server = SubAgentMCPServer(registry, executor)

        tools = server.list_tools()

        assert [t.name for t in tools] == ["agent_group-1", "agent_group-2"]
        assert tools[0].description == "Sub-agent for Search: Finds things"
        assert tools[0].inputSchema["required"] == ["prompt"]
        assert tools[0].inputSchema["properties"]["context"]["type"] == "object"

    def test_agent_id_schema(self, registry, executor) -> None:
        server = SubAgentMCPServer(
            registry, executor, schema_variant=ToolCallSchema.PROMPT_AND_AGENT_ID
        )

        schema = server.list_tools()[0].inputSchema

        assert schema["required"] == ["agentId", "prompt"]
        assert "agentId" in schema["properties"]


class TestCallTool:
    """Tests for tools/call handling."""

    @pytest.mark.asyncio
    async def test_routes_by_tool_name(self, registry, executor) -> None:
        server = SubAgentMCPServer(registry, executor)

        result = await server.call_tool(
            "agent_group-2", {"prompt": "rename foo", "context": {"file": "a.py"}}
        )

        assert result.isError is False
        assert result.content[0].text == "group-2 handled: rename foo"
        request = executor.execute.call_args.args[1]
        assert request.agent_id == "group-2"
        assert request.context == {"file": "a.py"}

    @pytest.mark.asyncio
    async def test_unknown_agent(self, registry, executor) -> None:
        server = SubAgentMCPServer(registry, executor)

        result = await server.call_tool("unknown_agent", {"prompt": "hi"})

        assert result.isError is True
        assert "not found" in result.content[0].text
        executor.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_prompt(self, registry, executor) -> None:
        server = SubAgentMCPServer(registry, executor)

        result = await server.call_tool("agent_group-1", {"prompt": "  "})

        assert result.isError is True
        assert result.content[0].text.startswith("Invalid request")
        assert "prompt" in result.content[0].text
        executor.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_none_arguments(self, registry, executor) -> None:
        server = SubAgentMCPServer(registry, executor)

        result = await server.call_tool("agent_group-1", None)

        assert result.isError is True

    @pytest.mark.asyncio
    async def test_non_object_context(self, registry, executor) -> None:
        server = SubAgentMCPServer(registry, executor)

        result = await server.call_tool("agent_group-1", {"prompt": "x", "context": "y"})

        assert result.isError is True
        assert "context" in result.content[0].text

    @pytest.mark.asyncio
    async def test_agent_id_variant(self, registry, executor) -> None:
        server = SubAgentMCPServer(
            registry, executor, schema_variant=ToolCallSchema.PROMPT_AND_AGENT_ID
        )

        result = await server.call_tool(
            "agent_group-1", {"agentId": "agent_group-2", "prompt": "edit"}
        )
        missing = await server.call_tool("agent_group-1", {"prompt": "edit"})

        assert result.content[0].text == "group-2 handled: edit"
        assert missing.isError is True
        assert "agentId" in missing.content[0].text

    @pytest.mark.asyncio
    async def test_blank_agent_id_rejected(self, registry, executor) -> None:
        by_name = SubAgentMCPServer(registry, executor)
        by_argument = SubAgentMCPServer(
            registry, executor, schema_variant=ToolCallSchema.PROMPT_AND_AGENT_ID
        )

        bare_prefix = await by_name.call_tool("agent_", {"prompt": "hi"})
        blank = await by_argument.call_tool("agent_group-1", {"agentId": "  ", "prompt": "hi"})

        for result in (bare_prefix, blank):
            assert result.isError is True
            assert result.content[0].text.startswith("Invalid request")
        executor.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_result(self, registry) -> None:
        executor = MagicMock()
        executor.execute = AsyncMock(
            side_effect=lambda agent, request: create_success_response(request, "")
        )
        server = SubAgentMCPServer(registry, executor)

        result = await server.call_tool("agent_group-1", {"prompt": "x"})

        assert result.isError is False
        assert result.content[0].text == "No result"

    @pytest.mark.asyncio
    async def test_executor_error_response(self, registry) -> None:
        executor = MagicMock()
        executor.execute = AsyncMock(
            side_effect=lambda agent, request: create_error_response(request, "quota")
        )
        server = SubAgentMCPServer(registry, executor)

        result = await server.call_tool("agent_group-1", {"prompt": "x"})

        assert result.isError is True
        assert result.content[0].text == "quota"

    @pytest.mark.asyncio
    async def test_executor_exception(self, registry) -> None:
        executor = MagicMock()
        executor.execute = AsyncMock(side_effect=RuntimeError("crashed"))
        server = SubAgentMCPServer(registry, executor)

        result = await server.call_tool("agent_group-1", {"prompt": "x"})

        assert result.isError is True
        assert "crashed" in result.content[0].text


class TestBuildServer:
    """Tests for the low-level server wiring."""

    def test_build_server(self, registry, executor) -> None:
        server = SubAgentMCPServer(
            registry, executor, instructions="Use search first.", name="my-agents"
        )

        built = server.build_server()

        assert isinstance(built, Server)
        assert built.name == "my-agents"
        assert built.instructions == "Use search first."

"""Tests for the data models."""

import pytest
from pydantic import ValidationError

from subagent_mcp.core.models import (
    AgentRequest,
    AgentResponse,
    Conversation,
    GroupingConstraints,
    LLMProviderConfig,
    SubAgent,
    Tool,
    ToolGroup,
)


class TestTool:
    """Tests for the Tool model."""

    def test_key_combines_server_and_name(self) -> None:
        """Test that the key is server:name."""
        tool = Tool(server_name="github", name="search")

        assert tool.key == "github:search"

    def test_accepts_camel_case_input(self) -> None:
        """Test construction from a persisted record."""
        tool = Tool.model_validate(
            {"serverName": "fs", "name": "read", "inputSchema": {"type": "object"}}
        )

        assert tool.server_name == "fs"
        assert tool.input_schema == {"type": "object"}

    def test_record_uses_camel_case(self) -> None:
        """Test that to_record emits camelCase keys."""
        record = Tool(server_name="fs", name="read").to_record()

        assert record["serverName"] == "fs"
        assert "inputSchema" in record

    def test_is_frozen(self) -> None:
        """Test that tools cannot be mutated."""
        tool = Tool(server_name="fs", name="read")

        with pytest.raises(ValidationError):
            tool.name = "write"


class TestGroupingConstraints:
    """Tests for GroupingConstraints."""

    def test_malformed_policy_is_constructible(self) -> None:
        """Test that a malformed policy does not raise on construction."""
        constraints = GroupingConstraints(
            min_tools_per_group=0, max_tools_per_group=-1, min_groups=5, max_groups=1
        )

        assert constraints.max_groups == 1


class TestSubAgent:
    """Tests for SubAgent.from_group."""

    def test_uses_group_system_prompt(self, sample_groups) -> None:
        """Test that the group's own prompt wins."""
        agent = SubAgent.from_group(sample_groups[0])

        assert agent.id == "group-1"
        assert agent.system_prompt == "You search."
        assert agent.llm_provider.type == "anthropic"

    def test_generates_prompt_when_missing(self, make_tools) -> None:
        """Test the generated prompt lists every tool."""
        group = ToolGroup(
            id="g", name="Files", description="File work", tools=make_tools(2)
        )

        agent = SubAgent.from_group(group, LLMProviderConfig(type="openai"))

        assert agent.system_prompt.startswith("You are Files.")
        assert "- tool_0: Does thing 0" in agent.system_prompt
        assert "- tool_1: Does thing 1" in agent.system_prompt
        assert agent.llm_provider.type == "openai"

    def test_tool_group_cannot_change(self, sample_groups, make_tools) -> None:
        """Test that an agent's group is read-only."""
        agent = SubAgent.from_group(sample_groups[0])

        with pytest.raises(ValidationError):
            agent.tool_group.tools = ()
        with pytest.raises(ValidationError):
            agent.tool_group.name = "Other"
        with pytest.raises(AttributeError):
            agent.tool_group.tools.append(make_tools(1)[0])

        assert len(agent.tool_group.tools) == 3


class TestAgentResponse:
    """Tests for the result/error exclusivity of AgentResponse."""

    def test_result_only(self) -> None:
        response = AgentResponse(request_id="r", agent_id="a", result="done")

        assert not response.is_error

    def test_error_only(self) -> None:
        response = AgentResponse(request_id="r", agent_id="a", error="boom")

        assert response.is_error

    def test_both_raises(self) -> None:
        with pytest.raises(ValidationError):
            AgentResponse(request_id="r", agent_id="a", result="x", error="y")

    def test_neither_raises(self) -> None:
        with pytest.raises(ValidationError):
            AgentResponse(request_id="r", agent_id="a")


class TestAgentRequest:
    """Tests for AgentRequest defaults."""

    def test_generates_request_id_and_timestamp(self) -> None:
        first = AgentRequest(agent_id="a", prompt="hi")
        second = AgentRequest(agent_id="a", prompt="hi")

        assert first.request_id != second.request_id
        assert first.timestamp.tzinfo is not None


class TestConversation:
    """Tests for immutable conversation snapshots."""

    def test_append_returns_new_snapshot(self) -> None:
        """Test that appending leaves the original untouched."""
        base = Conversation().append("system", "sys")
        extended = base.append("user", "hello")

        assert len(base) == 1
        assert len(extended) == 2
        assert extended.to_llm_messages()[-1] == {"role": "user", "content": "hello"}

    def test_with_system_replaces_leading_turn(self) -> None:
        conv = Conversation().append("system", "old").append("user", "q")

        replaced = conv.with_system("new")

        assert replaced.turns[0].content == "new"
        assert len(replaced) == 2
        assert conv.turns[0].content == "old"

    def test_with_system_inserts_when_absent(self) -> None:
        conv = Conversation().append("user", "q").with_system("sys")

        assert [t.role for t in conv.turns] == ["system", "user"]

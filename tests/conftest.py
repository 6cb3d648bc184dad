"""Pytest configuration and fixtures."""

import inspect
import json
import sys
from pathlib import Path
from typing import Any, Callable

import pytest

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from subagent_mcp.config import set_settings  # noqa: E402
from subagent_mcp.core.models import Tool, ToolGroup  # noqa: E402
from subagent_mcp.grouping.prompts import clear_cache  # noqa: E402


class ScriptedCompletion:
    """Completion provider double that answers from a script and records calls.

    The responder receives the recorded call dict and returns the reply
    text, an Exception to raise, or an awaitable producing either.
    """

    def __init__(self, responder: Callable[[dict[str, Any]], Any]) -> None:
        self.responder = responder
        self.calls: list[dict[str, Any]] = []

    async def complete(
        self,
        prompt: str,
        *,
        messages: list[dict[str, str]] | None = None,
        temperature: float | None = None,
        response_schema: dict[str, Any] | None = None,
    ) -> str:
        call = {
            "prompt": prompt,
            "messages": messages,
            "temperature": temperature,
            "response_schema": response_schema,
        }
        self.calls.append(call)

        reply = self.responder(call)
        if inspect.isawaitable(reply):
            reply = await reply
        if isinstance(reply, Exception):
            raise reply
        return reply

    @property
    def assignment_calls(self) -> list[dict[str, Any]]:
        return [c for c in self.calls if c["response_schema"] is not None]


def build_tools(count: int, server: str = "srv") -> list[Tool]:
    return [
        Tool(server_name=server, name=f"tool_{i}", description=f"Does thing {i}")
        for i in range(count)
    ]


def grouping_json(tools: list[Tool], sizes: list[int], **overrides: Any) -> str:
    """JSON reply assigning consecutive tools to groups of the given sizes."""
    groups = []
    start = 0
    for index, size in enumerate(sizes, 1):
        record = {
            "id": f"group-{index}",
            "name": f"Group {index}",
            "description": f"Handles slice {index}",
            "toolKeys": [t.key for t in tools[start : start + size]],
            "systemPrompt": f"You are agent {index}. Use your tools, then summarize.",
            "complementarityScore": 0.8,
        }
        record.update(overrides)
        groups.append(record)
        start += size
    return json.dumps({"groups": groups})


@pytest.fixture(autouse=True)
def reset_global_state():
    """Reset cached settings and prompts around each test."""
    set_settings(None)
    clear_cache()
    yield
    set_settings(None)


@pytest.fixture
def make_tools() -> Callable[..., list[Tool]]:
    """Factory for numbered tools on one server."""
    return build_tools


@pytest.fixture
def make_grouping_reply() -> Callable[..., str]:
    """Factory for final-assignment JSON replies."""
    return grouping_json


@pytest.fixture
def scripted_completion() -> Callable[..., ScriptedCompletion]:
    """Factory for ScriptedCompletion doubles."""
    return ScriptedCompletion


@pytest.fixture
def phased_completion() -> Callable[..., ScriptedCompletion]:
    """Completion that answers free text for phases 1-2 and scripted JSON for phase 3.

    Phase-3 replies are taken from the list in order; the last one repeats.
    """

    def factory(assignment_replies: list[Any]) -> ScriptedCompletion:
        remaining = list(assignment_replies)

        def responder(call: dict[str, Any]) -> Any:
            if call["response_schema"] is None:
                return "Free-text analysis and strategy."
            if len(remaining) > 1:
                return remaining.pop(0)
            return remaining[0]

        return ScriptedCompletion(responder)

    return factory


@pytest.fixture
def sample_groups(make_tools) -> list[ToolGroup]:
    """Two groups sharing one tool."""
    tools = make_tools(5)
    return [
        ToolGroup(
            id="group-1",
            name="Search",
            description="Finds things",
            tools=tools[:3],
            system_prompt="You search.",
            complementarity_score=0.9,
        ),
        ToolGroup(
            id="group-2",
            name="Edit",
            description="Changes things",
            tools=tools[2:],
            system_prompt="You edit.",
        ),
    ]

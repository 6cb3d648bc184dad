"""Structured output for the final-assignment phase.

The LLM reply is decoded strictly (JSON -> typed GroupRecord models) and
then checked against the known tools. Only fully validated ToolGroups leave
parse_grouping_response; every failure is a GroupingResponseError whose
message is meant to be shown back to the LLM.
"""

import json
import re
from typing import Any, Dict, List

from pydantic import Field, ValidationError

from subagent_mcp.core.models.tool import CamelModel, Tool, ToolGroup
from subagent_mcp.grouping.exceptions import GroupingResponseError

DEFAULT_COMPLEMENTARITY_SCORE = 0.5

GROUPING_RESPONSE_SCHEMA: Dict[str, Any] = {
    "title": "tool_grouping",
    "description": "Assignment of tools to specialized agent groups",
    "type": "object",
    "properties": {
        "groups": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "id": {
                        "type": "string",
                        "description": "Unique identifier for the group (kebab-case)",
                    },
                    "name": {
                        "type": "string",
                        "description": "Human-readable name for the group",
                    },
                    "description": {
                        "type": "string",
                        "description": "What this agent group does, when to use it and "
                        "why these tools work well together",
                    },
                    "toolKeys": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": 'Tool keys in format "serverName:toolName"',
                    },
                    "systemPrompt": {
                        "type": "string",
                        "description": "System prompt for the agent that will use this "
                        "tool group. Should instruct the agent to use its tools to gather "
                        "information and always finish with a text answer summarizing "
                        "its findings",
                    },
                    "complementarityScore": {
                        "type": "number",
                        "description": "Score from 0.0 to 1.0 indicating how well the "
                        "tools complement each other",
                    },
                },
                "required": [
                    "id",
                    "name",
                    "description",
                    "toolKeys",
                    "systemPrompt",
                    "complementarityScore",
                ],
            },
        }
    },
    "required": ["groups"],
}

# Fields whose absence is a malformed record. systemPrompt is checked
# separately, after tool keys, so the LLM gets the more specific message.
REQUIRED_FIELDS = ("id", "name", "description", "toolKeys")


class GroupRecord(CamelModel):
    """One group as the LLM returned it, before tool resolution."""

    id: str
    name: str
    description: str
    tool_keys: List[str]
    system_prompt: str | None = None
    complementarity_score: float | None = None


class GroupingResponse(CamelModel):
    """The decoded final-assignment reply."""

    groups: List[GroupRecord] = Field(default_factory=list)


def sanitize_id(value: str) -> str:
    """Normalize an id to a lowercase kebab-case token."""
    value = re.sub(r"[^a-z0-9-]", "-", value.lower())
    value = re.sub(r"-+", "-", value)
    return value.strip("-")


def _strip_code_fence(content: str) -> str:
    content = content.strip()
    if content.startswith("```"):
        parts = content.split("```")
        if len(parts) >= 2:
            content = parts[1]
            if content.startswith("json"):
                content = content[4:]
            content = content.strip()
    return content


def decode_grouping_response(reply: str) -> GroupingResponse:
    """Decode the raw reply into typed records.

    Raises:
        GroupingResponseError: If the reply is not JSON, has no groups
            array, or a record lacks a required field.
    """
    try:
        data = json.loads(_strip_code_fence(reply))
    except json.JSONDecodeError as e:
        raise GroupingResponseError(
            f"Response is not valid JSON ({e.msg} at line {e.lineno} column {e.colno}). "
            "Return only the JSON object, with no text before or after it."
        ) from e

    if not isinstance(data, dict) or not isinstance(data.get("groups"), list):
        raise GroupingResponseError(
            "Response does not contain a 'groups' array at the top level."
        )

    records: list[GroupRecord] = []
    for index, raw in enumerate(data["groups"]):
        if not isinstance(raw, dict):
            raise GroupingResponseError(f"Group[{index}] is not a JSON object.")

        missing = [f for f in REQUIRED_FIELDS if raw.get(f) in (None, "")]
        if missing:
            raise GroupingResponseError(
                f"Group[{index}] is missing required fields: {', '.join(missing)}."
            )

        try:
            records.append(GroupRecord.model_validate(raw))
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise GroupingResponseError(
                f"Group[{index}] has invalid fields: {problems}."
            ) from e

    return GroupingResponse(groups=records)


def _format_missing(keys: list[str], limit: int = 5) -> str:
    shown = ", ".join(keys[:limit])
    return shown + ("..." if len(keys) > limit else "")


def parse_grouping_response(reply: str, tools: list[Tool]) -> list[ToolGroup]:
    """Turn a final-assignment reply into ToolGroups.

    Args:
        reply: Raw LLM reply.
        tools: The full input tool list; every tool must be covered.

    Returns:
        ToolGroups with sanitized ids and default complementarity scores.

    Raises:
        GroupingResponseError: On the first problem found, in the order
            JSON, groups array, required fields, unknown tool key,
            duplicate key within a group, empty group, missing system
            prompt, coverage.
    """
    response = decode_grouping_response(reply)
    tool_map = {tool.key: tool for tool in tools}
    covered: set[str] = set()
    groups: list[ToolGroup] = []

    for record in response.groups:
        seen: set[str] = set()
        group_tools: list[Tool] = []
        for key in record.tool_keys:
            tool = tool_map.get(key)
            if tool is None:
                raise GroupingResponseError(
                    f'Invalid or misspelled tool key "{key}" in group "{record.name}". '
                    "Tool keys must match the provided list exactly (case-sensitive)."
                )
            if key in seen:
                raise GroupingResponseError(
                    f'Tool "{key}" is listed more than once in group "{record.name}".'
                )
            seen.add(key)
            group_tools.append(tool)

        if not group_tools:
            raise GroupingResponseError(f'Group "{record.name}" has no tools.')

        if not (record.system_prompt or "").strip():
            raise GroupingResponseError(
                f'Group "{record.name}" is missing its systemPrompt.'
            )

        covered.update(seen)
        score = record.complementarity_score
        groups.append(
            ToolGroup(
                id=sanitize_id(record.id),
                name=record.name,
                description=record.description,
                tools=group_tools,
                system_prompt=record.system_prompt,
                complementarity_score=(
                    DEFAULT_COMPLEMENTARITY_SCORE if score is None else score
                ),
            )
        )

    missing = [tool.key for tool in tools if tool.key not in covered]
    if missing:
        raise GroupingResponseError(
            f"Not every tool was assigned. Missing {len(missing)} tools: "
            f"{_format_missing(missing)}. Every tool must appear in at least one group."
        )

    return groups

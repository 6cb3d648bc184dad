"""Usage instructions for the generated MCP server.

The instructions are shown to the calling LLM when it connects, so they
describe which agent to pick for which kind of task.
"""

import logging

from subagent_mcp.core.models import ProjectContext, ToolGroup
from subagent_mcp.grouping.prompts import get_prompt
from subagent_mcp.interfaces.llm import CompletionError, CompletionProvider

logger = logging.getLogger(__name__)

PROMPTS_FILE = "grouping.md"
INSTRUCTIONS_TEMPERATURE = 0.4
MAX_CONTEXT_CHARS = 2000


def summarize_groups(groups: list[ToolGroup]) -> str:
    """One block per group: tool name, description and tool keys."""
    blocks = []
    for group in groups:
        blocks.append(
            f"- agent_{group.id} ({group.name}): {group.description}\n"
            f"  Tools: {', '.join(group.tool_keys)}"
        )
    return "\n".join(blocks)


async def generate_instructions(
    groups: list[ToolGroup],
    completion: CompletionProvider,
    context: ProjectContext | None = None,
) -> str:
    """Ask the completion provider to write server usage instructions.

    Args:
        groups: The validated partition that will be served.
        completion: Provider used for the single completion call.
        context: Optional project context; at most 2000 characters of its
            documentation are included.

    Returns:
        The instructions text, stripped.

    Raises:
        CompletionError: If the provider fails or returns nothing.
    """
    project_section = ""
    if context is not None and context.full_content:
        project_section = (
            f"\n\nPROJECT CONTEXT:\n{context.full_content[:MAX_CONTEXT_CHARS]}"
        )

    prompt = get_prompt(
        PROMPTS_FILE,
        "instructions_user",
        groups_summary=summarize_groups(groups),
        project_section=project_section,
    )
    messages = [
        {"role": "system", "content": get_prompt(PROMPTS_FILE, "instructions_system")},
        {"role": "user", "content": prompt},
    ]

    logger.info(f"Generating server instructions for {len(groups)} groups")
    reply = await completion.complete(
        prompt, messages=messages, temperature=INSTRUCTIONS_TEMPERATURE
    )

    instructions = reply.strip()
    if not instructions:
        raise CompletionError("Completion returned empty instructions")
    return instructions


def default_instructions(groups: list[ToolGroup]) -> str:
    """Static instructions used when generation is skipped or fails."""
    return (
        "This MCP server exposes specialized sub-agents. Each agent owns a "
        "focused set of tools; call the agent whose description matches the "
        "task and pass the task as the `prompt` argument.\n\n"
        "Available agents:\n"
        f"{summarize_groups(groups)}"
    )

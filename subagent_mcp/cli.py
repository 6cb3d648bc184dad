"""subagent-mcp CLI.

Builds tool groups from discovered tools and serves them as an MCP server.
stdout belongs to the MCP transport while serving, so logs and errors go
to stderr.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from subagent_mcp.agents.executor import CompletionAgentExecutor
from subagent_mcp.config import Settings, get_settings
from subagent_mcp.core.llm import completion_for
from subagent_mcp.core.models import ProjectContext, Tool, ToolGroup
from subagent_mcp.grouping.exceptions import GroupingError
from subagent_mcp.grouping.grouper import ToolGrouper
from subagent_mcp.grouping.instructions import default_instructions, generate_instructions
from subagent_mcp.interfaces.llm import CompletionError, CompletionProvider
from subagent_mcp.mcp.server import SubAgentMCPServer, agent_tool_name
from subagent_mcp.registry.exceptions import LoaderError, RegistryError
from subagent_mcp.registry.loader import load_groups, save_group_directories, save_groups
from subagent_mcp.registry.registry import SubAgentRegistry

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)

CLI_ERRORS = (GroupingError, CompletionError, LoaderError, RegistryError, ValueError, OSError)


def print_error(text: str) -> None:
    """Print error message."""
    err_console.print(f"[red]Error: {escape(text)}[/red]", soft_wrap=True)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_completion(settings: Settings) -> CompletionProvider:
    """Build the provider used for grouping and server instructions."""
    return completion_for(settings.llm_provider_config())


def read_tools(path: Path) -> list[Tool]:
    """Read discovered tools: a JSON array of records or ``{"tools": [...]}``."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("tools")
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain an array of tool records")
    return [Tool.model_validate(record) for record in data]


def merge_docs(paths: Tuple[Path, ...]) -> Optional[str]:
    """Concatenate documentation files, each under its file name."""
    if not paths:
        return None
    return "\n\n".join(
        f"# {path.name}\n\n{path.read_text(encoding='utf-8')}" for path in paths
    )


async def run_build(
    grouper: ToolGrouper,
    tools: list[Tool],
    context: ProjectContext,
    with_instructions: bool = True,
) -> Tuple[list[ToolGroup], Optional[str]]:
    """Group the tools, then generate server instructions for the result."""
    groups = await grouper.group_tools(tools, context)
    if not with_instructions:
        return groups, None

    try:
        instructions = await generate_instructions(groups, grouper.completion, context)
    except CompletionError as e:
        logger.warning(f"Falling back to default instructions: {e}")
        instructions = default_instructions(groups)
    return groups, instructions


def print_groups(groups: list[ToolGroup]) -> None:
    table = Table(title="Tool Groups")
    table.add_column("Agent", style="cyan")
    table.add_column("Name", style="white")
    table.add_column("Tools", style="green", justify="right")
    table.add_column("Score", style="magenta", justify="right")

    for group in groups:
        score = group.complementarity_score
        table.add_row(
            agent_tool_name(group.id),
            group.name,
            str(len(group.tools)),
            "-" if score is None else f"{score:.2f}",
        )

    console.print(table)


@click.group()
@click.option("--log-level", default=None, help="Override SUBAGENT_MCP_LOG_LEVEL")
def cli(log_level: Optional[str]):
    """Group MCP tools into sub-agents and serve them over MCP."""
    configure_logging(log_level or get_settings().log_level)


@cli.command()
@click.option(
    "--tools",
    "tools_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON file of discovered tools",
)
@click.option(
    "--output",
    type=click.Path(path_type=Path),
    default=None,
    help="Where to write the groups (defaults to SUBAGENT_MCP_GROUPS_PATH)",
)
@click.option(
    "--layout",
    type=click.Choice(["json", "directory"]),
    default="json",
    show_default=True,
    help="Single JSON file or one directory per group",
)
@click.option("--domain", default=None, help="Project domain, e.g. 'web backend'")
@click.option("--hint", "hints", multiple=True, help="Grouping hint (repeatable)")
@click.option(
    "--doc",
    "docs",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Project documentation file (repeatable)",
)
@click.option("--no-instructions", is_flag=True, help="Skip generating server instructions")
def build(
    tools_path: Path,
    output: Optional[Path],
    layout: str,
    domain: Optional[str],
    hints: Tuple[str, ...],
    docs: Tuple[Path, ...],
    no_instructions: bool,
):
    """Group discovered tools into sub-agents and save them."""
    settings = get_settings()
    output = output or Path(settings.groups_path)

    try:
        tools = read_tools(tools_path)
        context = ProjectContext(
            domain=domain, custom_hints=list(hints), full_content=merge_docs(docs)
        )
        completion = create_completion(settings)
        grouper = ToolGrouper(
            completion,
            settings.grouping_constraints(),
            enforce_numeric_constraints=settings.enforce_numeric_constraints,
            max_attempts=settings.max_attempts,
            max_repair_attempts=settings.max_repair_attempts,
            completion_timeout=settings.completion_timeout_seconds,
        )

        console.print(f"Grouping {len(tools)} tools with {settings.llm_provider}...")
        groups, instructions = asyncio.run(
            run_build(grouper, tools, context, with_instructions=not no_instructions)
        )

        if layout == "directory":
            save_group_directories(groups, output, instructions)
        else:
            save_groups(groups, output, instructions)
    except CLI_ERRORS as e:
        print_error(str(e))
        sys.exit(1)

    print_groups(groups)
    console.print(
        f"[green]Saved {len(groups)} groups to {escape(str(output))}[/green]", soft_wrap=True
    )


@cli.command()
@click.option(
    "--groups",
    "groups_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Groups file or directory (defaults to SUBAGENT_MCP_GROUPS_PATH)",
)
def serve(groups_path: Optional[Path]):
    """Serve the sub-agents over MCP stdio."""
    settings = get_settings()

    try:
        document = load_groups(groups_path or settings.groups_path)
        registry = SubAgentRegistry.from_groups(
            document.groups, settings.llm_provider_config()
        )
        server = SubAgentMCPServer(
            registry,
            CompletionAgentExecutor(completion_for),
            schema_variant=settings.tool_call_schema,
            instructions=document.instructions,
            name=settings.server_name,
        )
    except CLI_ERRORS as e:
        print_error(str(e))
        sys.exit(1)

    asyncio.run(server.run_stdio())


@cli.command(name="list-agents")
@click.option(
    "--groups",
    "groups_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Groups file or directory (defaults to SUBAGENT_MCP_GROUPS_PATH)",
)
def list_agents(groups_path: Optional[Path]):
    """List the agent tools a server would expose."""
    settings = get_settings()

    try:
        document = load_groups(groups_path or settings.groups_path)
        registry = SubAgentRegistry.from_groups(document.groups)
    except CLI_ERRORS as e:
        print_error(str(e))
        sys.exit(1)

    for agent in registry:
        console.print(
            f"{agent_tool_name(agent.id)}  {escape(agent.name)} "
            f"({len(agent.tool_group.tools)} tools)",
            soft_wrap=True,
        )


if __name__ == "__main__":
    cli()

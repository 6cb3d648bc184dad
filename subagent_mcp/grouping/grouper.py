"""LLM-driven tool grouping.

Grouping runs as a three-phase conversation with the completion provider:

1. **Analysis**: describe the project and every tool, keep the free-text reply.
2. **Strategy**: ask for a grouping strategy within the numeric bounds.
3. **Final assignment**: ask for strict JSON and decode it.

Phase 3 has its own repair loop: a reply that cannot be decoded is sent
back with the error message in the same conversation. A decoded partition
that fails the validator restarts the whole conversation from Phase 1.
"""

import asyncio
import logging
import math
from typing import Any

from subagent_mcp.core.models import (
    DEFAULT_GROUPING_CONSTRAINTS,
    Conversation,
    GroupingConstraints,
    ProjectContext,
    Tool,
    ToolGroup,
)
from subagent_mcp.grouping.exceptions import (
    ConstraintViolationError,
    EmptyToolListError,
    GroupingExhaustedError,
    GroupingResponseError,
    InvalidConstraintsError,
)
from subagent_mcp.grouping.prompts import get_prompt
from subagent_mcp.grouping.schema import GROUPING_RESPONSE_SCHEMA, parse_grouping_response
from subagent_mcp.grouping.validation import validate_constraints, validate_groups
from subagent_mcp.interfaces.llm import CompletionError, CompletionProvider

logger = logging.getLogger(__name__)

PROMPTS_FILE = "grouping.md"

ANALYSIS_TEMPERATURE = 0.5
STRATEGY_TEMPERATURE = 0.4
ASSIGNMENT_TEMPERATURE = 0.3

MAX_CONTEXT_CHARS = 4000
TRUNCATION_MARKER = "\n\n[... documentation truncated ...]"
MAX_DISTRIBUTION_EXAMPLES = 6


def effective_group_range(
    tool_count: int, constraints: GroupingConstraints
) -> tuple[int, int]:
    """Narrow the group-count bounds to what the tool count allows.

    At least ceil(n / max_tools) groups are needed to hold every tool, and
    more than floor(n / min_tools) groups cannot all be filled without
    sharing. The upper bound never drops below the lower one.
    """
    c = constraints
    low = max(c.min_groups, math.ceil(tool_count / c.max_tools_per_group))
    high = min(c.max_groups, tool_count // c.min_tools_per_group)
    return low, max(low, high)


def example_distributions(
    tool_count: int, constraints: GroupingConstraints
) -> list[str]:
    """Even splits of the tools for each group count in the effective range."""
    low, high = effective_group_range(tool_count, constraints)
    examples: list[str] = []

    for num_groups in range(low, high + 1):
        base, extra = divmod(tool_count, num_groups)
        sizes = [base + (1 if i < extra else 0) for i in range(num_groups)]
        examples.append(
            f"- {num_groups} groups = [{' + '.join(str(s) for s in sizes)}] tools"
        )
        if len(examples) >= MAX_DISTRIBUTION_EXAMPLES:
            break

    return examples


def format_tool_list(tools: list[Tool]) -> str:
    return "\n".join(
        f'{i}. "{tool.key}": {tool.description}' for i, tool in enumerate(tools, 1)
    )


def format_project_sections(context: ProjectContext | None) -> str:
    """Render the optional project context for the analysis prompt."""
    if context is None:
        return ""

    sections = ""
    if context.domain:
        sections += f"\n\nPROJECT DOMAIN: {context.domain}"
    if context.custom_hints:
        hints = "\n".join(f"- {hint}" for hint in context.custom_hints)
        sections += f"\n\nGROUPING HINTS:\n{hints}"
    if context.full_content:
        content = context.full_content
        if len(content) > MAX_CONTEXT_CHARS:
            content = content[:MAX_CONTEXT_CHARS] + TRUNCATION_MARKER
        sections += f"\n\nPROJECT DOCUMENTATION:\n{content}"
    return sections


class ToolGrouper:
    """Negotiates a valid tool partition with a completion provider.

    Example usage:
        ```python
        grouper = ToolGrouper(completion, GroupingConstraints(...))
        groups = await grouper.group_tools(tools, ProjectContext(domain="web"))
        ```
    """

    def __init__(
        self,
        completion: CompletionProvider,
        constraints: GroupingConstraints = DEFAULT_GROUPING_CONSTRAINTS,
        *,
        enforce_numeric_constraints: bool = True,
        max_attempts: int = 3,
        max_repair_attempts: int = 3,
        completion_timeout: float | None = None,
    ):
        """Initialize the grouper.

        Args:
            completion: Provider used for every phase.
            constraints: Numeric grouping policy.
            enforce_numeric_constraints: When False the group-count and
                group-size bounds are only stated in the prompts.
            max_attempts: Full three-phase attempts before giving up.
            max_repair_attempts: Final-assignment replies per attempt.
            completion_timeout: Seconds allowed per completion call.
        """
        if max_attempts < 1 or max_repair_attempts < 1:
            raise ValueError("max_attempts and max_repair_attempts must be at least 1")

        self.completion = completion
        self.constraints = constraints
        self.enforce_numeric_constraints = enforce_numeric_constraints
        self.max_attempts = max_attempts
        self.max_repair_attempts = max_repair_attempts
        self.completion_timeout = completion_timeout

    async def group_tools(
        self, tools: list[Tool], context: ProjectContext | None = None
    ) -> list[ToolGroup]:
        """Group tools into validated ToolGroups.

        Args:
            tools: Every discovered tool. Each one ends up in at least one group.
            context: Optional project information for the analysis phase.

        Returns:
            The first partition that passes validation.

        Raises:
            EmptyToolListError: If ``tools`` is empty.
            InvalidConstraintsError: If the constraint object is malformed.
            GroupingExhaustedError: If every attempt failed.
        """
        if not tools:
            raise EmptyToolListError()

        constraint_errors = validate_constraints(self.constraints)
        if constraint_errors:
            raise InvalidConstraintsError(constraint_errors)

        last_error: Exception | None = None

        for attempt in range(1, self.max_attempts + 1):
            logger.info(
                f"Grouping {len(tools)} tools (attempt {attempt}/{self.max_attempts})"
            )
            try:
                groups = await self._run_attempt(tools, context, attempt)
            except (GroupingResponseError, ConstraintViolationError, CompletionError) as e:
                last_error = e
                logger.warning(f"Grouping attempt {attempt} failed: {e}")
                continue

            logger.info(f"Grouping succeeded with {len(groups)} groups on attempt {attempt}")
            return groups

        raise GroupingExhaustedError(self.max_attempts, last_error)

    async def _run_attempt(
        self, tools: list[Tool], context: ProjectContext | None, attempt: int
    ) -> list[ToolGroup]:
        c = self.constraints
        min_groups, max_groups = effective_group_range(len(tools), c)
        bounds: dict[str, Any] = {
            "tool_count": len(tools),
            "min_groups": min_groups,
            "max_groups": max_groups,
            "min_tools": c.min_tools_per_group,
            "max_tools": c.max_tools_per_group,
        }
        tool_list = format_tool_list(tools)

        logger.info("Phase 1: analyzing project and tools")
        conversation = (
            Conversation()
            .append("system", get_prompt(PROMPTS_FILE, "analysis_system"))
            .append(
                "user",
                get_prompt(
                    PROMPTS_FILE,
                    "analysis_user",
                    tool_count=len(tools),
                    tool_list=tool_list,
                    project_sections=format_project_sections(context),
                ),
            )
        )
        analysis = await self._complete(conversation, ANALYSIS_TEMPERATURE)

        logger.info("Phase 2: developing grouping strategy")
        conversation = conversation.append("assistant", analysis).append(
            "user", get_prompt(PROMPTS_FILE, "strategy_user", **bounds)
        )
        strategy = await self._complete(conversation, STRATEGY_TEMPERATURE)

        logger.info("Phase 3: assigning tools to groups")
        final_request = get_prompt(
            PROMPTS_FILE,
            "final_user",
            tool_list=tool_list,
            distributions="\n".join(example_distributions(len(tools), c)),
            **bounds,
        )
        if attempt > 1:
            final_request += "\n\n" + get_prompt(
                PROMPTS_FILE, "retry_notice", attempt=attempt, **bounds
            )
        conversation = (
            conversation.append("assistant", strategy)
            .with_system(get_prompt(PROMPTS_FILE, "final_system", **bounds))
            .append("user", final_request)
        )
        groups = await self._assign(conversation, tools, bounds)

        result = validate_groups(groups, c, self.enforce_numeric_constraints)
        if not result.valid:
            raise ConstraintViolationError(result.errors)

        return groups

    async def _assign(
        self,
        conversation: Conversation,
        tools: list[Tool],
        bounds: dict[str, Any],
    ) -> list[ToolGroup]:
        """Final-assignment phase with in-conversation repair."""
        last_error: Exception | None = None

        for repair in range(1, self.max_repair_attempts + 1):
            try:
                reply = await self._complete(
                    conversation,
                    ASSIGNMENT_TEMPERATURE,
                    response_schema=GROUPING_RESPONSE_SCHEMA,
                )
            except CompletionError as e:
                last_error = e
                logger.warning(
                    f"Assignment call {repair}/{self.max_repair_attempts} failed: {e}"
                )
                continue

            try:
                return parse_grouping_response(reply, tools)
            except GroupingResponseError as e:
                last_error = e
                logger.warning(
                    f"Assignment reply {repair}/{self.max_repair_attempts} rejected: {e}"
                )
                conversation = conversation.append("assistant", reply).append(
                    "user",
                    get_prompt(PROMPTS_FILE, "repair_user", error=str(e), **bounds),
                )

        assert last_error is not None
        raise last_error

    async def _complete(
        self,
        conversation: Conversation,
        temperature: float,
        response_schema: dict[str, Any] | None = None,
    ) -> str:
        messages = conversation.to_llm_messages()
        call = self.completion.complete(
            messages[-1]["content"],
            messages=messages,
            temperature=temperature,
            response_schema=response_schema,
        )
        if self.completion_timeout is None:
            return await call

        try:
            return await asyncio.wait_for(call, timeout=self.completion_timeout)
        except TimeoutError as e:
            raise CompletionError(
                f"Completion timed out after {self.completion_timeout} seconds"
            ) from e


async def group_tools(
    tools: list[Tool],
    completion: CompletionProvider,
    constraints: GroupingConstraints = DEFAULT_GROUPING_CONSTRAINTS,
    context: ProjectContext | None = None,
    *,
    enforce_numeric_constraints: bool = True,
    max_attempts: int = 3,
    max_repair_attempts: int = 3,
    completion_timeout: float | None = None,
) -> list[ToolGroup]:
    """Convenience wrapper around ToolGrouper.group_tools."""
    grouper = ToolGrouper(
        completion,
        constraints,
        enforce_numeric_constraints=enforce_numeric_constraints,
        max_attempts=max_attempts,
        max_repair_attempts=max_repair_attempts,
        completion_timeout=completion_timeout,
    )
    return await grouper.group_tools(tools, context)

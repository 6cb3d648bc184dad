"""Constraint validation for proposed tool partitions.

Pure functions: no logging, no mutation. Errors are plain strings because
they are read by an operator or fed back to the LLM, never branched on.
"""

from collections import Counter
from typing import Iterable, List

from pydantic import BaseModel, Field

from subagent_mcp.core.models.tool import GroupingConstraints, ToolGroup


class ValidationResult(BaseModel):
    """Outcome of validate_groups."""

    valid: bool = Field(..., description="True when no errors were found")
    errors: List[str] = Field(default_factory=list, description="Error messages")


def validate_constraints(constraints: GroupingConstraints) -> list[str]:
    """Check that a constraint object describes a usable policy.

    Args:
        constraints: The policy to check.

    Returns:
        List of error messages, empty if the policy is well-formed.
    """
    errors: list[str] = []
    c = constraints

    if c.min_tools_per_group < 1:
        errors.append(
            f"Constraints.minToolsPerGroup must be at least 1 (got {c.min_tools_per_group})"
        )
    if c.max_tools_per_group < c.min_tools_per_group:
        errors.append(
            f"Constraints.maxToolsPerGroup ({c.max_tools_per_group}) must be >= "
            f"minToolsPerGroup ({c.min_tools_per_group})"
        )
    if c.min_groups < 1:
        errors.append(f"Constraints.minGroups must be at least 1 (got {c.min_groups})")
    if c.max_groups < c.min_groups:
        errors.append(
            f"Constraints.maxGroups ({c.max_groups}) must be >= minGroups ({c.min_groups})"
        )

    return errors


def _group_errors(index: int, group: ToolGroup) -> list[str]:
    errors: list[str] = []
    label = f"Group[{index}]"

    for field in ("id", "name", "description"):
        if not getattr(group, field).strip():
            errors.append(f"{label}.{field}: must not be empty")

    if not group.tools:
        errors.append(f"{label}.tools: must contain at least 1 tool")

    score = group.complementarity_score
    if score is not None and not 0 <= score <= 1:
        errors.append(
            f"{label}.complementarityScore: must be between 0 and 1 (got {score})"
        )

    return errors


def _duplicates(values: Iterable[str]) -> list[str]:
    return [value for value, count in Counter(values).items() if count > 1]


def validate_groups(
    groups: list[ToolGroup],
    constraints: GroupingConstraints,
    enforce_numeric_constraints: bool = True,
) -> ValidationResult:
    """Validate tool groups against grouping constraints.

    Checks run in this order and accumulate: per-group shape, id/name
    uniqueness, the constraint object itself, then (optionally) the numeric
    bounds. A malformed constraint object stops before the numeric bounds.

    Args:
        groups: Proposed partition.
        constraints: Numeric policy.
        enforce_numeric_constraints: When False, group-count and
            tools-per-group bounds are advisory and not checked.

    Returns:
        ValidationResult with every problem found.
    """
    errors: list[str] = []

    for index, group in enumerate(groups):
        errors.extend(_group_errors(index, group))

    duplicate_ids = _duplicates(g.id for g in groups)
    if duplicate_ids:
        errors.append(f"Group IDs are not unique: {', '.join(duplicate_ids)}")

    duplicate_names = _duplicates(g.name for g in groups)
    if duplicate_names:
        errors.append(f"Group names are not unique: {', '.join(duplicate_names)}")

    constraint_errors = validate_constraints(constraints)
    if constraint_errors:
        errors.extend(constraint_errors)
        return ValidationResult(valid=False, errors=errors)

    if enforce_numeric_constraints:
        if len(groups) < constraints.min_groups:
            errors.append(
                f"Too few groups: {len(groups)} (minimum constraint: {constraints.min_groups})"
            )
        if len(groups) > constraints.max_groups:
            errors.append(
                f"Too many groups: {len(groups)} (maximum constraint: {constraints.max_groups})"
            )

        for group in groups:
            count = len(group.tools)
            if count < constraints.min_tools_per_group:
                errors.append(
                    f'Group "{group.name}" has too few tools: {count} '
                    f"(minimum constraint: {constraints.min_tools_per_group})"
                )
            if count > constraints.max_tools_per_group:
                errors.append(
                    f'Group "{group.name}" has too many tools: {count} '
                    f"(maximum constraint: {constraints.max_tools_per_group})"
                )

    return ValidationResult(valid=not errors, errors=errors)

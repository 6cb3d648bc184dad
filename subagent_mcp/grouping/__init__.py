"""Tool grouping: constraint validation and the LLM grouping conversation."""

from subagent_mcp.grouping.exceptions import (
    ConstraintViolationError,
    EmptyToolListError,
    GroupingError,
    GroupingExhaustedError,
    GroupingInputError,
    GroupingResponseError,
    InvalidConstraintsError,
)
from subagent_mcp.grouping.grouper import ToolGrouper, effective_group_range, group_tools
from subagent_mcp.grouping.instructions import default_instructions, generate_instructions
from subagent_mcp.grouping.schema import GROUPING_RESPONSE_SCHEMA, parse_grouping_response
from subagent_mcp.grouping.validation import (
    ValidationResult,
    validate_constraints,
    validate_groups,
)

__all__ = [
    "ConstraintViolationError",
    "EmptyToolListError",
    "GROUPING_RESPONSE_SCHEMA",
    "GroupingError",
    "GroupingExhaustedError",
    "GroupingInputError",
    "GroupingResponseError",
    "InvalidConstraintsError",
    "ToolGrouper",
    "ValidationResult",
    "default_instructions",
    "effective_group_range",
    "generate_instructions",
    "group_tools",
    "parse_grouping_response",
    "validate_constraints",
    "validate_groups",
]

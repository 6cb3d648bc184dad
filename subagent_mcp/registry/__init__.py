"""Sub-agent registry, routing and the persisted group format."""

from subagent_mcp.registry.exceptions import (
    GroupsFormatError,
    GroupsNotFoundError,
    LoaderError,
    RegistryError,
)
from subagent_mcp.registry.loader import (
    GroupsDocument,
    load_groups,
    save_group_directories,
    save_groups,
)
from subagent_mcp.registry.registry import SubAgentRegistry
from subagent_mcp.registry.router import (
    create_error_response,
    create_success_response,
    find_agent_by_id,
    route,
    validate_request,
)

__all__ = [
    "GroupsDocument",
    "GroupsFormatError",
    "GroupsNotFoundError",
    "LoaderError",
    "RegistryError",
    "SubAgentRegistry",
    "create_error_response",
    "create_success_response",
    "find_agent_by_id",
    "load_groups",
    "route",
    "save_group_directories",
    "save_groups",
    "validate_request",
]

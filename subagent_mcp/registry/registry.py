"""Read-only mapping of sub-agents, built once at server start."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List

from subagent_mcp.core.models import LLMProviderConfig, SubAgent, ToolGroup
from subagent_mcp.registry.exceptions import RegistryError

logger = logging.getLogger(__name__)


class SubAgentRegistry:
    """Sub-agents keyed by id, in insertion order.

    Nothing mutates the registry after construction, so concurrent requests
    can read it without locking.
    """

    def __init__(self, agents: Iterable[SubAgent]) -> None:
        by_id: Dict[str, SubAgent] = {}
        for agent in agents:
            if agent.id in by_id:
                raise RegistryError(f"Duplicate sub-agent id: {agent.id}")
            by_id[agent.id] = agent
            logger.debug(
                f"Registered sub-agent: id={agent.id}, tools={len(agent.tool_group.tools)}"
            )

        if not by_id:
            raise RegistryError("Cannot build a registry without any groups")

        self._by_id = by_id
        logger.info(f"Sub-agent registry ready with {len(by_id)} agents")

    @classmethod
    def from_groups(
        cls, groups: Iterable[ToolGroup], llm_config: LLMProviderConfig | None = None
    ) -> SubAgentRegistry:
        """Create one sub-agent per group, all sharing ``llm_config``."""
        return cls(SubAgent.from_group(group, llm_config) for group in groups)

    def get(self, agent_id: str) -> SubAgent | None:
        return self._by_id.get(agent_id)

    def list_agents(self) -> List[SubAgent]:
        return list(self._by_id.values())

    def ids(self) -> List[str]:
        return list(self._by_id.keys())

    def __contains__(self, agent_id: object) -> bool:
        return agent_id in self._by_id

    def __iter__(self) -> Iterator[SubAgent]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)

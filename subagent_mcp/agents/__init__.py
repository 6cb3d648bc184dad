"""Sub-agent execution."""

from subagent_mcp.agents.executor import AgentExecutor, CompletionAgentExecutor

__all__ = ["AgentExecutor", "CompletionAgentExecutor"]

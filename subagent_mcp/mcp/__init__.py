"""MCP surface of the sub-agent server."""

from subagent_mcp.mcp.server import SubAgentMCPServer, ToolCallSchema, agent_tool_name

__all__ = ["SubAgentMCPServer", "ToolCallSchema", "agent_tool_name"]

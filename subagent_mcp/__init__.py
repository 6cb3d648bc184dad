"""subagent-mcp: group MCP tools into LLM sub-agents and serve them over MCP."""

__version__ = "0.1.0"

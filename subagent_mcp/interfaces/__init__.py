"""Protocols for external collaborators."""

from subagent_mcp.interfaces.llm import CompletionError, CompletionProvider

__all__ = ["CompletionError", "CompletionProvider"]

"""Core layer: data models and LLM plumbing.

Nothing in core knows about grouping, registries or the MCP surface.
"""

from subagent_mcp.core.llm.utils import (
    DEFAULT_MODELS,
    DEFAULT_PROVIDER,
    LangChainCompletionProvider,
    api_key,
    completion_for,
    get_langchain_llm,
)

__all__ = [
    "DEFAULT_MODELS",
    "DEFAULT_PROVIDER",
    "LangChainCompletionProvider",
    "api_key",
    "completion_for",
    "get_langchain_llm",
]

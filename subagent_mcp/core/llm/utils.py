import json
import logging
import os
from typing import Any

from dotenv import find_dotenv, load_dotenv

from subagent_mcp.core.models import LLMProviderConfig
from subagent_mcp.interfaces.llm import CompletionError

load_dotenv(find_dotenv())

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = "anthropic"
DEFAULT_MODELS = {
    "anthropic": "claude-sonnet-4-20250514",
    "openai": "gpt-4.1",
    "google_genai": "gemini-2.0-flash",
}


def api_key(key: str) -> str:
    """Return a provider API key from the environment."""
    value = os.getenv(key)
    if not value:
        raise ValueError(f"{key} must be set to use this provider")
    return value


def get_langchain_llm(
    temperature: float = 0,
    provider: str | None = None,
    model: str | None = None,
    base_url: str | None = None,
) -> Any:
    """Create the chat model that grouping and sub-agents complete against.

    ``provider`` and ``model`` fall back to LLM_PROVIDER and LLM_MODEL, then
    to DEFAULT_PROVIDER and its entry in DEFAULT_MODELS. ``base_url`` points
    an anthropic or openai model at a compatible endpoint; without it the
    ANTHROPIC_BASE_URL or OPENAI_BASE_URL variable is used when set.

    Raises:
        ValueError: For an unknown provider or a missing API key.
    """
    from langchain.chat_models import init_chat_model

    provider = (provider or os.getenv("LLM_PROVIDER") or DEFAULT_PROVIDER).lower()
    if provider not in DEFAULT_MODELS:
        raise ValueError(
            f"Invalid provider '{provider}', expected one of {sorted(DEFAULT_MODELS)}"
        )
    model = model or os.getenv("LLM_MODEL") or DEFAULT_MODELS[provider]

    options: dict[str, Any] = {"temperature": temperature}
    if provider == "anthropic":
        options["anthropic_api_key"] = api_key("ANTHROPIC_API_KEY")
        endpoint = base_url or os.getenv("ANTHROPIC_BASE_URL")
        if endpoint:
            options["base_url"] = endpoint
    elif provider == "openai":
        options["openai_api_key"] = api_key("OPENAI_API_KEY")
        endpoint = base_url or os.getenv("OPENAI_BASE_URL")
        if endpoint:
            options["openai_api_base"] = endpoint
    else:
        options["google_api_key"] = api_key("GOOGLE_API_KEY")

    llm = init_chat_model(model=model, model_provider=provider, **options)  # type: ignore[call-overload]
    logger.info(f"Using {provider} model {model} ({type(llm).__name__})")
    return llm


def _content_to_text(content: Any) -> str:
    """Flatten a chat model's content (str or list of blocks) into text."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text", ""))
        return "".join(parts)
    return str(content)


class LangChainCompletionProvider:
    """CompletionProvider backed by any LangChain chat model."""

    def __init__(self, llm: Any):
        """
        Args:
            llm: LangChain chat model (see get_langchain_llm). A per-call
                temperature runs on a copy of it with that temperature set.
        """
        self.llm = llm

    async def complete(
        self,
        prompt: str,
        *,
        messages: list[dict[str, str]] | None = None,
        temperature: float | None = None,
        response_schema: dict[str, Any] | None = None,
    ) -> str:
        """Run one completion; see CompletionProvider.complete."""
        llm_messages = messages or [{"role": "user", "content": prompt}]

        llm = self.llm
        if temperature is not None:
            llm = llm.model_copy(update={"temperature": temperature})

        try:
            if response_schema is not None:
                structured = llm.with_structured_output(response_schema)
                result = await structured.ainvoke(llm_messages)
                return json.dumps(result)

            response = await llm.ainvoke(llm_messages)
        except Exception as e:
            raise CompletionError(
                f"{type(self.llm).__name__} completion failed: {e}"
            ) from e

        content = response.content if hasattr(response, "content") else response
        return _content_to_text(content)


def completion_for(config: LLMProviderConfig) -> LangChainCompletionProvider:
    """Build the completion provider a sub-agent's LLM config asks for."""
    llm = get_langchain_llm(
        provider=config.type, model=config.model, base_url=config.endpoint_override
    )
    return LangChainCompletionProvider(llm)

"""Completion provider interface consumed by the grouping orchestrator.

The orchestrator only relies on this single-method contract; it never
inspects which vendor sits behind it.
"""

from typing import Any, Protocol


class CompletionError(Exception):
    """Raised by a provider when a completion call fails.

    Rate limits, transport failures and unparseable structured output all
    surface as this error so callers can treat them uniformly.
    """

    pass


class CompletionProvider(Protocol):
    """Text completion interface.

    Example usage:
        ```python
        reply = await completion.complete(
            "Summarize these tools",
            messages=[
                {"role": "system", "content": "You are a software architect."},
                {"role": "user", "content": "Summarize these tools"},
            ],
            temperature=0.4,
        )
        ```
    """

    async def complete(
        self,
        prompt: str,
        *,
        messages: list[dict[str, str]] | None = None,
        temperature: float | None = None,
        response_schema: dict[str, Any] | None = None,
    ) -> str:
        """Generate a completion.

        Args:
            prompt: The prompt text. Used as a single user message when
                ``messages`` is not given.
            messages: Full conversation as role/content dicts. Roles are
                'system', 'user' or 'assistant'. Takes precedence over
                ``prompt``.
            temperature: Sampling temperature override.
            response_schema: Optional JSON Schema the reply must follow.
                Providers that support structured output enforce it; the
                reply is still returned as JSON text.

        Returns:
            The generated text.

        Raises:
            CompletionError: If the provider call fails.
        """
        ...

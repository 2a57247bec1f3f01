"""Abstract LLM provider protocol."""

from typing import Any, Protocol


class LLMProvider(Protocol):
    """Protocol for LLM backends (OpenAI, Anthropic).

    Implementations raise ``aura.llm.errors.RemoteFailure`` subclasses, never
    SDK-specific exceptions.
    """

    model: str

    def complete(self, prompt: str, system: str | None = None, **kwargs: Any) -> str:
        """Return raw text completion for a single system + user exchange."""
        ...

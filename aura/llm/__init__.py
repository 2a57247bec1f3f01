"""LLM adapter layer: OpenAI and Anthropic behind a common protocol."""

from aura.llm.anthropic_provider import AnthropicProvider
from aura.llm.base import LLMProvider
from aura.llm.errors import ConfigurationMissing, RemoteFailure, RemoteRejected, RemoteUnavailable
from aura.llm.openai_provider import OpenAIProvider


def get_provider(provider_name: str, **kwargs: object) -> LLMProvider:
    """Return the configured LLM provider. provider_name: 'openai' | 'anthropic'."""
    if provider_name.lower() == "anthropic":
        kwargs.pop("base_url", None)
        return AnthropicProvider(**kwargs)
    return OpenAIProvider(**kwargs)


__all__ = [
    "AnthropicProvider",
    "ConfigurationMissing",
    "LLMProvider",
    "OpenAIProvider",
    "RemoteFailure",
    "RemoteRejected",
    "RemoteUnavailable",
    "get_provider",
]

"""Anthropic messages API implementation."""

from typing import Any

from anthropic import Anthropic, APIConnectionError, APIError, APIStatusError

from aura.llm.errors import RemoteRejected, RemoteUnavailable, is_transient_status


class AnthropicProvider:
    """Single-turn Anthropic completion with a bounded wait and no SDK retries."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "claude-3-5-sonnet-20241022",
        timeout: float = 30.0,
    ):
        self._client = Anthropic(api_key=api_key, timeout=timeout, max_retries=0)
        self.model = model
        self._timeout = timeout

    def complete(self, prompt: str, system: str | None = None, **kwargs: Any) -> str:
        extra: dict[str, Any] = {}
        if system:
            extra["system"] = system
        try:
            response = self._client.messages.create(
                model=kwargs.get("model") or self.model,
                max_tokens=kwargs.get("max_tokens", 1024),
                messages=[{"role": "user", "content": prompt}],
                timeout=kwargs.get("timeout") or self._timeout,
                **extra,
            )
        except APIConnectionError as e:
            raise RemoteUnavailable(f"Anthropic connection failed: {e}") from e
        except APIStatusError as e:
            if is_transient_status(e.status_code):
                raise RemoteUnavailable(f"Anthropic returned HTTP {e.status_code}") from e
            raise RemoteRejected(f"Anthropic rejected the request: {e}", status_code=e.status_code) from e
        except APIError as e:
            raise RemoteRejected(f"Anthropic API error: {e}") from e
        texts = [block.text for block in response.content if getattr(block, "type", "") == "text"]
        return "".join(texts)

"""OpenAI chat completion (also used for OpenAI-compatible endpoints)."""

from typing import Any

from openai import APIConnectionError, APIError, APIStatusError, OpenAI

from aura.llm.errors import RemoteRejected, RemoteUnavailable, is_transient_status


class OpenAIProvider:
    """Single-turn OpenAI chat completion with a bounded wait and no SDK retries."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-4o-mini",
        base_url: str | None = None,
        timeout: float = 30.0,
    ):
        self._client = OpenAI(api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0)
        self.model = model
        self._timeout = timeout

    def complete(self, prompt: str, system: str | None = None, **kwargs: Any) -> str:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        try:
            response = self._client.chat.completions.create(
                model=kwargs.pop("model", None) or self.model,
                messages=messages,
                timeout=kwargs.pop("timeout", None) or self._timeout,
                **kwargs,
            )
        # APITimeoutError is a subclass of APIConnectionError
        except APIConnectionError as e:
            raise RemoteUnavailable(f"OpenAI connection failed: {e}") from e
        except APIStatusError as e:
            if is_transient_status(e.status_code):
                raise RemoteUnavailable(f"OpenAI returned HTTP {e.status_code}") from e
            raise RemoteRejected(f"OpenAI rejected the request: {e}", status_code=e.status_code) from e
        except APIError as e:
            raise RemoteRejected(f"OpenAI API error: {e}") from e
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

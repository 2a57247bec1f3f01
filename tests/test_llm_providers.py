"""Provider adapters: request shape and SDK error classification."""

from types import SimpleNamespace

import anthropic
import httpx
import openai
import pytest

from aura.llm import AnthropicProvider, OpenAIProvider, get_provider
from aura.llm.errors import RemoteRejected, RemoteUnavailable, is_transient_status

_REQUEST = httpx.Request("POST", "https://api.example.com/v1/chat")


def _status_error(sdk, code):
    response = httpx.Response(code, request=_REQUEST, json={"error": {"message": "nope"}})
    return sdk.APIStatusError(f"HTTP {code}", response=response, body=None)


class _Recorder:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.kwargs = None

    def __call__(self, **kwargs):
        self.kwargs = kwargs
        if self.error is not None:
            raise self.error
        return self.result


def _openai(recorder):
    provider = OpenAIProvider(api_key="sk-test", model="gpt-test", timeout=4.0)
    provider._client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=recorder)))
    return provider


def _anthropic(recorder):
    provider = AnthropicProvider(api_key="sk-ant-test", model="claude-test", timeout=4.0)
    provider._client = SimpleNamespace(messages=SimpleNamespace(create=recorder))
    return provider


@pytest.mark.parametrize(
    "code, transient",
    [(None, True), (429, True), (500, True), (503, True), (400, False), (401, False), (404, False)],
)
def test_is_transient_status(code, transient):
    """Missing status, 429 and 5xx mean try again later."""
    assert is_transient_status(code) is transient


class TestOpenAI:

    def test_sends_system_and_user_messages(self):
        rec = _Recorder(SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content='{"score": 1}'))]))
        assert _openai(rec).complete("user text", system="be strict") == '{"score": 1}'
        assert rec.kwargs["model"] == "gpt-test"
        assert rec.kwargs["timeout"] == 4.0
        assert rec.kwargs["messages"] == [
            {"role": "system", "content": "be strict"},
            {"role": "user", "content": "user text"},
        ]

    def test_empty_choices_is_empty_reply(self):
        assert _openai(_Recorder(SimpleNamespace(choices=[]))).complete("x") == ""

    @pytest.mark.parametrize(
        "error, expected",
        [
            (openai.APIConnectionError(request=_REQUEST), RemoteUnavailable),
            (openai.APITimeoutError(request=_REQUEST), RemoteUnavailable),
            (_status_error(openai, 429), RemoteUnavailable),
            (_status_error(openai, 502), RemoteUnavailable),
            (_status_error(openai, 401), RemoteRejected),
            (_status_error(openai, 400), RemoteRejected),
        ],
    )
    def test_error_mapping(self, error, expected):
        """Connection errors, throttling and 5xx are unavailable; other 4xx are rejections."""
        with pytest.raises(expected):
            _openai(_Recorder(error=error)).complete("x")

    def test_rejected_keeps_status_code(self):
        with pytest.raises(RemoteRejected) as exc_info:
            _openai(_Recorder(error=_status_error(openai, 403))).complete("x")
        assert exc_info.value.status_code == 403


class TestAnthropic:

    def test_joins_text_blocks(self):
        content = [
            SimpleNamespace(type="text", text='{"score": '),
            SimpleNamespace(type="tool_use", text="ignored"),
            SimpleNamespace(type="text", text="77}"),
        ]
        rec = _Recorder(SimpleNamespace(content=content))
        assert _anthropic(rec).complete("user text", system="be strict") == '{"score": 77}'
        assert rec.kwargs["system"] == "be strict"
        assert rec.kwargs["messages"] == [{"role": "user", "content": "user text"}]

    def test_no_system_key_without_system_prompt(self):
        rec = _Recorder(SimpleNamespace(content=[]))
        _anthropic(rec).complete("x")
        assert "system" not in rec.kwargs

    @pytest.mark.parametrize(
        "error, expected",
        [
            (anthropic.APIConnectionError(request=_REQUEST), RemoteUnavailable),
            (_status_error(anthropic, 529), RemoteUnavailable),
            (_status_error(anthropic, 400), RemoteRejected),
        ],
    )
    def test_error_mapping(self, error, expected):
        with pytest.raises(expected):
            _anthropic(_Recorder(error=error)).complete("x")


def test_get_provider_selects_backend():
    assert isinstance(get_provider("openai", api_key="k", model="m"), OpenAIProvider)
    p = get_provider("Anthropic", api_key="k", model="m", base_url="https://ignored")
    assert isinstance(p, AnthropicProvider)
    assert p.model == "m"

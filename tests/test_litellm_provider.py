"""Tests for the LiteLLM-backed provider with the network call patched out."""

import asyncio
from types import SimpleNamespace

import pytest

from visionpress.core.errors import ProviderError
from visionpress.providers import litellm_provider
from visionpress.providers.litellm_provider import LiteLLMTextProvider


def completion_response(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def calls(monkeypatch):
    recorded = []

    async def fake_acompletion(**kwargs):
        recorded.append(kwargs)
        return completion_response('{"textBlocks": []}')

    monkeypatch.setattr(litellm_provider.litellm, "acompletion", fake_acompletion)
    return recorded


def test_request_uses_provider_prefix(calls):
    provider = LiteLLMTextProvider("anthropic", {"api_key": "ak", "model": "claude-test", "max_tokens": 300})
    text = asyncio.run(provider.complete("Write a page"))
    assert text == '{"textBlocks": []}'
    request = calls[0]
    assert request["model"] == "anthropic/claude-test"
    assert request["max_tokens"] == 300
    assert request["api_key"] == "ak"
    assert request["messages"] == [{"role": "user", "content": "Write a page"}]


def test_openai_models_have_no_prefix():
    provider = LiteLLMTextProvider("openai", {"model": "gpt-test"})
    request = provider.prepare_request("hi", None, 50)
    assert request["model"] == "gpt-test"
    assert request["max_tokens"] == 50
    assert "api_key" not in request


def test_api_failure_is_retryable(monkeypatch):
    async def boom(**kwargs):
        raise ConnectionError("reset by peer")

    monkeypatch.setattr(litellm_provider.litellm, "acompletion", boom)
    with pytest.raises(ProviderError) as excinfo:
        asyncio.run(LiteLLMTextProvider("gemini", {}).complete("hi"))
    assert excinfo.value.retryable
    assert excinfo.value.provider == "gemini"


def test_empty_answer_is_an_error(monkeypatch):
    async def empty(**kwargs):
        return completion_response("   ")

    monkeypatch.setattr(litellm_provider.litellm, "acompletion", empty)
    with pytest.raises(ProviderError):
        asyncio.run(LiteLLMTextProvider("gemini", {}).complete("hi"))


def test_validate_auth():
    assert LiteLLMTextProvider("openai", {"api_key": "sk"}).validate_auth()[0]
    assert not LiteLLMTextProvider("openai", {}).validate_auth()[0]


def test_unknown_provider():
    with pytest.raises(ValueError):
        LiteLLMTextProvider("mistral", {})

from types import SimpleNamespace

import httpx
import openai
import pytest

from shadeapi.core.errors import (
    ConfigurationError,
    ServiceAuthError,
    ServiceThrottled,
    ServiceTimeout,
    ServiceUnavailable,
)
from shadeapi.services.model_client import DEFAULT_TIMEOUT_SECONDS, EmptyModelResponse, ShadeModelClient

from fakes import FakeCompletions, VALID_IMAGE, VALID_JPEG, fake_openai

ENDPOINT = "https://openrouter.ai/api/v1/chat/completions"


def _client(completions, **kwargs):
    return ShadeModelClient("test-key", client=fake_openai(completions), **kwargs)


@pytest.mark.asyncio
async def test_sends_one_multimodal_json_request():
    completions = FakeCompletions(content='{"ok": true}')
    client = _client(completions, model="test/model", max_tokens=1500, temperature=0.2)

    raw = await client.complete("analyze these", VALID_IMAGE, VALID_JPEG)

    assert raw == '{"ok": true}'
    assert len(completions.requests) == 1
    request = completions.requests[0]
    assert request["model"] == "test/model"
    assert request["response_format"] == {"type": "json_object"}
    assert request["max_tokens"] == 1500
    assert request["temperature"] == 0.2

    (message,) = request["messages"]
    assert message["role"] == "user"
    text, first, second = message["content"]
    assert text == {"type": "text", "text": "analyze these"}
    assert first == {"type": "image_url", "image_url": {"url": VALID_IMAGE}}
    assert second == {"type": "image_url", "image_url": {"url": VALID_JPEG}}


@pytest.mark.asyncio
async def test_missing_api_key_fails_on_first_use():
    client = ShadeModelClient("")
    with pytest.raises(ConfigurationError) as exc_info:
        await client.complete("prompt", VALID_IMAGE, VALID_JPEG)
    assert isinstance(exc_info.value, ServiceAuthError)
    assert exc_info.value.status_code == 500


def test_sdk_client_is_built_lazily_and_reused():
    client = ShadeModelClient(
        "sk-test",
        base_url="https://openrouter.ai/api/v1",
        app_url="https://dental.example.com",
    )
    assert client._client is None

    sdk = client._get_client()
    assert isinstance(sdk, openai.AsyncOpenAI)
    assert "openrouter.ai" in str(sdk.base_url)
    assert sdk.max_retries == 0
    assert client._get_client() is sdk


@pytest.mark.asyncio
@pytest.mark.parametrize("choices", [[], [SimpleNamespace(message=SimpleNamespace(content=None))],
                                     [SimpleNamespace(message=SimpleNamespace(content=""))]])
async def test_empty_reply_is_a_service_failure(choices):
    client = _client(FakeCompletions(choices=choices))
    with pytest.raises(EmptyModelResponse) as exc_info:
        await client.complete("prompt", VALID_IMAGE, VALID_JPEG)
    assert exc_info.value.message == "No response received from analysis service"
    assert exc_info.value.status_code == 500


def _status_error(cls, status):
    request = httpx.Request("POST", ENDPOINT)
    response = httpx.Response(status, request=request)
    return cls(f"Error code: {status}", response=response, body=None)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error, expected",
    [
        (lambda: _status_error(openai.AuthenticationError, 401), ServiceAuthError),
        (lambda: _status_error(openai.RateLimitError, 429), ServiceThrottled),
        (lambda: openai.APITimeoutError(request=httpx.Request("POST", ENDPOINT)), ServiceTimeout),
        (lambda: openai.APIConnectionError(request=httpx.Request("POST", ENDPOINT)), ServiceUnavailable),
    ],
)
async def test_sdk_failures_are_translated(error, expected):
    client = _client(FakeCompletions(error=error()))
    with pytest.raises(expected):
        await client.complete("prompt", VALID_IMAGE, VALID_JPEG)


def test_directly_built_client_keeps_a_finite_timeout():
    client = ShadeModelClient("sk-test")
    assert client.timeout == DEFAULT_TIMEOUT_SECONDS
    assert client._get_client().timeout == DEFAULT_TIMEOUT_SECONDS

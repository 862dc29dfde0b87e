from __future__ import annotations

from typing import Any

import httpx
import pytest

from src.weaveit.pipeline.pipeline_errors import ProviderExecutionError
from src.weaveit.providers.providers_openai import (
    OpenAIClient,
    OpenAIScriptEnhancer,
    OpenAISpeechSynthesizer,
)


class DummyResponse:
    def __init__(
        self,
        status_code: int,
        json_data: Any = None,
        *,
        content: bytes = b"",
        text: str = "",
    ) -> None:
        self.status_code = status_code
        self._json_data = json_data
        self.content = content
        self.text = text

    def json(self) -> Any:
        if self._json_data is None:
            raise ValueError("No JSON body")
        return self._json_data


class DummyAsyncClient:
    def __init__(self, responses: list[DummyResponse | Exception]) -> None:
        self._responses = responses
        self.requests: list[dict[str, Any]] = []

    async def __aenter__(self) -> "DummyAsyncClient":  # pragma: no cover - helper
        return self

    async def __aexit__(
        self, exc_type, exc_value, traceback
    ) -> None:  # pragma: no cover - helper
        return None

    async def post(
        self,
        url: str,
        headers: dict[str, str],
        json: dict[str, Any],
    ) -> DummyResponse:
        self.requests.append({"url": url, "headers": headers, "json": json})
        if not self._responses:
            raise RuntimeError("No more responses queued")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _client(**kwargs: Any) -> OpenAIClient:
    defaults = {"api_key": "test-key", "base_url": "https://llm.test/v1/", "backoff_seconds": 0}
    defaults.update(kwargs)
    return OpenAIClient(**defaults)


def _completion(content: str | None) -> DummyResponse:
    return DummyResponse(200, {"choices": [{"message": {"content": content}}]})


@pytest.mark.asyncio
async def test_enhancer_returns_narration(monkeypatch) -> None:
    client = DummyAsyncClient([_completion("  Step one prints hello.  ")])
    monkeypatch.setattr("httpx.AsyncClient", lambda timeout: client)
    enhancer = OpenAIScriptEnhancer(client=_client(), model="gpt-test")

    narration = await enhancer.enhance("print('hello')")

    assert narration == "Step one prints hello."
    request = client.requests[0]
    assert request["url"] == "https://llm.test/v1/chat/completions"
    assert request["headers"]["Authorization"] == "Bearer test-key"
    assert request["json"]["model"] == "gpt-test"
    assert request["json"]["messages"][1] == {"role": "user", "content": "print('hello')"}


@pytest.mark.asyncio
async def test_enhancer_rejects_empty_content(monkeypatch) -> None:
    client = DummyAsyncClient([_completion("   ")])
    monkeypatch.setattr("httpx.AsyncClient", lambda timeout: client)

    with pytest.raises(ProviderExecutionError):
        await OpenAIScriptEnhancer(client=_client()).enhance("x")


@pytest.mark.asyncio
async def test_enhancer_rejects_malformed_body(monkeypatch) -> None:
    client = DummyAsyncClient([DummyResponse(200, {"choices": []})])
    monkeypatch.setattr("httpx.AsyncClient", lambda timeout: client)

    with pytest.raises(ProviderExecutionError, match="malformed"):
        await OpenAIScriptEnhancer(client=_client()).enhance("x")


@pytest.mark.asyncio
async def test_missing_api_key_fails_before_request(monkeypatch) -> None:
    client = DummyAsyncClient([])
    monkeypatch.setattr("httpx.AsyncClient", lambda timeout: client)

    with pytest.raises(ProviderExecutionError, match="OPENAI_API_KEY"):
        await OpenAIScriptEnhancer(client=_client(api_key=None)).enhance("x")
    assert client.requests == []


@pytest.mark.asyncio
async def test_client_error_is_not_retried(monkeypatch) -> None:
    client = DummyAsyncClient(
        [
            DummyResponse(
                400,
                {"error": {"type": "invalid_request_error", "message": "bad model"}},
            )
        ]
    )
    monkeypatch.setattr("httpx.AsyncClient", lambda timeout: client)

    with pytest.raises(ProviderExecutionError) as excinfo:
        await OpenAIScriptEnhancer(client=_client()).enhance("x")

    assert "status=400" in str(excinfo.value)
    assert "invalid_request_error bad model" in str(excinfo.value)
    assert len(client.requests) == 1


@pytest.mark.asyncio
async def test_retryable_status_is_retried(monkeypatch) -> None:
    client = DummyAsyncClient(
        [DummyResponse(503, text="unavailable"), _completion("Recovered narration")]
    )
    monkeypatch.setattr("httpx.AsyncClient", lambda timeout: client)

    narration = await OpenAIScriptEnhancer(client=_client()).enhance("x")

    assert narration == "Recovered narration"
    assert len(client.requests) == 2


@pytest.mark.asyncio
async def test_transport_errors_exhaust_attempts(monkeypatch) -> None:
    client = DummyAsyncClient(
        [httpx.ConnectError("refused"), httpx.ConnectError("refused again")]
    )
    monkeypatch.setattr("httpx.AsyncClient", lambda timeout: client)

    with pytest.raises(ProviderExecutionError, match="HTTP error"):
        await OpenAIScriptEnhancer(client=_client()).enhance("x")
    assert len(client.requests) == 2


@pytest.mark.asyncio
async def test_synthesizer_returns_audio(monkeypatch) -> None:
    client = DummyAsyncClient([DummyResponse(200, content=b"mp3-bytes")])
    monkeypatch.setattr("httpx.AsyncClient", lambda timeout: client)
    synthesizer = OpenAISpeechSynthesizer(client=_client(), voice="nova")

    speech = await synthesizer.synthesize("Hello there")

    assert speech.payload == b"mp3-bytes"
    assert speech.format == "mp3"
    request = client.requests[0]
    assert request["url"] == "https://llm.test/v1/audio/speech"
    assert request["json"] == {
        "model": "tts-1",
        "voice": "nova",
        "input": "Hello there",
        "response_format": "mp3",
    }


@pytest.mark.asyncio
async def test_synthesizer_rejects_empty_audio(monkeypatch) -> None:
    client = DummyAsyncClient([DummyResponse(200, content=b"")])
    monkeypatch.setattr("httpx.AsyncClient", lambda timeout: client)

    with pytest.raises(ProviderExecutionError, match="no audio"):
        await OpenAISpeechSynthesizer(client=_client()).synthesize("Hello")

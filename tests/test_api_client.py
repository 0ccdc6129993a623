from __future__ import annotations

import json

import pytest
import requests

from plantid.utils.api_client import (
    GENERATION_CONFIG,
    GeminiClient,
    build_client,
    extract_completion_text,
)
from plantid.utils.config import Settings
from plantid.utils.errors import (
    ConfigurationError,
    EmptyResponseError,
    MalformedResponseError,
    NetworkError,
    UpstreamError,
)
from plantid.utils.mock_api_client import MockGeminiClient
from plantid.utils.prompt_builder import IdentificationRequest


class _FakeResponse:
    def __init__(self, status_code: int, payload=None, text: str | None = None) -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else json.dumps(payload)

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            return json.loads(self.text)
        return self._payload


class _FakeSession:
    def __init__(self, response: _FakeResponse | None = None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[dict[str, object]] = []

    def post(self, url, **kwargs):
        self.calls.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.response


def _envelope(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


def _client(session: _FakeSession, api_key: str = "test-key") -> GeminiClient:
    return GeminiClient(
        api_key=api_key,
        model="gemini-2.5-flash",
        base_url="https://generativelanguage.googleapis.com/v1/",
        timeout_seconds=12.5,
        session=session,
    )


REQUEST = IdentificationRequest(image_data="QUJD", mime_type="image/jpeg")


def test_missing_api_key_fails_before_any_network_call():
    session = _FakeSession(_FakeResponse(200, _envelope("{}")))

    with pytest.raises(ConfigurationError, match="GEMINI_API_KEY"):
        _client(session, api_key="  ").generate(REQUEST)

    assert session.calls == []


def test_generate_posts_contents_and_fixed_generation_config():
    session = _FakeSession(_FakeResponse(200, _envelope('{"name": "Fern"}')))

    text = _client(session).generate(REQUEST)

    assert text == '{"name": "Fern"}'
    assert len(session.calls) == 1
    call = session.calls[0]
    assert call["url"] == "https://generativelanguage.googleapis.com/v1/models/gemini-2.5-flash:generateContent"
    assert call["headers"]["x-goog-api-key"] == "test-key"
    assert call["timeout"] == 12.5
    assert call["json"]["contents"] == REQUEST.contents()
    assert call["json"]["generationConfig"] == {
        "temperature": 0.4,
        "topK": 32,
        "topP": 1,
        "maxOutputTokens": 2048,
    }
    assert GENERATION_CONFIG["maxOutputTokens"] == 2048


def test_rate_limited_response_raises_upstream_error_with_status():
    payload = {"error": {"code": 429, "message": "Resource has been exhausted", "status": "RESOURCE_EXHAUSTED"}}
    session = _FakeSession(_FakeResponse(429, payload))

    with pytest.raises(UpstreamError) as excinfo:
        _client(session).generate(REQUEST)

    assert excinfo.value.status_code == 429
    assert excinfo.value.upstream_message == "Resource has been exhausted"
    assert "status 429" in str(excinfo.value)
    assert excinfo.value.retryable is True


def test_upstream_error_without_json_body_uses_unknown_error():
    session = _FakeSession(_FakeResponse(502, text="<html>Bad Gateway</html>"))

    with pytest.raises(UpstreamError, match="status 502: Unknown error"):
        _client(session).generate(REQUEST)


def test_transport_failure_raises_network_error():
    session = _FakeSession(error=requests.ConnectionError("connection refused"))

    with pytest.raises(NetworkError, match="connection refused") as excinfo:
        _client(session).generate(REQUEST)

    assert isinstance(excinfo.value, UpstreamError)
    assert excinfo.value.status_code is None


def test_non_json_success_body_is_malformed():
    session = _FakeSession(_FakeResponse(200, text="definitely not json"))

    with pytest.raises(MalformedResponseError):
        _client(session).generate(REQUEST)


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"candidates": []},
        {"candidates": [{"content": {"parts": []}}]},
        {"candidates": [{"content": {"parts": [{"text": "   "}]}}]},
        {"candidates": [{"finishReason": "MAX_TOKENS"}]},
    ],
)
def test_missing_completion_text_raises_empty_response(payload):
    with pytest.raises(EmptyResponseError, match="No response from Gemini API"):
        extract_completion_text(payload)


def test_blocked_prompt_names_block_reason():
    with pytest.raises(EmptyResponseError, match="blocked: SAFETY"):
        extract_completion_text({"promptFeedback": {"blockReason": "SAFETY"}})


def test_build_client_selects_mock_or_live():
    assert isinstance(build_client(Settings(use_mock=True)), MockGeminiClient)

    live = build_client(Settings(api_key="abc", model="gemini-2.0-flash", timeout_seconds=5.0))
    assert isinstance(live, GeminiClient)
    assert live.endpoint.endswith("/models/gemini-2.0-flash:generateContent")
    assert live.timeout_seconds == 5.0

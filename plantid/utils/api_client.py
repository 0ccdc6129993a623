# utils/api_client.py
import logging

import requests

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

logger = logging.getLogger(__name__)

# Fixed: biased toward deterministic, well-formed JSON with room for a full object.
GENERATION_CONFIG = {
    "temperature": 0.4,
    "topK": 32,
    "topP": 1,
    "maxOutputTokens": 2048,
}


class GeminiClient:
    def __init__(self, api_key, model, base_url, timeout_seconds=60.0, session=None):
        self.api_key = (api_key or "").strip()
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings, session=None):
        return cls(
            api_key=settings.api_key,
            model=settings.model,
            base_url=settings.base_url,
            timeout_seconds=settings.timeout_seconds,
            session=session,
        )

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def generate(self, request: IdentificationRequest) -> str:
        """Send one generateContent call and return the first completion text."""
        if not self.api_key:
            raise ConfigurationError(
                "Gemini API key is not configured. Please set GEMINI_API_KEY in your environment or Streamlit secrets"
            )

        body = {
            "contents": request.contents(),
            "generationConfig": dict(GENERATION_CONFIG),
        }

        logger.info("Making request to Gemini API (model=%s)", self.model)
        try:
            resp = self.session.post(
                self.endpoint,
                headers={
                    "Content-Type": "application/json",
                    "x-goog-api-key": self.api_key,
                },
                json=body,
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as e:
            raise NetworkError(str(e)) from e

        logger.info("Response status: %s", resp.status_code)

        if not resp.ok:
            message = _extract_error_message(resp)
            logger.warning("Gemini API error %s: %s", resp.status_code, message)
            raise UpstreamError(resp.status_code, message)

        try:
            payload = resp.json()
        except ValueError as e:
            raise MalformedResponseError("Gemini API returned a response that is not valid JSON") from e

        return extract_completion_text(payload)


def extract_completion_text(payload) -> str:
    """Pull candidates[0].content.parts[0].text out of a generateContent envelope."""
    text = None
    if isinstance(payload, dict):
        candidates = payload.get("candidates") or []
        if isinstance(candidates, list) and candidates and isinstance(candidates[0], dict):
            content = candidates[0].get("content") or {}
            parts = content.get("parts") if isinstance(content, dict) else None
            if isinstance(parts, list) and parts and isinstance(parts[0], dict):
                text = parts[0].get("text")

    if not isinstance(text, str) or not text.strip():
        block_reason = None
        if isinstance(payload, dict) and isinstance(payload.get("promptFeedback"), dict):
            block_reason = payload["promptFeedback"].get("blockReason")
        if block_reason:
            raise EmptyResponseError(f"No response from Gemini API (blocked: {block_reason})")
        raise EmptyResponseError("No response from Gemini API")

    logger.debug("Raw text response: %s", text)
    return text


def _extract_error_message(resp) -> str:
    try:
        payload = resp.json()
    except ValueError:
        return "Unknown error"
    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        message = payload["error"].get("message")
        if isinstance(message, str) and message:
            return message
    return "Unknown error"


def build_client(settings: Settings, session=None):
    """Return the offline mock client in mock mode, the live Gemini client otherwise."""
    if settings.use_mock:
        logger.info("Using mock Gemini client")
        return MockGeminiClient()
    return GeminiClient.from_settings(settings, session=session)

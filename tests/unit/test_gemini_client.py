from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from google.genai.errors import ClientError, ServerError

from recipebox.services.errors import (
    AiCallError,
    GeminiConfigurationError,
    GeminiPromptError,
    RateLimitedError,
)
from recipebox.services.extractor import PAGE_PROMPT_FILE, PHOTO_PROMPT_FILE
from recipebox.services.gemini_client import GeminiClient


@pytest.fixture
def client() -> GeminiClient:
    gemini = GeminiClient(api_key="test-key", model_name="gemini-test")
    gemini._client = MagicMock()
    return gemini


def _reply(text: str | None) -> MagicMock:
    response = MagicMock()
    response.text = text
    return response


class TestConfiguration:
    def test_missing_key(self) -> None:
        with pytest.raises(GeminiConfigurationError):
            GeminiClient(api_key="")

    def test_packaged_prompts_load(self, client) -> None:
        assert '{"error": "No recipe found on this page"}' in client.load_system_prompt(PAGE_PROMPT_FILE)
        assert "photo" in client.load_system_prompt(PHOTO_PROMPT_FILE)

    def test_missing_prompt_file(self, client) -> None:
        with pytest.raises(GeminiPromptError):
            client.load_system_prompt("does-not-exist.txt")


class TestGenerate:
    def test_text_call(self, client) -> None:
        client._client.models.generate_content.return_value = _reply('{"name": "Chili"}')

        assert client.generate_content("Webpage content", PAGE_PROMPT_FILE) == '{"name": "Chili"}'

        kwargs = client._client.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-test"
        assert kwargs["contents"] == ["Webpage content"]

    def test_image_call_sends_image_part_first(self, client) -> None:
        client._client.models.generate_content.return_value = _reply("{}")

        client.generate_from_image(b"\x89PNG", "image/png", "Extract", PHOTO_PROMPT_FILE)

        contents = client._client.models.generate_content.call_args.kwargs["contents"]
        assert contents[0].inline_data.data == b"\x89PNG"
        assert contents[0].inline_data.mime_type == "image/png"
        assert contents[1] == "Extract"

    def test_empty_reply_is_an_ai_call_error(self, client) -> None:
        client._client.models.generate_content.return_value = _reply(None)

        with pytest.raises(AiCallError):
            client.generate_content("text", PAGE_PROMPT_FILE)

    def test_quota_errors_are_rate_limited(self, client) -> None:
        client._client.models.generate_content.side_effect = ClientError(
            429, {"error": {"code": 429, "message": "quota", "status": "RESOURCE_EXHAUSTED"}}
        )

        with pytest.raises(RateLimitedError):
            client.generate_content("text", PAGE_PROMPT_FILE)

    def test_server_errors_are_ai_call_errors(self, client) -> None:
        client._client.models.generate_content.side_effect = ServerError(
            500, {"error": {"code": 500, "message": "internal", "status": "INTERNAL"}}
        )

        with pytest.raises(AiCallError) as exc_info:
            client.generate_content("text", PAGE_PROMPT_FILE)

        assert not isinstance(exc_info.value, RateLimitedError)

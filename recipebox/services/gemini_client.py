from __future__ import annotations

import logging
from pathlib import Path

from google import genai
from google.genai import types
from google.genai.errors import APIError

from recipebox.services.errors import (
    AiCallError,
    GeminiConfigurationError,
    GeminiPromptError,
    RateLimitedError,
)

logger = logging.getLogger(__name__)

PROMPTS_DIR = Path(__file__).parent / "prompts"
DEFAULT_MODEL_NAME = "gemini-2.5-flash"
DEFAULT_MAX_OUTPUT_TOKENS = 8192


def _is_rate_limited_error(exc: Exception) -> bool:
    if getattr(exc, "code", None) == 429:
        return True
    return "RESOURCE_EXHAUSTED" in str(exc)


class GeminiClient:
    def __init__(
        self,
        api_key: str,
        model_name: str = DEFAULT_MODEL_NAME,
        max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS,
    ) -> None:
        self.api_key = api_key
        self.model_name = model_name
        self.max_output_tokens = max_output_tokens
        self._client = self._configure_api()

    def _configure_api(self) -> genai.Client:
        if not self.api_key:
            raise GeminiConfigurationError("Missing Google API key.")
        return genai.Client(api_key=self.api_key)

    def load_system_prompt(self, file_name: str) -> str:
        file_path = PROMPTS_DIR / file_name
        try:
            return file_path.read_text(encoding="utf-8")
        except FileNotFoundError as not_found_error:
            raise GeminiPromptError(f"Prompt file not found: {file_path}") from not_found_error
        except OSError as io_error:
            raise GeminiPromptError(f"Unable to read prompt file: {io_error}") from io_error

    def _config(self, system_instruction: str) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            system_instruction=system_instruction,
            max_output_tokens=self.max_output_tokens,
        )

    def _generate(self, contents: list, system_prompt_file: str) -> str:
        system_instruction = self.load_system_prompt(system_prompt_file)

        try:
            response = self._client.models.generate_content(
                model=self.model_name,
                contents=contents,
                config=self._config(system_instruction),
            )
        except APIError as err:
            if _is_rate_limited_error(err):
                raise RateLimitedError(
                    "Gemini API rate limit reached. Try again in a few moments."
                ) from err
            logger.error("Gemini call failed: %s", err)
            raise AiCallError(f"AI extraction failed: {err}") from err

        text = response.text
        if not text:
            raise AiCallError("AI extraction failed: No response from AI")
        return text

    def generate_content(self, user_prompt: str, system_prompt_file: str) -> str:
        return self._generate([user_prompt], system_prompt_file)

    def generate_from_image(
        self,
        image_bytes: bytes,
        mime_type: str,
        user_prompt: str,
        system_prompt_file: str,
    ) -> str:
        image_part = types.Part.from_bytes(data=image_bytes, mime_type=mime_type)
        return self._generate([image_part, user_prompt], system_prompt_file)

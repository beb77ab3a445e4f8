from __future__ import annotations

import html
import json
import logging
import re
from urllib.parse import urlparse

from recipebox.services.gemini_client import GeminiClient
from recipebox.services.types import (
    ExtractionEmpty,
    ExtractionMalformed,
    ExtractionResult,
    ExtractionSuccess,
    RecipeFields,
)

logger = logging.getLogger(__name__)

PAGE_PROMPT_FILE = "recipe_from_page.txt"
PHOTO_PROMPT_FILE = "recipe_from_photo.txt"
RECIPE_FIELD_NAMES = ("name", "source", "description", "ingredients", "instructions")
# A reply missing any of these is not a usable recipe; source may be blank
CONTENT_FIELD_NAMES = ("name", "description", "ingredients", "instructions")
NO_RECIPE_MESSAGE = "No recipe found on this page"

FENCE_OPEN_PATTERN = re.compile(r"^```(?:json)?\s*\n?", re.IGNORECASE)
FENCE_CLOSE_PATTERN = re.compile(r"\n?```\s*$")


def strip_code_fences(text: str) -> str:
    stripped = text.strip()
    stripped = FENCE_OPEN_PATTERN.sub("", stripped)
    stripped = FENCE_CLOSE_PATTERN.sub("", stripped)
    return stripped.strip()


def _field_text(value: object) -> str:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, list):
        return "\n".join(str(item).strip() for item in value if str(item).strip())
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def parse_reply(reply: str) -> ExtractionResult:
    """Classify a model reply as a recipe, an explicit absence, or garbage."""
    try:
        parsed = json.loads(strip_code_fences(reply))
    except ValueError as error:
        return ExtractionMalformed(raw_text=reply, error=str(error))

    if not isinstance(parsed, dict):
        return ExtractionMalformed(raw_text=reply, error="Expected a JSON object")

    if parsed.get("error"):
        return ExtractionEmpty(reason=_field_text(parsed["error"]) or NO_RECIPE_MESSAGE)

    values = {name: _field_text(parsed.get(name)) for name in RECIPE_FIELD_NAMES}
    if not all(values[name] for name in CONTENT_FIELD_NAMES):
        return ExtractionEmpty(reason=NO_RECIPE_MESSAGE)

    return ExtractionSuccess(fields=RecipeFields(**values))


def format_source_link(url: str, source_name: str = "") -> str:
    """Render the origin of an imported recipe as a link fragment."""
    label = source_name.strip() or urlparse(url).hostname or url
    return (
        f'<p><a href="{html.escape(url, quote=True)}" target="_blank" '
        f'rel="noopener noreferrer">{html.escape(label, quote=False)}</a></p>'
    )


class RecipeExtractor:
    """Turns page text or a photo into recipe fields through the AI model."""

    def __init__(self, client: GeminiClient) -> None:
        self._client = client

    def extract_from_text(self, cleaned_text: str) -> ExtractionResult:
        if not cleaned_text.strip():
            return ExtractionEmpty(reason=NO_RECIPE_MESSAGE)

        reply = self._client.generate_content(
            user_prompt=f"Webpage content:\n\n{cleaned_text}",
            system_prompt_file=PAGE_PROMPT_FILE,
        )
        return self._classify(reply)

    def extract_from_image(self, image_bytes: bytes, mime_type: str) -> ExtractionResult:
        reply = self._client.generate_from_image(
            image_bytes=image_bytes,
            mime_type=mime_type,
            user_prompt="Extract the recipe shown in this photo.",
            system_prompt_file=PHOTO_PROMPT_FILE,
        )
        return self._classify(reply)

    def _classify(self, reply: str) -> ExtractionResult:
        result = parse_reply(reply)
        if isinstance(result, ExtractionMalformed):
            logger.error("Unparseable AI reply (%s): %.200s", result.error, reply)
        elif isinstance(result, ExtractionEmpty):
            logger.info("AI reported no recipe: %s", result.reason)
        return result

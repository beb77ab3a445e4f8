from __future__ import annotations

import json
import logging
import re
from typing import Callable, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

MIN_IMAGE_WIDTH = 200
EXCLUDED_IMAGE_MARKERS = ("1x1", "pixel", ".svg", "icon", "logo", "avatar", "ad-", "data:image")
WIDTH_PATTERN = re.compile(r"\s*(\d+)")

ImageStrategy = Callable[[BeautifulSoup], Optional[str]]


def resolve_url(url: str, base_url: str) -> str:
    try:
        return urljoin(base_url, url)
    except ValueError:
        return url


def find_og_image(soup: BeautifulSoup) -> Optional[str]:
    meta = soup.find("meta", attrs={"property": "og:image"})
    if meta is None:
        return None
    content = meta.get("content")
    if not isinstance(content, str):
        return None
    return content.strip() or None


def _is_recipe_node(node: object) -> bool:
    if not isinstance(node, dict):
        return False
    node_type = node.get("@type")
    if isinstance(node_type, list):
        return "Recipe" in node_type
    return node_type == "Recipe"


def _find_recipe_node(data: object) -> Optional[dict]:
    if isinstance(data, list):
        return next((item for item in data if _is_recipe_node(item)), None)
    if not isinstance(data, dict):
        return None
    if _is_recipe_node(data):
        return data
    graph = data.get("@graph")
    if isinstance(graph, list):
        return _find_recipe_node(graph)
    return None


def _image_from_value(value: object) -> Optional[str]:
    if isinstance(value, list):
        return _image_from_value(value[0]) if value else None
    if isinstance(value, dict):
        url = value.get("url")
        return url if isinstance(url, str) and url.strip() else None
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def find_json_ld_image(soup: BeautifulSoup) -> Optional[str]:
    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        raw_json = script.string or script.get_text()
        if not raw_json:
            continue
        try:
            data = json.loads(raw_json)
        except ValueError:
            logger.debug("Skipping malformed JSON-LD block")
            continue

        recipe = _find_recipe_node(data)
        if recipe is None:
            continue

        image = _image_from_value(recipe.get("image"))
        if image:
            return image
    return None


def _declared_width(value: object) -> Optional[int]:
    match = WIDTH_PATTERN.match(value) if isinstance(value, str) else None
    return int(match.group(1)) if match else None


def _looks_like_photo(src: str, width: object) -> bool:
    if any(marker in src for marker in EXCLUDED_IMAGE_MARKERS):
        return False
    declared = _declared_width(width)
    return declared is None or declared >= MIN_IMAGE_WIDTH


def find_content_image(soup: BeautifulSoup) -> Optional[str]:
    for img in soup.find_all("img", src=True):
        src = img["src"].strip()
        if src and _looks_like_photo(src, img.get("width")):
            return src
    return None


# Tried in order; the first match wins
IMAGE_STRATEGIES: tuple[ImageStrategy, ...] = (
    find_og_image,
    find_json_ld_image,
    find_content_image,
)


def locate_image(raw_html: str, base_url: str) -> Optional[str]:
    """Return the best representative photo URL on a page, or None."""
    if not raw_html:
        return None

    soup = BeautifulSoup(raw_html, "lxml")
    for strategy in IMAGE_STRATEGIES:
        candidate = strategy(soup)
        if candidate:
            logger.debug("Image found by %s: %s", strategy.__name__, candidate)
            return resolve_url(candidate, base_url)
    return None

from __future__ import annotations

import logging
import re
import unicodedata
from typing import TYPE_CHECKING, Optional

from recipebox.services.html_cleaner import strip_tags

if TYPE_CHECKING:
    from recipebox.app.infra.db.base import RecipeRepository

logger = logging.getLogger(__name__)

FALLBACK_SLUG = "recipe"
APOSTROPHE_PATTERN = re.compile(r"['’ʼ]")
NON_SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """Turn a recipe name into a slug base: lowercase, no accents, hyphens."""
    text = strip_tags(name).lower()
    # remove accents
    text = unicodedata.normalize("NFD", text)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    # "grandma's" reads as one word
    text = APOSTROPHE_PATTERN.sub("", text)
    text = NON_SLUG_PATTERN.sub("-", text).strip("-")
    return text or FALLBACK_SLUG


def unique_slug(
    repository: "RecipeRepository",
    base: str,
    exclude_id: Optional[str] = None,
) -> str:
    """Probe base, base-2, base-3, ... until a free or self-owned slug is found.

    This is a read-then-write sequence; two writers racing on the same base
    can both observe the same free slug.
    """
    slug = base
    suffix = 2
    while True:
        existing = repository.find_by_slug(slug)
        if existing is None or (exclude_id is not None and existing.id == exclude_id):
            return slug
        logger.debug("Slug %s taken by %s", slug, existing.id)
        slug = f"{base}-{suffix}"
        suffix += 1


def _comparable_name(name: Optional[str]) -> str:
    return strip_tags(name or "").strip()


def needs_new_slug(new_name: str, stored_name: Optional[str], stored_slug: Optional[str]) -> bool:
    if not stored_slug:
        return True
    return _comparable_name(new_name) != _comparable_name(stored_name)

"""
Recipe management service.
Owner-scoped CRUD with slug assignment and image lifetime handling.
"""
from __future__ import annotations

import logging
from typing import Any, Optional
from uuid import UUID

from recipebox.app.domain.categories import normalize_category
from recipebox.app.domain.errors import RecipeNotFoundError, RecipeValidationError
from recipebox.app.domain.models import Recipe, RecipeInput, SignedUpload
from recipebox.app.infra.db.base import RecipeRepository
from recipebox.app.infra.storage.base import StorageProvider
from recipebox.services.html_cleaner import strip_tags
from recipebox.services.slugify import needs_new_slug, slugify, unique_slug

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "description", "ingredients", "instructions")


def _looks_like_record_id(value: str) -> bool:
    try:
        UUID(value)
    except ValueError:
        return False
    return True


def _normalize_tags(tags: Optional[list[str]]) -> list[str]:
    seen: list[str] = []
    for tag in tags or []:
        text = tag.strip()
        if text and text not in seen:
            seen.append(text)
    return seen


def _validate(data: RecipeInput, user_id: str) -> dict[str, Any]:
    missing = [name for name in REQUIRED_FIELDS if not strip_tags(getattr(data, name)).strip()]
    if missing:
        raise RecipeValidationError(missing)

    try:
        category = normalize_category(data.category)
    except ValueError as error:
        raise RecipeValidationError(["category"], str(error)) from error

    if data.image_ref and not data.image_ref.startswith(f"users/{user_id}/"):
        raise RecipeValidationError(["image_ref"], "Image does not belong to this user")

    return {
        "name": data.name,
        "description": data.description,
        "ingredients": data.ingredients,
        "instructions": data.instructions,
        "source": data.source,
        "category": category,
        "tags": _normalize_tags(data.tags),
        "image_ref": data.image_ref,
    }


class RecipeService:
    """
    Service for managing a user's recipes.

    Responsibilities:
    - Enforce ownership on every read and write
    - Assign and re-derive slugs
    - Delete stored images together with the recipe that owns them
    """

    def __init__(self, repository: RecipeRepository, storage: StorageProvider):
        self._repo = repository
        self._storage = storage

    def _with_image_url(self, recipe: Recipe) -> Recipe:
        if recipe.image_ref:
            recipe.image_url = self._storage.get_url(recipe.image_ref)
        return recipe

    def _owned(self, recipe_id: str, user_id: str) -> Recipe:
        recipe = self._repo.get(recipe_id)
        if recipe is None or not recipe.is_owned_by(user_id):
            raise RecipeNotFoundError(recipe_id)
        return recipe

    def list_recipes(self, user_id: str) -> list[Recipe]:
        """All of a user's recipes, newest first."""
        return [self._with_image_url(recipe) for recipe in self._repo.list_by_user(user_id, descending=True)]

    def get_recipe(self, recipe_id: str, user_id: str) -> Optional[Recipe]:
        recipe = self._repo.get(recipe_id)
        if recipe is None or not recipe.is_owned_by(user_id):
            return None
        return self._with_image_url(recipe)

    def get_recipe_by_slug(self, slug: str, user_id: str) -> Optional[Recipe]:
        """
        Look a recipe up by slug.

        Old bookmarks used the raw record id, so an id-shaped value that
        matches no slug is tried as an id.
        """
        recipe = self._repo.find_by_slug(slug)
        if recipe is None and _looks_like_record_id(slug):
            recipe = self._repo.get(slug)

        if recipe is None or not recipe.is_owned_by(user_id):
            return None
        return self._with_image_url(recipe)

    def create_recipe(self, user_id: str, data: RecipeInput) -> tuple[str, str]:
        """
        Create a recipe and assign its slug.

        Returns:
            Tuple of (recipe_id, slug)
        """
        values = _validate(data, user_id)
        slug = unique_slug(self._repo, slugify(data.name))

        recipe_id = self._repo.insert({**values, "slug": slug, "user_id": user_id})
        logger.info("Recipe created: id=%s, slug=%s, user=%s", recipe_id, slug, user_id)
        return recipe_id, slug

    def update_recipe(self, recipe_id: str, user_id: str, data: RecipeInput) -> str:
        """
        Replace a recipe's editable fields.

        The stored image is kept when ``data.keep_image`` is set, replaced
        by a new ``image_ref``, or cleared by ``None``.

        The slug is re-derived only when the visible name changes or the
        record has none yet.

        Returns:
            The recipe's slug after the update
        """
        recipe = self._owned(recipe_id, user_id)
        values = _validate(data, user_id)
        if data.keep_image:
            values["image_ref"] = recipe.image_ref

        slug = recipe.slug
        if needs_new_slug(data.name, recipe.name, recipe.slug):
            slug = unique_slug(self._repo, slugify(data.name), exclude_id=recipe_id)
            logger.info("Slug re-derived: id=%s, %s -> %s", recipe_id, recipe.slug, slug)

        self._repo.patch(recipe_id, {**values, "slug": slug})

        if recipe.image_ref and recipe.image_ref != values["image_ref"]:
            self._storage.delete_object(recipe.image_ref)

        return slug

    def delete_recipe(self, recipe_id: str, user_id: str) -> None:
        recipe = self._owned(recipe_id, user_id)

        if recipe.image_ref:
            self._storage.delete_object(recipe.image_ref)

        self._repo.delete(recipe_id)
        logger.info("Recipe deleted: id=%s, user=%s", recipe_id, user_id)

    def generate_upload_url(self, user_id: str, content_type: str = "image/jpeg") -> SignedUpload:
        return self._storage.generate_upload_url(user_id, content_type=content_type)

    def backfill_slugs(self) -> int:
        """Assign slugs to records created before slugs existed."""
        count = 0
        for recipe in self._repo.list_all():
            if recipe.slug:
                continue
            slug = unique_slug(self._repo, slugify(recipe.name), exclude_id=recipe.id)
            self._repo.patch(recipe.id, {"slug": slug})
            count += 1

        logger.info("Backfilled %d slugs", count)
        return count

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID, uuid4

from postgrest.exceptions import APIError
from supabase import Client

from recipebox.app.domain.errors import RecipeRepositoryError
from recipebox.app.domain.models import Recipe
from recipebox.app.infra.db.base import RecipeRepository

logger = logging.getLogger(__name__)

# Connection failures and query errors from PostgREST
QUERY_ERRORS = (ConnectionError, TimeoutError, APIError)

RECIPE_COLUMNS = (
    "id,user_id,slug,name,source,description,ingredients,instructions,"
    "category,tags,image_ref,created_at"
)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _parse_datetime(value: str | datetime | None) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        return None

    try:
        normalized = value.replace("Z", "+00:00") if value.endswith("Z") else value
        return datetime.fromisoformat(normalized)
    except ValueError:
        return None


def _is_record_id(value: str) -> bool:
    try:
        UUID(value)
    except ValueError:
        return False
    return True


def _safe_str(value: object) -> str | None:
    return str(value) if value else None


def _row_to_recipe(row: dict[str, Any]) -> Recipe:
    tags = row.get("tags")
    return Recipe(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        name=str(row.get("name") or ""),
        description=str(row.get("description") or ""),
        ingredients=str(row.get("ingredients") or ""),
        instructions=str(row.get("instructions") or ""),
        slug=_safe_str(row.get("slug")),
        source=_safe_str(row.get("source")),
        category=_safe_str(row.get("category")),
        tags=[str(tag) for tag in tags] if isinstance(tags, list) else [],
        image_ref=_safe_str(row.get("image_ref")),
        created_at=_parse_datetime(row.get("created_at")),
    )


class SupabaseRecipeRepository(RecipeRepository):
    TABLE_NAME = "recipes"

    def __init__(self, client: Client):
        self._client = client
        logger.info("SupabaseRecipeRepository initialized")

    def _table(self):
        return self._client.table(self.TABLE_NAME)

    def insert(self, data: dict[str, Any]) -> str:
        row = {
            "id": str(uuid4()),
            "created_at": _now_utc().isoformat(),
            **data,
        }
        try:
            result = self._table().insert(row).execute()
        except QUERY_ERRORS as error:
            logger.error("Network error inserting recipe: %s", error)
            raise RecipeRepositoryError("insert", str(error)) from error

        if not result.data:
            raise RecipeRepositoryError("insert", "no row returned")

        recipe_id = str(result.data[0]["id"])
        logger.info("Created recipe: id=%s, slug=%s", recipe_id, data.get("slug"))
        return recipe_id

    def patch(self, recipe_id: str, data: dict[str, Any]) -> None:
        try:
            self._table().update(data).eq("id", recipe_id).execute()
        except QUERY_ERRORS as error:
            logger.error("Network error updating recipe %s: %s", recipe_id, error)
            raise RecipeRepositoryError("patch", str(error)) from error

    def delete(self, recipe_id: str) -> None:
        try:
            self._table().delete().eq("id", recipe_id).execute()
        except QUERY_ERRORS as error:
            logger.error("Network error deleting recipe %s: %s", recipe_id, error)
            raise RecipeRepositoryError("delete", str(error)) from error

    def _first(self, column: str, value: str) -> Optional[Recipe]:
        try:
            result = (
                self._table()
                .select(RECIPE_COLUMNS)
                .eq(column, value)
                .order("created_at", desc=False)
                .limit(1)
                .execute()
            )
        except QUERY_ERRORS as error:
            raise RecipeRepositoryError(f"lookup by {column}", str(error)) from error

        return _row_to_recipe(result.data[0]) if result.data else None

    def get(self, recipe_id: str) -> Optional[Recipe]:
        # the id column is a uuid; anything else can never match
        if not _is_record_id(recipe_id):
            return None
        return self._first("id", recipe_id)

    def find_by_slug(self, slug: str) -> Optional[Recipe]:
        return self._first("slug", slug)

    def list_by_user(self, user_id: str, descending: bool = True) -> list[Recipe]:
        try:
            result = (
                self._table()
                .select(RECIPE_COLUMNS)
                .eq("user_id", user_id)
                .order("created_at", desc=descending)
                .execute()
            )
        except QUERY_ERRORS as error:
            raise RecipeRepositoryError("list", str(error)) from error

        return [_row_to_recipe(row) for row in result.data or []]

    def list_all(self) -> list[Recipe]:
        try:
            result = self._table().select(RECIPE_COLUMNS).order("created_at", desc=False).execute()
        except QUERY_ERRORS as error:
            raise RecipeRepositoryError("list_all", str(error)) from error

        return [_row_to_recipe(row) for row in result.data or []]

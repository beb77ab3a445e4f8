from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import pytest

# Settings() is built at import time and needs these to exist
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")
os.environ.setdefault("OWNER_USER_ID", "user-1")

from recipebox.app.domain.errors import StorageDownloadError, StorageError  # noqa: E402
from recipebox.app.domain.models import Recipe, StoredBlob  # noqa: E402
from recipebox.app.infra.db.base import RecipeRepository  # noqa: E402
from recipebox.app.infra.storage.base import StorageProvider  # noqa: E402


class InMemoryRecipeRepository(RecipeRepository):
    def __init__(self) -> None:
        self.rows: dict[str, dict[str, Any]] = {}
        self.slug_lookups: list[str] = []
        self._next_id = 1

    def insert(self, data: dict[str, Any]) -> str:
        recipe_id = f"rec-{self._next_id}"
        self._next_id += 1
        self.rows[recipe_id] = {"id": recipe_id, **data}
        return recipe_id

    def patch(self, recipe_id: str, data: dict[str, Any]) -> None:
        self.rows[recipe_id].update(data)

    def delete(self, recipe_id: str) -> None:
        self.rows.pop(recipe_id, None)

    def _to_recipe(self, row: dict[str, Any]) -> Recipe:
        return Recipe(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            description=row.get("description", ""),
            ingredients=row.get("ingredients", ""),
            instructions=row.get("instructions", ""),
            slug=row.get("slug"),
            source=row.get("source"),
            category=row.get("category"),
            tags=list(row.get("tags") or []),
            image_ref=row.get("image_ref"),
        )

    def get(self, recipe_id: str) -> Optional[Recipe]:
        row = self.rows.get(recipe_id)
        return self._to_recipe(row) if row else None

    def find_by_slug(self, slug: str) -> Optional[Recipe]:
        self.slug_lookups.append(slug)
        for row in self.rows.values():
            if row.get("slug") == slug:
                return self._to_recipe(row)
        return None

    def list_by_user(self, user_id: str, descending: bool = True) -> list[Recipe]:
        recipes = [self._to_recipe(row) for row in self.rows.values() if row["user_id"] == user_id]
        return list(reversed(recipes)) if descending else recipes

    def list_all(self) -> list[Recipe]:
        return [self._to_recipe(row) for row in self.rows.values()]


class StorageProviderStub(StorageProvider):
    def __init__(self) -> None:
        self.objects: dict[str, StoredBlob] = {}
        self.deleted: list[str] = []
        self.fail_store = False

    def store(self, data: bytes, content_type: str, object_key: str) -> str:
        if self.fail_store:
            raise StorageError("bucket unavailable")
        self.objects[object_key] = StoredBlob(data=data, content_type=content_type)
        return object_key

    def get_bytes(self, object_key: str) -> StoredBlob:
        if object_key not in self.objects:
            raise StorageDownloadError(object_key, "Object not found")
        return self.objects[object_key]

    def generate_signed_put_url(
        self,
        object_key: str,
        content_type: str,
        expires_seconds: int = 3600,
    ) -> tuple[str, datetime]:
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=expires_seconds)
        return f"https://storage.test/put/{object_key}", expires_at

    def generate_signed_get_url(self, object_key: str, expires_seconds: int = 3600) -> str:
        return f"https://storage.test/get/{object_key}"

    def delete_object(self, object_key: str) -> bool:
        self.deleted.append(object_key)
        return self.objects.pop(object_key, None) is not None


class GeminiClientStub:
    def __init__(self, reply: str = "") -> None:
        self.reply = reply
        self.error: Optional[Exception] = None
        self.text_calls: list[tuple[str, str]] = []
        self.image_calls: list[tuple[bytes, str, str]] = []

    def generate_content(self, user_prompt: str, system_prompt_file: str) -> str:
        self.text_calls.append((user_prompt, system_prompt_file))
        if self.error:
            raise self.error
        return self.reply

    def generate_from_image(
        self,
        image_bytes: bytes,
        mime_type: str,
        user_prompt: str,
        system_prompt_file: str,
    ) -> str:
        self.image_calls.append((image_bytes, mime_type, system_prompt_file))
        if self.error:
            raise self.error
        return self.reply


@pytest.fixture
def repository() -> InMemoryRecipeRepository:
    return InMemoryRecipeRepository()


@pytest.fixture
def storage() -> StorageProviderStub:
    return StorageProviderStub()


@pytest.fixture
def gemini() -> GeminiClientStub:
    return GeminiClientStub()

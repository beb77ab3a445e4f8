from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, status
from pydantic import BaseModel
from supabase import Client, create_client

from recipebox.app.config import settings
from recipebox.app.domain.errors import StorageError
from recipebox.app.infra.db.base import RecipeRepository
from recipebox.app.infra.db.supabase_recipes_repo import SupabaseRecipeRepository
from recipebox.app.infra.storage.base import StorageProvider
from recipebox.app.infra.storage.r2_provider import R2StorageProvider
from recipebox.app.services.recipe_service import RecipeService
from recipebox.services.errors import GeminiConfigurationError
from recipebox.services.extractor import RecipeExtractor
from recipebox.services.gemini_client import GeminiClient
from recipebox.services.ingest import RecipeImportPipeline

logger = logging.getLogger(__name__)

_client: Client | None = None
_storage: StorageProvider | None = None


def get_supabase() -> Client:
    global _client
    if _client is None:
        _client = create_client(str(settings.SUPABASE_URL), settings.SUPABASE_SERVICE_ROLE_KEY)
    return _client


class CurrentUser(BaseModel):
    id: str


async def get_current_user() -> CurrentUser:
    """The deployment is single-tenant; the owner identity comes from config."""
    return CurrentUser(id=settings.OWNER_USER_ID)


def get_storage() -> StorageProvider:
    global _storage
    if _storage is None:
        try:
            _storage = R2StorageProvider(
                account_id=settings.R2_ACCOUNT_ID,
                access_key_id=settings.R2_ACCESS_KEY_ID,
                secret_access_key=settings.R2_SECRET_ACCESS_KEY,
                bucket_name=settings.R2_BUCKET_NAME,
                public_url=settings.R2_PUBLIC_URL,
            )
        except StorageError as e:
            logger.error("Failed to initialize storage: %s", e)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Storage service unavailable",
            )
    return _storage


def get_recipe_repository(supa: Client = Depends(get_supabase)) -> RecipeRepository:
    return SupabaseRecipeRepository(supa)


def get_recipe_service(
    repository: RecipeRepository = Depends(get_recipe_repository),
    storage: StorageProvider = Depends(get_storage),
) -> RecipeService:
    return RecipeService(repository, storage)


def get_import_pipeline(storage: StorageProvider = Depends(get_storage)) -> RecipeImportPipeline:
    try:
        client = GeminiClient(
            api_key=settings.GEMINI_API_KEY,
            model_name=settings.GEMINI_MODEL,
            max_output_tokens=settings.GEMINI_MAX_OUTPUT_TOKENS,
        )
    except GeminiConfigurationError as e:
        logger.error("AI client unavailable: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="AI service unavailable",
        )

    return RecipeImportPipeline(
        RecipeExtractor(client),
        storage,
        user_agent=settings.IMPORT_USER_AGENT,
        timeout=settings.IMPORT_TIMEOUT_SECONDS,
    )

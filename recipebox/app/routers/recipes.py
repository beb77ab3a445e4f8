from __future__ import annotations

import logging
from typing import Callable, TypeVar

from fastapi import APIRouter, Depends, HTTPException, status
from starlette.concurrency import run_in_threadpool

from recipebox.app.deps import CurrentUser, get_current_user, get_recipe_service
from recipebox.app.domain.categories import CATEGORIES
from recipebox.app.domain.errors import (
    RecipeNotFoundError,
    RecipeRepositoryError,
    RecipeValidationError,
    StorageError,
)
from recipebox.app.schemas.recipes import (
    BackfillResponse,
    RecipeCreatedResponse,
    RecipeListResponse,
    RecipeRequest,
    RecipeResponse,
    RecipeUpdatedResponse,
    UploadUrlRequest,
    UploadUrlResponse,
)
from recipebox.app.services.recipe_service import RecipeService

log = logging.getLogger("recipes")
router = APIRouter(prefix="/recipes", tags=["recipes"])

T = TypeVar("T")


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recipe not found")


async def _call(func: Callable[..., T], *args) -> T:
    """Run a blocking service call; an unreachable recipe store is a 503."""
    try:
        return await run_in_threadpool(func, *args)
    except RecipeRepositoryError as exc:
        log.error("recipes.store_fail op=%s error=%s", exc.operation, exc.reason)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"kind": exc.kind, "message": "Recipe store unavailable"},
        ) from exc


def _invalid(exc: RecipeValidationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={"kind": exc.kind, "message": str(exc), "fields": exc.fields},
    )


@router.get("", response_model=RecipeListResponse)
async def list_recipes(
    user: CurrentUser = Depends(get_current_user),
    service: RecipeService = Depends(get_recipe_service),
) -> RecipeListResponse:
    recipes = await _call(service.list_recipes, user.id)
    return RecipeListResponse(items=[RecipeResponse.from_recipe(recipe) for recipe in recipes])


@router.get("/categories", response_model=list[str])
async def list_categories() -> list[str]:
    return list(CATEGORIES)


@router.get("/by-slug/{slug}", response_model=RecipeResponse)
async def get_recipe_by_slug(
    slug: str,
    user: CurrentUser = Depends(get_current_user),
    service: RecipeService = Depends(get_recipe_service),
) -> RecipeResponse:
    recipe = await _call(service.get_recipe_by_slug, slug, user.id)
    if recipe is None:
        raise _not_found()
    return RecipeResponse.from_recipe(recipe)


@router.post("/upload-url", response_model=UploadUrlResponse)
async def generate_upload_url(
    body: UploadUrlRequest,
    user: CurrentUser = Depends(get_current_user),
    service: RecipeService = Depends(get_recipe_service),
) -> UploadUrlResponse:
    if not body.contentType.startswith("image/"):
        raise HTTPException(status_code=400, detail="Only image uploads are allowed")
    try:
        upload = await _call(service.generate_upload_url, user.id, body.contentType)
    except StorageError as exc:
        log.error("upload_url.fail owner=%s error=%s", user.id, exc)
        raise HTTPException(status_code=503, detail="Storage service unavailable") from exc
    return UploadUrlResponse(objectKey=upload.object_key, uploadUrl=upload.upload_url, expiresAt=upload.expires_at)


@router.post("/backfill-slugs", response_model=BackfillResponse)
async def backfill_slugs(
    service: RecipeService = Depends(get_recipe_service),
) -> BackfillResponse:
    count = await _call(service.backfill_slugs)
    return BackfillResponse(backfilled=count)


@router.get("/{recipe_id}", response_model=RecipeResponse)
async def get_recipe(
    recipe_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: RecipeService = Depends(get_recipe_service),
) -> RecipeResponse:
    recipe = await _call(service.get_recipe, recipe_id, user.id)
    if recipe is None:
        raise _not_found()
    return RecipeResponse.from_recipe(recipe)


@router.post("", response_model=RecipeCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_recipe(
    body: RecipeRequest,
    user: CurrentUser = Depends(get_current_user),
    service: RecipeService = Depends(get_recipe_service),
) -> RecipeCreatedResponse:
    try:
        recipe_id, slug = await _call(service.create_recipe, user.id, body.to_input())
    except RecipeValidationError as exc:
        raise _invalid(exc) from exc
    return RecipeCreatedResponse(id=recipe_id, slug=slug)


@router.put("/{recipe_id}", response_model=RecipeUpdatedResponse)
async def update_recipe(
    recipe_id: str,
    body: RecipeRequest,
    user: CurrentUser = Depends(get_current_user),
    service: RecipeService = Depends(get_recipe_service),
) -> RecipeUpdatedResponse:
    try:
        slug = await _call(service.update_recipe, recipe_id, user.id, body.to_input())
    except RecipeNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except RecipeValidationError as exc:
        raise _invalid(exc) from exc
    return RecipeUpdatedResponse(slug=slug)


@router.delete("/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_recipe(
    recipe_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: RecipeService = Depends(get_recipe_service),
) -> None:
    try:
        await _call(service.delete_recipe, recipe_id, user.id)
    except RecipeNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

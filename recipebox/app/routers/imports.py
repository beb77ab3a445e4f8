from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends, HTTPException
from starlette.concurrency import run_in_threadpool

from recipebox.app.deps import CurrentUser, get_current_user, get_import_pipeline
from recipebox.app.schemas.imports import ImportPhotoRequest, ImportUrlRequest, RecipeDraftResponse
from recipebox.services.errors import (
    AiCallError,
    FetchError,
    NoRecipeFoundError,
    PhotoUnavailableError,
    RateLimitedError,
    ServiceError,
    UnparseableAiResponseError,
)
from recipebox.services.ingest import RecipeImportPipeline

log = logging.getLogger("imports")
router = APIRouter(prefix="/imports", tags=["imports"])

# Most specific first
_STATUS_BY_ERROR: tuple[tuple[type[ServiceError], int], ...] = (
    (RateLimitedError, 429),
    (NoRecipeFoundError, 422),
    (PhotoUnavailableError, 404),
    (FetchError, 502),
    (UnparseableAiResponseError, 502),
    (AiCallError, 502),
)


def _to_http_error(exc: ServiceError) -> HTTPException:
    status_code = next(
        (code for error_type, code in _STATUS_BY_ERROR if isinstance(exc, error_type)),
        500,
    )
    return HTTPException(status_code=status_code, detail={"kind": exc.kind, "message": str(exc)})


@router.post("/url", response_model=RecipeDraftResponse)
async def import_from_url(
    body: ImportUrlRequest,
    user: CurrentUser = Depends(get_current_user),
    pipeline: RecipeImportPipeline = Depends(get_import_pipeline),
) -> RecipeDraftResponse:
    t0 = time.time()
    log.info("import.start url=%s owner=%s", body.url, user.id)
    try:
        draft = await run_in_threadpool(pipeline.import_from_url, body.url, user.id)
    except ServiceError as exc:
        log.warning("import.fail url=%s kind=%s dt=%.2fs", body.url, exc.kind, time.time() - t0)
        raise _to_http_error(exc) from exc

    log.info("import.ok url=%s image=%s dt=%.2fs", body.url, bool(draft.image_ref), time.time() - t0)
    return RecipeDraftResponse.from_draft(draft)


@router.post("/photo", response_model=RecipeDraftResponse)
async def import_from_photo(
    body: ImportPhotoRequest,
    user: CurrentUser = Depends(get_current_user),
    pipeline: RecipeImportPipeline = Depends(get_import_pipeline),
) -> RecipeDraftResponse:
    t0 = time.time()
    log.info("import.start photo=%s owner=%s", body.imageRef, user.id)
    try:
        draft = await run_in_threadpool(pipeline.import_from_photo, body.imageRef, user.id)
    except ServiceError as exc:
        log.warning("import.fail photo=%s kind=%s dt=%.2fs", body.imageRef, exc.kind, time.time() - t0)
        raise _to_http_error(exc) from exc

    log.info("import.ok photo=%s dt=%.2fs", body.imageRef, time.time() - t0)
    return RecipeDraftResponse.from_draft(draft)

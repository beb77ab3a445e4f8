from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import Optional
from urllib.parse import urlparse

import httpx

from recipebox.app.domain.errors import StorageError
from recipebox.app.domain.models import ImportStage, RecipeDraft
from recipebox.app.infra.storage.base import StorageProvider
from recipebox.services.errors import (
    NoRecipeFoundError,
    PhotoUnavailableError,
    ServiceError,
    UnparseableAiResponseError,
)
from recipebox.services.extractor import RecipeExtractor, format_source_link
from recipebox.services.fetcher import (
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    fetch_image,
    fetch_page,
)
from recipebox.services.html_cleaner import html_to_text
from recipebox.services.image_locator import locate_image
from recipebox.services.types import (
    ExtractionEmpty,
    ExtractionMalformed,
    ExtractionResult,
    FetchedImage,
    RecipeFields,
)

logger = logging.getLogger(__name__)

DEFAULT_PHOTO_MIME_TYPE = "image/jpeg"


def _unwrap(result: ExtractionResult) -> RecipeFields:
    if isinstance(result, ExtractionEmpty):
        raise NoRecipeFoundError(result.reason)
    if isinstance(result, ExtractionMalformed):
        raise UnparseableAiResponseError(result.raw_text)
    return result.fields


def _image_filename(image_url: str) -> str:
    name = PurePosixPath(urlparse(image_url).path).name
    return name or "image"


class RecipeImportPipeline:
    """
    Turns a web page or an uploaded photo into a RecipeDraft.

    Every external call is attempted once. Image problems degrade to a
    draft without an image; every other failure propagates to the caller.
    """

    def __init__(
        self,
        extractor: RecipeExtractor,
        storage: StorageProvider,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._extractor = extractor
        self._storage = storage
        self._user_agent = user_agent
        self._timeout = timeout
        self._transport = transport

    def _enter(self, stage: ImportStage, target: str) -> None:
        logger.info("Import %s: %s", stage.value, target)

    def import_from_url(self, url: str, user_id: str) -> RecipeDraft:
        try:
            return self._import_from_url(url, user_id)
        except ServiceError as error:
            logger.error("Import %s for %s (%s): %s", ImportStage.FAILED.value, url, error.kind, error)
            raise

    def _import_from_url(self, url: str, user_id: str) -> RecipeDraft:
        self._enter(ImportStage.FETCHING, url)
        raw_html = fetch_page(
            url,
            user_agent=self._user_agent,
            timeout=self._timeout,
            transport=self._transport,
        )

        self._enter(ImportStage.LOCATING_IMAGE, url)
        image_url = locate_image(raw_html, url)

        self._enter(ImportStage.SANITIZING, url)
        page_text = html_to_text(raw_html)

        image_ref = None
        if image_url:
            self._enter(ImportStage.IMAGE_PERSISTING, image_url)
            image_ref = self._persist_remote_image(image_url, user_id)

        self._enter(ImportStage.EXTRACTING, url)
        fields = _unwrap(self._extractor.extract_from_text(page_text))

        self._enter(ImportStage.DONE, url)
        return RecipeDraft(
            name=fields.name,
            source=format_source_link(url, fields.source),
            description=fields.description,
            ingredients=fields.ingredients,
            instructions=fields.instructions,
            image_ref=image_ref,
            image_url=image_url,
        )

    def _persist_remote_image(self, image_url: str, user_id: str) -> Optional[str]:
        image: Optional[FetchedImage] = fetch_image(
            image_url,
            user_agent=self._user_agent,
            timeout=self._timeout,
            transport=self._transport,
        )
        if image is None:
            return None

        object_key = self._storage.generate_object_key(
            user_id,
            _image_filename(image_url),
            content_type=image.content_type,
        )
        try:
            return self._storage.store(image.data, image.content_type, object_key)
        except StorageError as error:
            logger.warning("Continuing without image, storing %s failed: %s", image_url, error)
            return None

    def import_from_photo(self, image_ref: str, user_id: str) -> RecipeDraft:
        try:
            return self._import_from_photo(image_ref, user_id)
        except ServiceError as error:
            logger.error("Import %s for photo %s (%s): %s", ImportStage.FAILED.value, image_ref, error.kind, error)
            raise

    def _import_from_photo(self, image_ref: str, user_id: str) -> RecipeDraft:
        # object keys embed their owner
        if not image_ref.startswith(f"users/{user_id}/"):
            raise PhotoUnavailableError(image_ref, "photo not found or access denied")

        self._enter(ImportStage.FETCHING, image_ref)
        try:
            photo = self._storage.get_bytes(image_ref)
        except StorageError as error:
            raise PhotoUnavailableError(image_ref, str(error)) from error

        mime_type = photo.content_type if photo.content_type.startswith("image/") else DEFAULT_PHOTO_MIME_TYPE

        self._enter(ImportStage.EXTRACTING, image_ref)
        fields = _unwrap(self._extractor.extract_from_image(photo.data, mime_type))

        self._enter(ImportStage.DONE, image_ref)
        return RecipeDraft(
            name=fields.name,
            source=fields.source,
            description=fields.description,
            ingredients=fields.ingredients,
            instructions=fields.instructions,
            image_ref=image_ref,
            image_url=self._storage.get_url(image_ref),
        )

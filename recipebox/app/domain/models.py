"""
Domain models for recipes and import drafts.
These are pure data structures with no infrastructure dependencies.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class ImportStage(str, Enum):
    """Stages an import walks through before it is done or failed."""
    FETCHING = "FETCHING"
    SANITIZING = "SANITIZING"
    LOCATING_IMAGE = "LOCATING_IMAGE"
    IMAGE_PERSISTING = "IMAGE_PERSISTING"
    EXTRACTING = "EXTRACTING"
    DONE = "DONE"
    FAILED = "FAILED"


@dataclass
class RecipeDraft:
    """
    Unsaved recipe fields produced by an import.
    Never stored directly; the caller copies it into a create request.
    """
    name: str
    source: str
    description: str
    ingredients: str
    instructions: str
    image_ref: Optional[str] = None
    image_url: Optional[str] = None


@dataclass
class Recipe:
    """A persisted recipe owned by a single user."""
    id: str
    user_id: str
    name: str
    description: str
    ingredients: str
    instructions: str
    slug: Optional[str] = None
    source: Optional[str] = None
    category: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    image_ref: Optional[str] = None
    created_at: Optional[datetime] = None

    # Resolved at read time, never persisted
    image_url: Optional[str] = None

    @property
    def public_slug(self) -> str:
        """Slug used for links; records not yet backfilled fall back to their id."""
        return self.slug or self.id

    def is_owned_by(self, user_id: str) -> bool:
        return self.user_id == user_id


@dataclass
class StoredBlob:
    """Bytes read back from blob storage."""
    data: bytes
    content_type: str


@dataclass
class SignedUpload:
    """Pre-signed direct-upload target handed to the upload UI."""
    object_key: str
    upload_url: str
    expires_at: datetime


@dataclass
class RecipeInput:
    """Fields a user submits when creating or editing a recipe."""
    name: str
    description: str
    ingredients: str
    instructions: str
    source: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[list[str]] = None
    image_ref: Optional[str] = None
    # an edit that omits the image leaves the stored one in place
    keep_image: bool = False

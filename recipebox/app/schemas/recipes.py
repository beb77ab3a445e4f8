from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from recipebox.app.domain.models import Recipe, RecipeInput


class RecipeRequest(BaseModel):
    name: str
    description: str
    ingredients: str
    instructions: str
    source: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[list[str]] = None
    imageRef: Optional[str] = None

    def to_input(self) -> RecipeInput:
        return RecipeInput(
            name=self.name,
            description=self.description,
            ingredients=self.ingredients,
            instructions=self.instructions,
            source=self.source,
            category=self.category,
            tags=self.tags,
            image_ref=self.imageRef,
            keep_image="imageRef" not in self.model_fields_set,
        )


class RecipeResponse(BaseModel):
    id: str
    slug: str
    name: str
    source: Optional[str] = None
    description: str
    ingredients: str
    instructions: str
    category: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    imageRef: Optional[str] = None
    imageUrl: Optional[str] = None
    userId: str
    createdAt: Optional[datetime] = None

    @classmethod
    def from_recipe(cls, recipe: Recipe) -> "RecipeResponse":
        return cls(
            id=recipe.id,
            slug=recipe.public_slug,
            name=recipe.name,
            source=recipe.source,
            description=recipe.description,
            ingredients=recipe.ingredients,
            instructions=recipe.instructions,
            category=recipe.category,
            tags=recipe.tags,
            imageRef=recipe.image_ref,
            imageUrl=recipe.image_url,
            userId=recipe.user_id,
            createdAt=recipe.created_at,
        )


class RecipeListResponse(BaseModel):
    items: list[RecipeResponse]


class RecipeCreatedResponse(BaseModel):
    id: str
    slug: str


class RecipeUpdatedResponse(BaseModel):
    slug: str


class UploadUrlRequest(BaseModel):
    contentType: str = "image/jpeg"


class UploadUrlResponse(BaseModel):
    objectKey: str
    uploadUrl: str
    expiresAt: datetime


class BackfillResponse(BaseModel):
    backfilled: int

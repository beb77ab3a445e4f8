from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from recipebox.app.domain.models import RecipeDraft


class ImportUrlRequest(BaseModel):
    url: str = Field(..., min_length=1)


class ImportPhotoRequest(BaseModel):
    imageRef: str = Field(..., min_length=1)


class RecipeDraftResponse(BaseModel):
    name: str
    source: str
    description: str
    ingredients: str
    instructions: str
    imageRef: Optional[str] = None
    imageUrl: Optional[str] = None

    @classmethod
    def from_draft(cls, draft: RecipeDraft) -> "RecipeDraftResponse":
        return cls(
            name=draft.name,
            source=draft.source,
            description=draft.description,
            ingredients=draft.ingredients,
            instructions=draft.instructions,
            imageRef=draft.image_ref,
            imageUrl=draft.image_url,
        )

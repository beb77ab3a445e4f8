from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


@dataclass
class FetchedImage:
    url: str
    data: bytes
    content_type: str


@dataclass
class RecipeFields:
    name: str
    source: str
    description: str
    ingredients: str
    instructions: str


@dataclass
class ExtractionSuccess:
    fields: RecipeFields


@dataclass
class ExtractionEmpty:
    reason: str


@dataclass
class ExtractionMalformed:
    raw_text: str
    error: Optional[str] = None


ExtractionResult = Union[ExtractionSuccess, ExtractionEmpty, ExtractionMalformed]

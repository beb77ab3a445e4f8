"""Canonical recipe categories: single-select, broad meal or course type."""
from __future__ import annotations

from typing import Optional

CATEGORIES = (
    "Breakfast",
    "Lunch",
    "Dinner",
    "Appetizer",
    "Side Dish",
    "Dessert",
    "Snack",
    "Beverage",
    "Bread",
    "Sauce & Condiment",
    "Soup & Stew",
    "Salad",
)

_BY_LOWER = {category.lower(): category for category in CATEGORIES}


def normalize_category(value: Optional[str]) -> Optional[str]:
    """Canonical spelling of a category, None for blank, ValueError if unknown."""
    if value is None or not value.strip():
        return None
    category = _BY_LOWER.get(value.strip().lower())
    if category is None:
        raise ValueError(f"Unknown category: {value}")
    return category

"""
Abstract base class for the recipe store.
This interface allows easy swapping between different document stores.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

from recipebox.app.domain.models import Recipe


class RecipeRepository(ABC):
    """
    Abstract interface for recipe persistence.

    Lookups must be strongly consistent with the caller's own preceding
    writes, otherwise slug uniqueness cannot hold.

    Implementations:
    - SupabaseRecipeRepository: Postgres table through Supabase
    """

    @abstractmethod
    def insert(self, data: dict[str, Any]) -> str:
        """
        Insert a new recipe record.

        Args:
            data: Column values, including user_id and slug

        Returns:
            The id assigned to the new record
        """
        pass

    @abstractmethod
    def patch(self, recipe_id: str, data: dict[str, Any]) -> None:
        """
        Update the given columns of an existing record.

        Args:
            recipe_id: The record to update
            data: Columns to overwrite
        """
        pass

    @abstractmethod
    def delete(self, recipe_id: str) -> None:
        """Delete a record by id."""
        pass

    @abstractmethod
    def get(self, recipe_id: str) -> Optional[Recipe]:
        """Point lookup by id; None when absent."""
        pass

    @abstractmethod
    def find_by_slug(self, slug: str) -> Optional[Recipe]:
        """Indexed lookup by slug across all users; None when unused."""
        pass

    @abstractmethod
    def list_by_user(self, user_id: str, descending: bool = True) -> list[Recipe]:
        """
        All recipes owned by a user.

        Args:
            user_id: The owner
            descending: Newest first when True, insertion order otherwise
        """
        pass

    @abstractmethod
    def list_all(self) -> list[Recipe]:
        """Every recipe in insertion order, for maintenance tasks."""
        pass

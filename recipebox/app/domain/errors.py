from __future__ import annotations


class RecipeBoxError(Exception):
    kind = "recipebox_error"


class RecipeNotFoundError(RecipeBoxError):
    kind = "not_found_or_forbidden"

    def __init__(self, recipe_id: str, message: str = "Recipe not found or access denied"):
        super().__init__(message)
        self.recipe_id = recipe_id


class RecipeValidationError(RecipeBoxError):
    kind = "validation_error"

    def __init__(self, fields: list[str], message: str | None = None):
        super().__init__(message or f"Required fields are empty: {', '.join(fields)}")
        self.fields = fields


class StorageError(RecipeBoxError):
    kind = "storage_error"


class StorageDownloadError(StorageError):
    def __init__(self, object_key: str, reason: str = "Download failed"):
        super().__init__(f"Failed to download {object_key}: {reason}")
        self.object_key = object_key
        self.reason = reason


class RecipeRepositoryError(RecipeBoxError):
    kind = "repository_error"

    def __init__(self, operation: str, reason: str):
        super().__init__(f"Recipe repository error during {operation}: {reason}")
        self.operation = operation
        self.reason = reason

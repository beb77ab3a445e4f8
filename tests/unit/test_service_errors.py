from __future__ import annotations

from recipebox.services.errors import (
    AiCallError,
    FetchError,
    GeminiConfigurationError,
    GeminiPromptError,
    NoRecipeFoundError,
    PhotoUnavailableError,
    RateLimitedError,
    ServiceError,
    UnparseableAiResponseError,
)


class TestFetchError:
    def test_keeps_url_and_reason(self) -> None:
        error = FetchError("https://example.com/chili", "Failed to fetch URL: 404 Not Found")

        assert str(error) == "Could not fetch the recipe URL: Failed to fetch URL: 404 Not Found"
        assert error.url == "https://example.com/chili"
        assert error.reason.endswith("Not Found")
        assert error.kind == "fetch_error"


class TestNoRecipeFoundError:
    def test_default_message(self) -> None:
        assert str(NoRecipeFoundError()) == "No recipe found on this page"

    def test_model_reason_is_kept(self) -> None:
        assert str(NoRecipeFoundError("No recipe found in this photo")) == "No recipe found in this photo"


class TestUnparseableAiResponseError:
    def test_keeps_raw_text(self) -> None:
        error = UnparseableAiResponseError("not json")

        assert error.raw_text == "not json"
        assert "parse the AI response" in str(error)


class TestRateLimitedError:
    def test_is_an_ai_call_error(self) -> None:
        error = RateLimitedError("Too many requests")

        assert isinstance(error, AiCallError)
        assert error.kind == "rate_limited"


class TestPhotoUnavailableError:
    def test_keeps_reference(self) -> None:
        error = PhotoUnavailableError("users/u/uploads/a.jpg", "Object not found")

        assert error.image_ref == "users/u/uploads/a.jpg"
        assert "Object not found" in str(error)


class TestExceptionHierarchy:
    def test_all_errors_inherit_from_service_error(self) -> None:
        for error_type in (
            FetchError,
            NoRecipeFoundError,
            UnparseableAiResponseError,
            AiCallError,
            RateLimitedError,
            GeminiConfigurationError,
            GeminiPromptError,
            PhotoUnavailableError,
        ):
            assert issubclass(error_type, ServiceError)

    def test_kinds_are_distinct(self) -> None:
        kinds = {
            FetchError.kind,
            NoRecipeFoundError.kind,
            UnparseableAiResponseError.kind,
            AiCallError.kind,
            RateLimitedError.kind,
            PhotoUnavailableError.kind,
        }

        assert len(kinds) == 6

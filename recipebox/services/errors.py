class ServiceError(Exception):
    kind = "service_error"


class FetchError(ServiceError):
    kind = "fetch_error"

    def __init__(self, url: str, reason: str):
        super().__init__(f"Could not fetch the recipe URL: {reason}")
        self.url = url
        self.reason = reason


class NoRecipeFoundError(ServiceError):
    kind = "no_recipe_found"

    def __init__(self, message: str = "No recipe found on this page"):
        super().__init__(message)


class UnparseableAiResponseError(ServiceError):
    kind = "ai_response_unparseable"

    def __init__(self, raw_text: str):
        super().__init__("Failed to parse the AI response. Please try again.")
        self.raw_text = raw_text


class AiCallError(ServiceError):
    kind = "ai_call_error"


class RateLimitedError(AiCallError):
    kind = "rate_limited"


class GeminiConfigurationError(ServiceError):
    kind = "ai_configuration_error"


class GeminiPromptError(ServiceError):
    kind = "ai_prompt_error"


class PhotoUnavailableError(ServiceError):
    kind = "photo_unavailable"

    def __init__(self, image_ref: str, reason: str):
        super().__init__(f"Could not read the uploaded photo: {reason}")
        self.image_ref = image_ref
        self.reason = reason

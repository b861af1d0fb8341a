"""
Error types for recommendation generation
Each error carries the message shown to the user and the HTTP status it maps to
"""


class RecommendationError(Exception):
    """Base error for the recommendation pipeline"""
    status_code = 500
    default_message = "Failed to generate recommendations"

    def __init__(self, message=None, status_code=None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class MissingUserIdError(RecommendationError):
    status_code = 400
    default_message = "User ID is required"


class ConfigurationError(RecommendationError):
    default_message = "ANTHROPIC_API_KEY is not configured"


class ProfileFetchError(RecommendationError):
    default_message = "Failed to fetch user profile"


class RateLimitedError(RecommendationError):
    status_code = 429
    default_message = "Rate limit exceeded. Please try again in a moment."


class QuotaExhaustedError(RecommendationError):
    status_code = 402
    default_message = "AI credits depleted. Please add credits to continue."


class InvalidResponseError(RecommendationError):
    default_message = "Invalid AI response format"


class UpstreamError(RecommendationError):
    default_message = "Failed to generate recommendations"

"""
Error taxonomy shared by the orchestrators, the repository and the HTTP layer.

Each error carries the status code it maps to and a public message. The
handlers registered in app.main turn them into `{"error": message}` bodies;
the underlying cause is only ever logged server-side.
"""
from typing import Any, Optional


class MealPlannerError(Exception):
    status_code: int = 500
    public_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, *, detail: Any = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message
        self.detail = detail


class ValidationError(MealPlannerError):
    status_code = 400
    public_message = "Validation failed"


class AuthError(MealPlannerError):
    status_code = 401
    public_message = "Unauthorized"


class NotFoundError(MealPlannerError):
    # Also raised for rows owned by someone else, so existence never leaks
    status_code = 404
    public_message = "Meal plan not found"


class ConflictError(MealPlannerError):
    status_code = 409
    public_message = "Shopping list already exists for this plan"


class EmptyPlanError(MealPlannerError):
    status_code = 400
    public_message = "No meals found for this plan"


class UpstreamError(MealPlannerError):
    """The AI endpoint failed or returned something unusable."""
    status_code = 500
    public_message = "AI service failed. Please try again later."


class GenerationError(UpstreamError):
    public_message = "Failed to generate meal plan. Please try again later."


class UpstreamSchemaError(UpstreamError):
    public_message = "AI service returned an invalid response. Please try again later."


class PersistenceError(MealPlannerError):
    status_code = 500
    public_message = "Failed to save data. Please try again later."

"""
Domain errors for Storybook Studio.

Every error carries a short machine-readable ``code`` that the reader app
maps to a user-facing notification, and the HTTP status the API answers
with. Vendor failures are translated into these at each call site.
"""

from typing import Optional


class StorybookError(Exception):
    """Base class for errors surfaced to API clients."""

    code = "INTERNAL_ERROR"
    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class InvalidRequestError(StorybookError):
    code = "INVALID_REQUEST"
    status_code = 400
    default_message = "Invalid request"


class PaymentRequiredError(StorybookError):
    code = "PAYMENT_REQUIRED"
    status_code = 402
    default_message = "AI provider credits are exhausted"


class RateLimitError(StorybookError):
    code = "RATE_LIMIT"
    status_code = 429
    default_message = "Too many requests, please try again later"


class ImageTooLargeError(StorybookError):
    code = "IMAGE_TOO_LARGE"
    status_code = 413
    default_message = "Image size must be less than 8MB"


class InvalidImageError(StorybookError):
    code = "INVALID_IMAGE"
    status_code = 400
    default_message = "Invalid image format"


class MissingBackgroundsError(StorybookError):
    code = "MISSING_BACKGROUNDS"
    status_code = 502
    default_message = "No page illustrations could be generated"


class InvalidStoryError(StorybookError):
    code = "INVALID_STORY"
    status_code = 502
    default_message = "Invalid story format from AI response"


class VendorAuthError(StorybookError):
    code = "VENDOR_AUTH"
    status_code = 502
    default_message = "AI provider rejected the API key"


class VendorError(StorybookError):
    code = "VENDOR_ERROR"
    status_code = 502
    default_message = "AI provider request failed"


class ServiceNotConfiguredError(StorybookError):
    code = "SERVICE_NOT_CONFIGURED"
    status_code = 503
    default_message = "Service not configured"


class TaskNotFoundError(StorybookError):
    code = "TASK_NOT_FOUND"
    status_code = 404
    default_message = "Task not found"


class CreditsExhaustedError(StorybookError):
    code = "CREDITS_EXHAUSTED"
    status_code = 402
    default_message = "No story credits left this month"


class ChildLimitReachedError(StorybookError):
    code = "CHILD_LIMIT_REACHED"
    status_code = 403
    default_message = "Child profile limit reached for your plan"


def vendor_status_code(exc: BaseException) -> Optional[int]:
    """Best-effort HTTP status of a vendor SDK exception.

    litellm (behind DSPy) exposes ``status_code``, google-genai exposes
    ``code``, and httpx-based SDKs keep the status on ``response``.
    """
    for attr in ("status_code", "code", "status"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    response = getattr(exc, "response", None)
    value = getattr(response, "status_code", None)
    if isinstance(value, int):
        return value
    return None


def translate_vendor_error(exc: BaseException, vendor: str) -> StorybookError:
    """Map a vendor exception to the matching StorybookError."""
    if isinstance(exc, StorybookError):
        return exc

    status = vendor_status_code(exc)
    if status == 402:
        return PaymentRequiredError(f"{vendor} credits are exhausted")
    if status == 429:
        return RateLimitError(f"{vendor} rate limit exceeded")
    if status in (401, 403):
        return VendorAuthError(f"{vendor} API key is invalid or missing")
    return VendorError(f"{vendor} request failed: {exc}")

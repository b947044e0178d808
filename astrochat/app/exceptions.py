"""Custom exceptions for the AstroChat backend."""

LIMIT_RESET_MESSAGE = (
    "Your daily limit of questions has been reached. Your limit will reset tomorrow."
)


class AstroChatException(Exception):
    """Base class for application exceptions with HTTP status code.

    All custom exceptions inherit from this class and define their
    status_code for consistent HTTP response handling.
    """
    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(self, message: str = "AstroChat error"):
        self.message = message
        super().__init__(message)


class IdentityValidationError(AstroChatException):
    """Raised when the first name or date of birth is missing.

    Raised before any storage access. Maps to HTTP 400 Bad Request.
    """
    status_code = 400
    error_code = "validation_error"

    def __init__(self, message: str = "User first name and date of birth are required."):
        super().__init__(message)


class StorageUnavailableError(AstroChatException):
    """Raised when the quota store cannot be reached (network, timeout).

    The message shown to clients never includes the driver error; the
    original exception is chained for the server logs.
    Maps to HTTP 503 Service Unavailable.
    """
    status_code = 503
    error_code = "tracking_unavailable"

    def __init__(self, message: str = "Question tracking is temporarily unavailable."):
        super().__init__(message)


class StorageConflictError(AstroChatException):
    """Raised when a versioned write loses a race with another request.

    The tracker retries internally; this only reaches callers once the
    retries are exhausted. Maps to HTTP 409 Conflict.
    """
    status_code = 409
    error_code = "tracking_conflict"

    def __init__(self, user_key: str | None = None, attempts: int | None = None):
        self.user_key = user_key
        self.attempts = attempts
        message = "Concurrent update to question counter"
        if attempts:
            message += f" after {attempts} attempts"
        super().__init__(message)


class DailyLimitExceededError(AstroChatException):
    """Raised by the HTTP layer when a question is denied by the quota.

    Maps to HTTP 429 Too Many Requests.
    """
    status_code = 429
    error_code = "daily_limit_exceeded"

    def __init__(self, daily_limit: int, questions_used: int, detail: str | None = None):
        self.daily_limit = daily_limit
        self.questions_used = questions_used
        self.reset_message = LIMIT_RESET_MESSAGE
        super().__init__(detail or "Daily question limit exceeded")

    def to_response(self) -> dict:
        return {
            "error": self.error_code,
            "message": self.message,
            "limit_exceeded": True,
            "daily_limit": self.daily_limit,
            "questions_used": self.questions_used,
            "reset_message": self.reset_message,
        }


class GenerationError(AstroChatException):
    """Raised when the language model provider fails or returns no text.

    Maps to HTTP 502 Bad Gateway.
    """
    status_code = 502
    error_code = "generation_failed"

    def __init__(self, message: str = "Language model request failed", provider: str | None = None):
        self.provider = provider
        super().__init__(message)

"""Custom exception classes."""

from fastapi import HTTPException, status


class SmartNotesException(Exception):
    """Base exception for Smart Notes application."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str = "Internal server error"):
        self.detail = detail
        super().__init__(detail)

    def to_http_exception(self) -> HTTPException:
        """Convert to FastAPI HTTPException."""
        return HTTPException(status_code=self.status_code, detail=self.detail)


class AuthError(SmartNotesException):
    """Raised when authentication fails."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(detail)

    def to_http_exception(self) -> HTTPException:
        """Convert to FastAPI HTTPException."""
        return HTTPException(
            status_code=self.status_code,
            detail=self.detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ValidationError(SmartNotesException):
    """Raised when a required field is missing or malformed."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str = "Invalid request"):
        super().__init__(detail)


class NotFoundError(SmartNotesException):
    """Raised when a resource is not found or not owned by the caller."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str = "Resource", detail: str | None = None):
        super().__init__(detail or f"{resource} not found")


class ProviderError(SmartNotesException):
    """Raised when an LLM or embedding call fails or returns unusable output."""

    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, detail: str = "AI provider request failed"):
        super().__init__(detail)


class NoAnswerError(ProviderError):
    """Raised when the provider responds without an answer."""

    def __init__(self, detail: str = "No response from AI"):
        super().__init__(detail)


class RateLimitExceeded(ProviderError):
    """Raised when the provider keeps answering 429 after all retries."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS

    def __init__(
        self,
        detail: str = "The AI assistant is busy right now. Please try again in a minute.",
    ):
        super().__init__(detail)


class PersistenceError(SmartNotesException):
    """Raised when a database read or write fails."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str = "Database operation failed"):
        super().__init__(detail)

"""
Domain exceptions for translation business rules.

These exceptions are framework-independent and represent business rule violations.
They are converted to HTTP responses at the API layer via exception handlers.
"""


class DomainException(Exception):
    """Base exception for all domain/business logic errors."""

    def __init__(self, message: str, error_code: str):
        super().__init__(message)
        self.message = message
        self.error_code = error_code


# ============================================================================
# Authentication & Authorization Exceptions
# ============================================================================


class UnauthorizedException(DomainException):
    """Client is not authenticated or the API key is invalid."""

    def __init__(self, message: str = "API key required"):
        super().__init__(message=message, error_code="UNAUTHORIZED")


class ForbiddenException(DomainException):
    """Client is not allowed to perform this action."""

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message=message, error_code="FORBIDDEN")


# ============================================================================
# Resource Not Found Exceptions
# ============================================================================


class NotFoundException(DomainException):
    """Base exception for resource not found errors."""

    def __init__(self, message: str, error_code: str = "NOT_FOUND"):
        super().__init__(message=message, error_code=error_code)


class BatchNotFoundException(NotFoundException):
    """Batch with given ID is unknown or was discarded."""

    def __init__(self, batch_id: str | None = None):
        message = f"Batch '{batch_id}' not found" if batch_id else "Batch not found"
        super().__init__(message=message, error_code="BATCH_NOT_FOUND")


class UnitNotFoundException(NotFoundException):
    """Batch has no unit for the requested target language."""

    def __init__(self, target_language: str):
        super().__init__(
            message=f"No translation unit for target language '{target_language}'",
            error_code="UNIT_NOT_FOUND",
        )


class FavoriteNotFoundException(NotFoundException):
    """Favorite with given ID does not exist."""

    def __init__(self, favorite_id: int | None = None):
        message = f"Favorite with ID {favorite_id} not found" if favorite_id else "Favorite not found"
        super().__init__(message=message, error_code="FAVORITE_NOT_FOUND")


# ============================================================================
# Validation Exceptions
# ============================================================================


class ValidationException(DomainException):
    """Base exception for validation errors."""

    def __init__(self, message: str, error_code: str = "VALIDATION_ERROR"):
        super().__init__(message=message, error_code=error_code)


class EmptyTextException(ValidationException):
    """Source text is empty after trimming."""

    def __init__(self):
        super().__init__(message="Text to translate must not be empty", error_code="EMPTY_TEXT")


class TextTooLongException(ValidationException):
    """Source text exceeds the configured length limit."""

    def __init__(self, max_length: int):
        super().__init__(
            message=f"Text too long (max {max_length} characters)",
            error_code="TEXT_TOO_LONG",
        )


class NoTargetLanguagesException(ValidationException):
    """No target language remains once the source language is filtered out."""

    def __init__(self):
        super().__init__(
            message="At least one target language different from the source language is required",
            error_code="NO_TARGET_LANGUAGES",
        )


class UnsupportedLanguageException(ValidationException):
    """Language code is not supported."""

    def __init__(self, language_code: str):
        super().__init__(message=f"Unsupported language '{language_code}'", error_code="UNSUPPORTED_LANGUAGE")


# ============================================================================
# State Conflict Exceptions
# ============================================================================


class InvalidOperationException(DomainException):
    """Operation is not valid in current state."""

    def __init__(self, message: str, error_code: str = "INVALID_OPERATION"):
        super().__init__(message=message, error_code=error_code)


class RetryNotAllowedException(InvalidOperationException):
    """Unit is not retryable: wrong state or maximum retries reached."""

    def __init__(self, target_language: str, reason: str):
        super().__init__(
            message=f"Retry not allowed for '{target_language}': {reason}",
            error_code="RETRY_NOT_ALLOWED",
        )
        self.reason = reason


class BatchClosedException(InvalidOperationException):
    """Batch was cancelled or superseded and no longer accepts mutations."""

    def __init__(self, batch_id: str):
        super().__init__(message=f"Batch '{batch_id}' is no longer active", error_code="BATCH_CLOSED")


# ============================================================================
# Quota & Rate Limit Exceptions
# ============================================================================


class QuotaExceededException(DomainException):
    """Daily translation quota does not cover the requested units."""

    def __init__(self, requested: int, remaining: int | None = None):
        message = f"Daily translation limit exceeded ({requested} requested"
        message += f", {remaining} remaining)" if remaining is not None else ")"
        super().__init__(message=message, error_code="QUOTA_EXCEEDED")
        self.requested = requested
        self.remaining = remaining


class RateLimitExceededException(DomainException):
    """Too many requests from the same client in the current window."""

    def __init__(self, message: str = "Rate limit exceeded"):
        super().__init__(message=message, error_code="RATE_LIMIT_EXCEEDED")


# ============================================================================
# Provider Exceptions
# ============================================================================


class TranslationUnavailableException(DomainException):
    """Single-shot translation ended in error or timeout."""

    def __init__(self, message: str = "Translation service unavailable", timed_out: bool = False):
        super().__init__(
            message=message,
            error_code="TRANSLATION_TIMEOUT" if timed_out else "TRANSLATION_UNAVAILABLE",
        )
        self.timed_out = timed_out

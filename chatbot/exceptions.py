"""
Unified Exception Hierarchy for chatbot-core.

Every failure the chat core can report is a ``ChatbotError`` carrying an
``ErrorKind``. Adapters raise the structured kinds directly, so callers never
have to inspect error text to decide what happened (e.g. whether a model was
not found and a fallback should be tried).

Usage:
    from chatbot.exceptions import (
        ChatbotError,
        ErrorKind,
        ModelNotFoundError,
        RateLimitError,
    )

    try:
        reply = await orchestrator.generate(text, history)
    except RateLimitError as e:
        banner.show(e.user_message)
    except ChatbotError as e:
        if e.kind is ErrorKind.MODEL_NOT_FOUND:
            ...
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Structured error kinds surfaced to callers and observers."""

    NOT_CONFIGURED = "not_configured"
    INVALID_CREDENTIAL = "invalid_credential"
    RATE_LIMITED = "rate_limited"
    UNAVAILABLE = "unavailable"
    MALFORMED_RESPONSE = "malformed_response"
    MODEL_NOT_FOUND = "model_not_found"
    PROVIDER_NOT_AVAILABLE = "provider_not_available"
    PROVIDER_NOT_CONFIGURED = "provider_not_configured"
    GENERATION_FAILED = "generation_failed"
    STORE_ERROR = "store_error"
    UNAUTHENTICATED = "unauthenticated"
    CANNOT_DELETE_LAST = "cannot_delete_last"
    CONFIGURATION = "configuration"


class ChatbotError(Exception):
    """Base exception for all chatbot-core errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dict with additional error context.
        status_code: HTTP status code if applicable.
        service: Name of the service that raised the error.
    """

    kind: ErrorKind = ErrorKind.GENERATION_FAILED

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
        status_code: int | None = None,
        service: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.status_code = status_code
        self.service = service

    def __str__(self) -> str:
        parts = [self.message]
        if self.service:
            parts.insert(0, f"[{self.service}]")
        if self.status_code:
            parts.append(f"(HTTP {self.status_code})")
        return " ".join(parts)

    @property
    def user_message(self) -> str:
        """Text suitable for a dismissible error banner."""
        return self.message


class ConfigurationError(ChatbotError):
    """Configuration is invalid or missing.

    Raised when:
    - Store credentials are missing or still placeholders
    - The store URL is malformed
    - The store URL does not use HTTPS
    - The model catalog file is malformed
    """

    kind = ErrorKind.CONFIGURATION


# ============================================================================
# PROVIDER ERRORS (raised by adapters, propagated unchanged)
# ============================================================================


class ProviderError(ChatbotError):
    """Base exception for provider adapter errors."""

    pass


class NotConfiguredError(ProviderError):
    """Raised when an adapter has no usable credential.

    Always raised before any network I/O is attempted.
    """

    kind = ErrorKind.NOT_CONFIGURED

    @property
    def user_message(self) -> str:
        return f"{self.service or 'AI provider'} not configured. Please add API key."


class InvalidCredentialError(ProviderError):
    """Raised when the backing service rejects the credential (401/403)."""

    kind = ErrorKind.INVALID_CREDENTIAL

    @property
    def user_message(self) -> str:
        return "Invalid API key. Please check your provider token."


class RateLimitError(ProviderError):
    """Rate limit exceeded.

    Attributes:
        retry_after: Seconds to wait before retrying (if provided by API).
    """

    kind = ErrorKind.RATE_LIMITED

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        *,
        retry_after: float | None = None,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("status_code", 429)
        super().__init__(message, **kwargs)
        self.retry_after = retry_after

    @property
    def user_message(self) -> str:
        return "Rate limit exceeded. Please try again later."


class UnavailableError(ProviderError):
    """The resource is temporarily not ready (e.g. a model still loading).

    Callers may retry later, not immediately.

    Attributes:
        retry_after: Estimated seconds until the resource is ready, if known.
    """

    kind = ErrorKind.UNAVAILABLE

    def __init__(
        self,
        message: str = "Model is loading",
        *,
        retry_after: float | None = None,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("status_code", 503)
        super().__init__(message, **kwargs)
        self.retry_after = retry_after

    @property
    def user_message(self) -> str:
        return "Model is loading, please try again in a few moments."


class MalformedResponseError(ProviderError):
    """Response could not be parsed into text, or parsed to an empty string."""

    kind = ErrorKind.MALFORMED_RESPONSE

    @property
    def user_message(self) -> str:
        return "Invalid response from AI provider."


class ModelNotFoundError(ProviderError):
    """The requested model does not exist at the provider (HTTP 404).

    Attributes:
        model: The model identifier that was requested.
    """

    kind = ErrorKind.MODEL_NOT_FOUND

    def __init__(
        self,
        message: str = "Model not found",
        *,
        model: str | None = None,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("status_code", 404)
        super().__init__(message, **kwargs)
        self.model = model


class GenerationFailedError(ProviderError):
    """Generation failed for a reason outside the structured kinds.

    Attributes:
        detail: Description of the underlying failure.
    """

    kind = ErrorKind.GENERATION_FAILED

    def __init__(self, detail: str, **kwargs: Any) -> None:
        super().__init__(detail, **kwargs)
        self.detail = detail

    @property
    def user_message(self) -> str:
        return f"Failed to generate response: {self.detail}"


# ============================================================================
# ORCHESTRATOR ERRORS
# ============================================================================


class ProviderNotAvailableError(ChatbotError):
    """No adapter is registered for the selected model's provider."""

    kind = ErrorKind.PROVIDER_NOT_AVAILABLE

    def __init__(self, message: str = "AI provider not available", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class ProviderNotConfiguredError(ChatbotError):
    """The selected model's adapter reports it is not available.

    Attributes:
        model_name: Display name of the selected model.
    """

    kind = ErrorKind.PROVIDER_NOT_CONFIGURED

    def __init__(self, model_name: str, **kwargs: Any) -> None:
        super().__init__(f"{model_name} not configured", **kwargs)
        self.model_name = model_name

    @property
    def user_message(self) -> str:
        return f"{self.model_name} not configured. Please add API key."


# ============================================================================
# STORE ERRORS
# ============================================================================


class StoreError(ChatbotError):
    """The conversation store failed.

    Attributes:
        detail: Description of the underlying failure.
    """

    kind = ErrorKind.STORE_ERROR

    def __init__(self, detail: str, **kwargs: Any) -> None:
        super().__init__(detail, **kwargs)
        self.detail = detail

    @property
    def user_message(self) -> str:
        return f"Database error: {self.detail}"


class CannotDeleteLastError(StoreError):
    """Raised when deleting the user's only remaining conversation."""

    kind = ErrorKind.CANNOT_DELETE_LAST

    def __init__(self, detail: str = "Cannot delete the only conversation", **kwargs: Any) -> None:
        super().__init__(detail, **kwargs)

    @property
    def user_message(self) -> str:
        return "You need at least one conversation. Create a new chat before deleting this one."


class UnauthenticatedError(ChatbotError):
    """No user is signed in to the store."""

    kind = ErrorKind.UNAUTHENTICATED

    def __init__(self, message: str = "User not authenticated", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


def error_kind(error: BaseException) -> ErrorKind:
    """Return the structured kind of an error.

    Anything outside the hierarchy is reported as GENERATION_FAILED.
    """
    if isinstance(error, ChatbotError):
        return error.kind
    return ErrorKind.GENERATION_FAILED


__all__ = [
    "ErrorKind",
    "ChatbotError",
    "ConfigurationError",
    "ProviderError",
    "NotConfiguredError",
    "InvalidCredentialError",
    "RateLimitError",
    "UnavailableError",
    "MalformedResponseError",
    "ModelNotFoundError",
    "GenerationFailedError",
    "ProviderNotAvailableError",
    "ProviderNotConfiguredError",
    "StoreError",
    "CannotDeleteLastError",
    "UnauthenticatedError",
    "error_kind",
]

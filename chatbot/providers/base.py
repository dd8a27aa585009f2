"""
Base classes for Provider Adapters.

This module defines the interface every text-generation provider implements.
The interface is deliberately small:
- ``is_available``: pure check of local configuration, never does I/O
- ``generate``: one asynchronous attempt, no internal retry

Adapters absorb their vendor's request/response shape and report failures
through the structured errors in ``chatbot.exceptions``.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

import httpx

from chatbot.catalog import ProviderId
from chatbot.exceptions import (
    GenerationFailedError,
    InvalidCredentialError,
    MalformedResponseError,
    ModelNotFoundError,
    RateLimitError,
    UnavailableError,
)
from chatbot.models import Message

DEFAULT_SYSTEM_INSTRUCTION = (
    "You are a helpful, friendly AI assistant. "
    "Answer clearly and concisely, and ask a follow-up question when the request is ambiguous."
)


@dataclass(frozen=True)
class ProviderState:
    """Availability of one provider, computed on demand."""

    provider_id: ProviderId
    is_available: bool


class ProviderAdapter(ABC):
    """Abstract base class for provider adapters.

    Example:
        class EchoProvider(ProviderAdapter):
            provider_id = ProviderId.MOCK
            ...
            async def generate(self, message, history, *, model=None):
                return message

        registry.register(EchoProvider())
        text = await registry.get(ProviderId.MOCK).generate("hi", [])
    """

    # Number of trailing history messages sent with each request
    history_limit: int = 3

    system_instruction: str = DEFAULT_SYSTEM_INSTRUCTION

    @property
    @abstractmethod
    def provider_id(self) -> ProviderId:
        """Which backing service this adapter talks to."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable provider name (e.g. 'Groq')."""
        pass

    @property
    @abstractmethod
    def model_id(self) -> str:
        """The model used when the caller does not name one."""
        pass

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Whether a usable credential is configured.

        Must be a pure function of local configuration.
        """
        pass

    @abstractmethod
    async def generate(
        self,
        message: str,
        history: Sequence[Message],
        *,
        model: str | None = None,
    ) -> str:
        """Generate a reply to ``message`` given the conversation ``history``.

        Args:
            message: The new user message
            history: Prior messages in chronological order
            model: Model to request (defaults to ``model_id``)

        Returns:
            Trimmed, non-empty reply text

        Raises:
            NotConfiguredError: If no credential is present (no I/O attempted)
            InvalidCredentialError: If the service rejects the credential
            RateLimitError: If the service reports a rate limit
            UnavailableError: If the resource is temporarily not ready
            ModelNotFoundError: If the model does not exist at the service
            MalformedResponseError: If no text can be extracted
            GenerationFailedError: For any other service failure
        """
        pass

    @property
    def identity(self) -> str:
        """Stable identifier of the backing service and model."""
        return f"{self.provider_id.value}:{self.model_id}"

    def state(self) -> ProviderState:
        return ProviderState(provider_id=self.provider_id, is_available=self.is_available)

    def recent_history(self, history: Sequence[Message]) -> list[Message]:
        """The last ``history_limit`` messages, oldest first."""
        if self.history_limit <= 0:
            return []
        return list(history)[-self.history_limit :]

    def build_chat_messages(self, message: str, history: Sequence[Message]) -> list[dict[str, str]]:
        """Chat-completion style request body: system, recent history, new message."""
        messages = [{"role": "system", "content": self.system_instruction}]
        messages.extend(
            {"role": item.role, "content": item.content} for item in self.recent_history(history)
        )
        messages.append({"role": "user", "content": message})
        return messages

    def clean_text(self, text: object) -> str:
        """Trim generated text and reject empty results.

        Raises:
            MalformedResponseError: If the text is missing or blank
        """
        if not isinstance(text, str) or not text.strip():
            raise MalformedResponseError("Provider returned an empty response", service=self.name)
        return text.strip()


def _retry_after(response: httpx.Response) -> float | None:
    value = response.headers.get("retry-after")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def raise_for_provider_status(response: httpx.Response, *, service: str, model: str) -> None:
    """Map a non-success provider HTTP response to a structured error.

    Args:
        response: The HTTP response
        service: Provider name for error context
        model: Model that was requested

    Raises:
        InvalidCredentialError: 401/403
        ModelNotFoundError: 404
        RateLimitError: 429
        UnavailableError: 503
        GenerationFailedError: Any other non-2xx status
    """
    status = response.status_code
    if 200 <= status < 300:
        return

    if status in (401, 403):
        raise InvalidCredentialError(
            "Authentication rejected by provider", status_code=status, service=service
        )

    if status == 404:
        raise ModelNotFoundError(f"Model not found: {model}", model=model, service=service)

    if status == 429:
        raise RateLimitError(retry_after=_retry_after(response), service=service)

    if status == 503:
        retry_after = _retry_after(response)
        try:
            body = response.json()
        except ValueError:
            body = None
        if retry_after is None and isinstance(body, dict):
            estimated = body.get("estimated_time")
            if isinstance(estimated, (int, float)):
                retry_after = float(estimated)
        raise UnavailableError(retry_after=retry_after, service=service)

    raise GenerationFailedError(
        f"HTTP {status}: API Error",
        status_code=status,
        service=service,
        details={"body": response.text[:500]},
    )

"""
Response Orchestrator.

Owns the selected model, routes a generation request to the adapter bound to
that model, and publishes its state (idle / generating / error) to observers.

State machine:
    IDLE --generate()--> GENERATING
    GENERATING --success--> IDLE        (clears last_error)
    GENERATING --failure--> ERROR(kind)
    ERROR --clear_error() or next generate()--> IDLE

The orchestrator never retries or falls back on its own. Callers decide
whether an error warrants switching to the fallback model (see
``chatbot.fallback.FallbackPolicy``).

One generate() may be in flight per orchestrator; callers serialize sends
(typically by disabling input while ``is_generating`` is true).
"""

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from chatbot.catalog import ModelCatalog, ModelDescriptor
from chatbot.events import EventBus, GenerationState, StateChanged
from chatbot.exceptions import (
    ChatbotError,
    ErrorKind,
    GenerationFailedError,
    ProviderNotAvailableError,
    ProviderNotConfiguredError,
)
from chatbot.models import Message
from chatbot.providers.base import ProviderAdapter
from chatbot.providers.registry import ProviderRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrchestratorState:
    """Read-only snapshot of orchestrator state."""

    selected_model: ModelDescriptor
    is_generating: bool
    last_error: ErrorKind | None


class ResponseOrchestrator:
    """Routes generation requests to the selected model's provider."""

    def __init__(
        self,
        registry: ProviderRegistry,
        catalog: ModelCatalog,
        events: EventBus | None = None,
        selected_model_id: str | None = None,
    ):
        """Initialize the orchestrator.

        Args:
            registry: Configured provider adapters
            catalog: Selectable models
            events: Channel for state-change events (a private one if None)
            selected_model_id: Initial model (catalog default if None)

        Raises:
            KeyError: If selected_model_id is not in the catalog
        """
        self._registry = registry
        self._catalog = catalog
        self.events = events or EventBus()

        self._selected = (
            catalog.get(selected_model_id) if selected_model_id else catalog.default_model
        )
        self._generation_state = GenerationState.IDLE
        self._last_error: ChatbotError | None = None
        self._request_token = 0

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def catalog(self) -> ModelCatalog:
        return self._catalog

    @property
    def registry(self) -> ProviderRegistry:
        return self._registry

    @property
    def selected_model(self) -> ModelDescriptor:
        return self._selected

    @property
    def generation_state(self) -> GenerationState:
        return self._generation_state

    @property
    def is_generating(self) -> bool:
        return self._generation_state == GenerationState.GENERATING

    @property
    def last_error(self) -> ChatbotError | None:
        """The error from the most recent failed generate(), until cleared."""
        return self._last_error

    @property
    def request_token(self) -> int:
        """Token of the most recent generate() call."""
        return self._request_token

    @property
    def state(self) -> OrchestratorState:
        return OrchestratorState(
            selected_model=self._selected,
            is_generating=self.is_generating,
            last_error=self._last_error.kind if self._last_error else None,
        )

    def subscribe(self, listener: Callable[[Any], None]) -> Callable[[], None]:
        """Subscribe to state-change events; returns an unsubscribe function."""
        return self.events.subscribe(listener)

    def is_current(self, token: int) -> bool:
        """True if ``token`` belongs to the latest generate() call."""
        return token == self._request_token

    # ------------------------------------------------------------------
    # Model selection
    # ------------------------------------------------------------------

    def switch_model(self, model_id: str) -> None:
        """Select a model. Availability is deliberately not checked.

        Raises:
            KeyError: If model_id is not in the catalog
        """
        self._selected = self._catalog.get(model_id)
        logger.info(
            f"Switched to AI model: {self._selected.display_name}",
            extra={"model_id": model_id},
        )
        self._publish()

    def available_models(self) -> list[ModelDescriptor]:
        """Catalog models whose provider is currently available.

        Recomputed on every call so credential changes show up immediately.
        """
        return [
            model
            for model in self._catalog.all()
            if self._registry.is_available(model.provider_id)
        ]

    def resolve_provider(self, model: ModelDescriptor | None = None) -> ProviderAdapter:
        """Return the usable adapter for ``model`` (the selected model if None).

        Does not touch orchestrator state and performs no I/O.

        Raises:
            ProviderNotAvailableError: No adapter registered for the model's provider
            ProviderNotConfiguredError: The adapter reports itself unavailable
        """
        model = model or self._selected
        provider = self._registry.get(model.provider_id)
        if provider is None:
            raise ProviderNotAvailableError(
                details={"model_id": model.id, "provider_id": model.provider_id.value}
            )
        if not provider.is_available:
            raise ProviderNotConfiguredError(model.display_name, service=provider.name)
        return provider

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    async def generate(self, message: str, history: Sequence[Message] = ()) -> str:
        """Generate a reply with the selected model.

        Args:
            message: The new user message
            history: Prior messages in chronological order

        Returns:
            Trimmed, non-empty reply text

        Raises:
            ProviderNotAvailableError: No adapter for the selected model
            ProviderNotConfiguredError: Adapter not configured (no network call made)
            ProviderError: Adapter errors, propagated unchanged
            GenerationFailedError: Any unexpected adapter failure
        """
        if self._generation_state == GenerationState.ERROR:
            self.clear_error()

        model = self._selected
        self._request_token += 1
        token = self._request_token
        log_extra = {
            "request_id": token,
            "model_id": model.id,
            "provider_id": model.provider_id.value,
        }

        self._last_error = None
        self._set_state(GenerationState.GENERATING)
        logger.info(f"Generation started with {model.display_name}", extra=log_extra)

        try:
            provider = self.resolve_provider(model)
            reply = await provider.generate(message, history, model=model.id)
        except asyncio.CancelledError:
            self._set_state(GenerationState.IDLE)
            raise
        except ChatbotError as e:
            self._fail(e, log_extra)
            raise
        except Exception as e:
            wrapped = GenerationFailedError(str(e) or type(e).__name__)
            self._fail(wrapped, log_extra)
            raise wrapped from e

        self._set_state(GenerationState.IDLE)
        logger.info("Generation succeeded", extra=log_extra)
        return reply

    def clear_error(self) -> None:
        """Acknowledge the last error and return to IDLE."""
        self._last_error = None
        if self._generation_state == GenerationState.ERROR:
            self._set_state(GenerationState.IDLE)

    def _fail(self, error: ChatbotError, log_extra: dict[str, Any]) -> None:
        self._last_error = error
        logger.warning(
            f"Generation failed: {error}",
            extra={**log_extra, "error_kind": error.kind.value},
        )
        self._set_state(GenerationState.ERROR)

    def _set_state(self, state: GenerationState) -> None:
        self._generation_state = state
        self._publish()

    def _publish(self) -> None:
        self.events.publish(
            StateChanged(
                state=self._generation_state,
                selected_model_id=self._selected.id,
                request_id=self._request_token,
                error_kind=self._last_error.kind if self._last_error else None,
            )
        )

"""
Event channel for state propagation.

The orchestrator and chat sessions publish events here; any observer (UI,
logger, test harness) subscribes with a plain callback. Subscriptions are
passed around explicitly; there is no global bus.

Usage:
    bus = EventBus()
    unsubscribe = bus.subscribe(lambda event: print(event))
    bus.publish(ConversationEvent(ConversationEventType.DELETED, conversation_id="..."))
    unsubscribe()
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from chatbot.exceptions import ErrorKind

logger = logging.getLogger(__name__)

Listener = Callable[[Any], None]


class GenerationState(str, Enum):
    """Orchestrator lifecycle states."""

    IDLE = "idle"
    GENERATING = "generating"
    ERROR = "error"


@dataclass(frozen=True)
class StateChanged:
    """Snapshot published on every orchestrator state change."""

    state: GenerationState
    selected_model_id: str
    request_id: int
    error_kind: ErrorKind | None = None

    @property
    def is_generating(self) -> bool:
        return self.state == GenerationState.GENERATING


class ConversationEventType(str, Enum):
    CREATED = "created"
    TITLE_UPDATED = "title_updated"
    DELETED = "deleted"


@dataclass(frozen=True)
class ConversationEvent:
    """Tells other views that a conversation changed."""

    type: ConversationEventType
    conversation_id: str
    title: str | None = None


class EventBus:
    """Synchronous publish/subscribe channel."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event: Any) -> None:
        """Deliver ``event`` to every listener in subscription order.

        A failing listener is logged and does not stop delivery to the rest.
        """
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"Event listener failed for {type(event).__name__}")

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

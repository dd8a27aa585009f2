"""
Domain models for conversations and messages.

``Message`` is the value the orchestrator and its callers pass around as
history. It is immutable: a status change produces a new instance.
"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chatbot.store.records import ConversationRecord, MessageRecord


class MessageStatus(str, Enum):
    """Message delivery status."""

    SENDING = "sending"
    SENT = "sent"
    DELIVERED = "delivered"
    FAILED = "failed"


class MessageType(str, Enum):
    """Message types for future extensibility."""

    TEXT = "text"
    IMAGE = "image"
    FILE = "file"
    SYSTEM = "system"


# Allowed status transitions; anything else is rejected by Message.with_status
STATUS_TRANSITIONS: dict[MessageStatus, set[MessageStatus]] = {
    MessageStatus.SENDING: {MessageStatus.SENT, MessageStatus.FAILED},
    MessageStatus.SENT: {MessageStatus.DELIVERED, MessageStatus.FAILED},
    MessageStatus.DELIVERED: set(),
    MessageStatus.FAILED: set(),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Message:
    """A single chat message as seen by the orchestrator and its callers."""

    content: str
    is_from_user: bool
    timestamp: datetime = field(default_factory=_utcnow)
    status: MessageStatus = MessageStatus.SENT
    message_type: MessageType = MessageType.TEXT
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def with_status(self, status: MessageStatus) -> "Message":
        """Return a copy of this message with a new status.

        Raises:
            ValueError: If the transition is not allowed.
        """
        if status == self.status:
            return self
        if status not in STATUS_TRANSITIONS[self.status]:
            raise ValueError(f"Invalid status transition: {self.status.value} -> {status.value}")
        return replace(self, status=status)

    @property
    def role(self) -> str:
        """Chat-completion role for this message."""
        return "user" if self.is_from_user else "assistant"

    @classmethod
    def from_record(cls, record: "MessageRecord") -> "Message":
        """Initialize from a stored message row."""
        return cls(
            id=record.id,
            content=record.content,
            is_from_user=record.is_from_user,
            timestamp=record.created_at,
            status=record.status,
            message_type=record.message_type,
        )

    def to_record(self, conversation_id: str) -> "MessageRecord":
        """Convert back to a stored message row for ``conversation_id``."""
        from chatbot.store.records import MessageRecord

        return MessageRecord(
            id=self.id,
            conversation_id=conversation_id,
            content=self.content,
            is_from_user=self.is_from_user,
            message_type=self.message_type,
            status=self.status,
            created_at=self.timestamp,
            updated_at=self.timestamp,
        )


@dataclass(frozen=True)
class Conversation:
    """A chat conversation belonging to one user."""

    id: str
    user_id: str
    title: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: "ConversationRecord") -> "Conversation":
        return cls(
            id=record.id,
            user_id=record.user_id,
            title=record.title,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )

    def with_title(self, title: str) -> "Conversation":
        return replace(self, title=title, updated_at=_utcnow())

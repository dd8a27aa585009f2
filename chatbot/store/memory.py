"""
In-memory Conversation Store.

Mirrors the behavior of the remote store (ordering, timestamps, delete guard)
without any network access. Used for local development when no store is
configured, and in tests.
"""

import asyncio
import itertools
import logging
import uuid
from datetime import datetime, timezone

from chatbot.exceptions import CannotDeleteLastError, StoreError
from chatbot.models import Conversation, Message, MessageStatus, MessageType
from chatbot.store.base import ConversationStore
from chatbot.store.records import ConversationRecord, MessageRecord

logger = logging.getLogger(__name__)

MOCK_USER_ID = "mock-user-123"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryConversationStore(ConversationStore):
    """Conversation store backed by process memory."""

    def __init__(self, user_id: str | None = MOCK_USER_ID, latency_s: float = 0.0):
        """Initialize the store.

        Args:
            user_id: Pre-signed-in user (None to start signed out)
            latency_s: Simulated round-trip latency in seconds
        """
        self._user_id = user_id
        self._latency_s = latency_s
        self._conversations: dict[str, ConversationRecord] = {}
        self._messages: list[MessageRecord] = []
        # Tiebreaker for conversations touched within the same clock tick
        self._touch_order: dict[str, int] = {}
        self._sequence = itertools.count()

    @property
    def current_user_id(self) -> str | None:
        return self._user_id

    async def _simulate_latency(self) -> None:
        if self._latency_s > 0:
            await asyncio.sleep(self._latency_s)

    async def sign_in_anonymously(self) -> str:
        await self._simulate_latency()
        if self._user_id is None:
            self._user_id = str(uuid.uuid4())
        logger.info(f"Anonymous sign in successful: {self._user_id}")
        return self._user_id

    async def sign_out(self) -> None:
        self._user_id = None

    async def create_conversation(self, title: str) -> Conversation:
        user_id = self._require_user()
        await self._simulate_latency()

        now = _now()
        record = ConversationRecord(
            id=str(uuid.uuid4()),
            user_id=user_id,
            title=title,
            created_at=now,
            updated_at=now,
        )
        self._conversations[record.id] = record
        self._touch(record.id)
        logger.info(f"Created conversation: {record.id}", extra={"conversation_id": record.id})
        return Conversation.from_record(record)

    async def fetch_conversations(self, user_id: str | None = None) -> list[Conversation]:
        user_id = user_id or self._require_user()
        await self._simulate_latency()

        records = [r for r in self._conversations.values() if r.user_id == user_id]
        records.sort(key=lambda r: (r.updated_at, self._touch_order[r.id]), reverse=True)
        return [Conversation.from_record(r) for r in records]

    async def fetch_messages(self, conversation_id: str) -> list[Message]:
        self._require_user()
        await self._simulate_latency()

        return [
            Message.from_record(r) for r in self._messages if r.conversation_id == conversation_id
        ]

    async def append_message(
        self,
        conversation_id: str,
        content: str,
        is_from_user: bool,
        message_type: MessageType = MessageType.TEXT,
    ) -> Message:
        self._require_user()
        await self._simulate_latency()
        conversation = self._get_owned(conversation_id)

        now = _now()
        record = MessageRecord(
            id=str(uuid.uuid4()),
            conversation_id=conversation_id,
            content=content,
            is_from_user=is_from_user,
            message_type=message_type,
            status=MessageStatus.SENT,
            created_at=now,
            updated_at=now,
        )
        self._messages.append(record)
        self._conversations[conversation_id] = conversation.model_copy(update={"updated_at": now})
        self._touch(conversation_id)
        return Message.from_record(record)

    async def update_conversation_title(self, conversation_id: str, title: str) -> None:
        self._require_user()
        await self._simulate_latency()
        conversation = self._get_owned(conversation_id)

        self._conversations[conversation_id] = conversation.model_copy(
            update={"title": title, "updated_at": _now()}
        )
        self._touch(conversation_id)

    async def delete_conversation(self, conversation_id: str) -> None:
        user_id = self._require_user()
        await self._simulate_latency()
        self._get_owned(conversation_id)

        owned = [r for r in self._conversations.values() if r.user_id == user_id]
        if len(owned) <= 1:
            raise CannotDeleteLastError()

        del self._conversations[conversation_id]
        self._touch_order.pop(conversation_id, None)
        self._messages = [m for m in self._messages if m.conversation_id != conversation_id]
        logger.info(f"Deleted conversation: {conversation_id}")

    def _get_owned(self, conversation_id: str) -> ConversationRecord:
        record = self._conversations.get(conversation_id)
        if record is None or record.user_id != self._user_id:
            raise StoreError(f"Conversation not found: {conversation_id}")
        return record

    def _touch(self, conversation_id: str) -> None:
        self._touch_order[conversation_id] = next(self._sequence)

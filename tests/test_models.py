"""Tests for chatbot/models.py and chatbot/store/records.py."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from chatbot.models import Conversation, Message, MessageStatus, MessageType
from chatbot.store.records import (
    ConversationRecord,
    CreateConversationRequest,
    MessageRecord,
)

CREATED = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def message_row():
    return {
        "id": "msg-1",
        "conversation_id": "conv-1",
        "content": "Hello there",
        "is_from_user": False,
        "message_type": "text",
        "status": "delivered",
        "created_at": "2024-05-01T12:00:00+00:00",
        "updated_at": "2024-05-01T12:00:05+00:00",
        "extra_column": "ignored",
    }


class TestMessage:
    """Tests for the Message value type."""

    def test_defaults(self):
        message = Message("Hi", is_from_user=True)

        assert message.status == MessageStatus.SENT
        assert message.message_type == MessageType.TEXT
        assert message.timestamp.tzinfo is not None
        assert message.id

    def test_role(self):
        assert Message("Hi", is_from_user=True).role == "user"
        assert Message("Hi", is_from_user=False).role == "assistant"

    def test_immutable(self):
        message = Message("Hi", is_from_user=True)
        with pytest.raises(AttributeError):
            message.content = "changed"

    def test_from_record(self, message_row):
        message = Message.from_record(MessageRecord.model_validate(message_row))

        assert message.id == "msg-1"
        assert message.content == "Hello there"
        assert not message.is_from_user
        assert message.status == MessageStatus.DELIVERED
        assert message.timestamp == CREATED

    def test_record_conversion_preserves_fields(self, message_row):
        record = MessageRecord.model_validate(message_row)
        restored = Message.from_record(Message.from_record(record).to_record("conv-1"))

        assert restored.content == record.content
        assert restored.is_from_user == record.is_from_user
        assert restored.timestamp == record.created_at
        assert restored.status == record.status


class TestMessageStatus:
    """Tests for status transitions."""

    def test_sending_to_sent(self):
        message = Message("Hi", is_from_user=True, status=MessageStatus.SENDING)
        updated = message.with_status(MessageStatus.SENT)

        assert updated.status == MessageStatus.SENT
        assert message.status == MessageStatus.SENDING
        assert updated.id == message.id

    def test_sent_to_delivered(self):
        message = Message("Hi", is_from_user=True)
        assert message.with_status(MessageStatus.DELIVERED).status == MessageStatus.DELIVERED

    def test_same_status_is_noop(self):
        message = Message("Hi", is_from_user=True)
        assert message.with_status(MessageStatus.SENT) is message

    def test_failed_is_terminal(self):
        message = Message("Hi", is_from_user=True, status=MessageStatus.FAILED)
        with pytest.raises(ValueError, match="Invalid status transition"):
            message.with_status(MessageStatus.SENT)

    def test_cannot_go_back_to_sending(self):
        message = Message("Hi", is_from_user=True)
        with pytest.raises(ValueError):
            message.with_status(MessageStatus.SENDING)


class TestConversation:
    """Tests for the Conversation value type."""

    def test_from_record(self):
        record = ConversationRecord(
            id="conv-1", user_id="user-1", title="New Chat", created_at=CREATED, updated_at=CREATED
        )
        conversation = Conversation.from_record(record)

        assert conversation.id == "conv-1"
        assert conversation.title == "New Chat"

    def test_with_title_bumps_updated_at(self):
        conversation = Conversation("conv-1", "user-1", "New Chat", CREATED, CREATED)
        renamed = conversation.with_title("Code Help")

        assert renamed.title == "Code Help"
        assert renamed.updated_at > CREATED
        assert conversation.title == "New Chat"


class TestRecords:
    """Tests for wire payload validation."""

    def test_create_request_rejects_empty_title(self):
        with pytest.raises(ValidationError):
            CreateConversationRequest(user_id="user-1", title="")

    def test_message_record_rejects_unknown_status(self, message_row):
        message_row["status"] = "lost"
        with pytest.raises(ValidationError):
            MessageRecord.model_validate(message_row)

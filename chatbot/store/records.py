"""Wire records for the ``conversations`` and ``messages`` tables."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from chatbot.models import MessageStatus, MessageType


class ConversationRecord(BaseModel):
    """Row of the ``conversations`` table."""

    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: str
    title: str
    created_at: datetime
    updated_at: datetime


class MessageRecord(BaseModel):
    """Row of the ``messages`` table."""

    model_config = ConfigDict(extra="ignore")

    id: str
    conversation_id: str
    content: str
    is_from_user: bool = True
    message_type: MessageType = MessageType.TEXT
    status: MessageStatus = MessageStatus.SENT
    created_at: datetime
    updated_at: datetime


class CreateConversationRequest(BaseModel):
    """Insert payload for a new conversation."""

    user_id: str
    title: str = Field(..., min_length=1)


class InsertMessageRequest(BaseModel):
    """Insert payload for a new message."""

    conversation_id: str
    content: str
    is_from_user: bool
    message_type: MessageType = MessageType.TEXT
    status: MessageStatus = MessageStatus.SENT

"""
Conversation Store interface.

Durable storage for conversations and messages, accessed through a narrow
async CRUD interface. All operations may raise ``UnauthenticatedError`` or
``StoreError``.
"""

from abc import ABC, abstractmethod

from chatbot.exceptions import UnauthenticatedError
from chatbot.models import Conversation, Message, MessageType


class ConversationStore(ABC):
    """Abstract conversation store."""

    @property
    @abstractmethod
    def current_user_id(self) -> str | None:
        """Id of the signed-in user, or None."""
        pass

    @property
    def is_signed_in(self) -> bool:
        return self.current_user_id is not None

    @abstractmethod
    async def sign_in_anonymously(self) -> str:
        """Create an anonymous session and return the user id."""
        pass

    @abstractmethod
    async def sign_out(self) -> None:
        pass

    @abstractmethod
    async def create_conversation(self, title: str) -> Conversation:
        """Create a conversation for the signed-in user."""
        pass

    @abstractmethod
    async def fetch_conversations(self, user_id: str | None = None) -> list[Conversation]:
        """Conversations of ``user_id`` (default: signed-in user), most recently updated first."""
        pass

    @abstractmethod
    async def fetch_messages(self, conversation_id: str) -> list[Message]:
        """Messages of a conversation in insertion order."""
        pass

    @abstractmethod
    async def append_message(
        self,
        conversation_id: str,
        content: str,
        is_from_user: bool,
        message_type: MessageType = MessageType.TEXT,
    ) -> Message:
        """Append a message and return it as stored."""
        pass

    @abstractmethod
    async def update_conversation_title(self, conversation_id: str, title: str) -> None:
        pass

    @abstractmethod
    async def delete_conversation(self, conversation_id: str) -> None:
        """Delete a conversation and its messages.

        Raises:
            CannotDeleteLastError: If it is the user's only conversation
        """
        pass

    def _require_user(self) -> str:
        user_id = self.current_user_id
        if user_id is None:
            raise UnauthenticatedError()
        return user_id

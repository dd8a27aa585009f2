"""Tests for chatbot/store/memory.py - in-memory conversation store."""

import pytest

from chatbot.exceptions import CannotDeleteLastError, StoreError, UnauthenticatedError
from chatbot.models import MessageStatus
from chatbot.store.memory import MOCK_USER_ID, InMemoryConversationStore


class TestAuthentication:
    """Tests for anonymous sessions."""

    def test_starts_signed_in_by_default(self, store):
        assert store.current_user_id == MOCK_USER_ID
        assert store.is_signed_in

    @pytest.mark.asyncio
    async def test_sign_in_creates_user(self):
        store = InMemoryConversationStore(user_id=None)

        user_id = await store.sign_in_anonymously()

        assert user_id
        assert store.current_user_id == user_id

    @pytest.mark.asyncio
    async def test_operations_require_user(self, store):
        await store.sign_out()

        with pytest.raises(UnauthenticatedError):
            await store.create_conversation("New Chat")
        with pytest.raises(UnauthenticatedError):
            await store.fetch_conversations()


class TestConversations:
    """Tests for conversation CRUD."""

    @pytest.mark.asyncio
    async def test_create_and_fetch(self, store):
        conversation = await store.create_conversation("New Chat")

        assert conversation.user_id == MOCK_USER_ID
        assert conversation.title == "New Chat"
        assert await store.fetch_conversations() == [conversation]

    @pytest.mark.asyncio
    async def test_most_recently_updated_first(self, store):
        first = await store.create_conversation("First")
        second = await store.create_conversation("Second")

        assert [c.id for c in await store.fetch_conversations()] == [second.id, first.id]

        await store.append_message(first.id, "Hello", is_from_user=True)

        assert [c.id for c in await store.fetch_conversations()] == [first.id, second.id]

    @pytest.mark.asyncio
    async def test_update_title(self, store):
        conversation = await store.create_conversation("New Chat")

        await store.update_conversation_title(conversation.id, "Code Help")

        (updated,) = await store.fetch_conversations()
        assert updated.title == "Code Help"
        assert updated.updated_at >= conversation.updated_at

    @pytest.mark.asyncio
    async def test_update_unknown_conversation(self, store):
        with pytest.raises(StoreError, match="Conversation not found"):
            await store.update_conversation_title("missing", "Title")

    @pytest.mark.asyncio
    async def test_other_users_conversations_are_hidden(self, store):
        await store.create_conversation("Mine")
        other = InMemoryConversationStore(user_id="someone-else")

        assert await store.fetch_conversations("someone-else") == []
        assert await other.fetch_conversations() == []


class TestDelete:
    """Tests for deleting conversations."""

    @pytest.mark.asyncio
    async def test_cannot_delete_only_conversation(self, store):
        conversation = await store.create_conversation("New Chat")

        with pytest.raises(CannotDeleteLastError):
            await store.delete_conversation(conversation.id)

        assert await store.fetch_conversations() == [conversation]

    @pytest.mark.asyncio
    async def test_delete_removes_messages(self, store):
        keep = await store.create_conversation("Keep")
        drop = await store.create_conversation("Drop")
        await store.append_message(drop.id, "Hello", is_from_user=True)

        await store.delete_conversation(drop.id)

        assert [c.id for c in await store.fetch_conversations()] == [keep.id]
        assert await store.fetch_messages(drop.id) == []

    @pytest.mark.asyncio
    async def test_delete_unknown(self, store):
        await store.create_conversation("One")
        await store.create_conversation("Two")

        with pytest.raises(StoreError):
            await store.delete_conversation("missing")


class TestMessages:
    """Tests for message storage."""

    @pytest.mark.asyncio
    async def test_messages_in_insertion_order(self, store):
        conversation = await store.create_conversation("New Chat")

        await store.append_message(conversation.id, "Hello", is_from_user=True)
        await store.append_message(conversation.id, "Hi! How can I help?", is_from_user=False)

        messages = await store.fetch_messages(conversation.id)
        assert [m.content for m in messages] == ["Hello", "Hi! How can I help?"]
        assert [m.is_from_user for m in messages] == [True, False]
        assert all(m.status == MessageStatus.SENT for m in messages)

    @pytest.mark.asyncio
    async def test_append_to_unknown_conversation(self, store):
        with pytest.raises(StoreError):
            await store.append_message("missing", "Hello", is_from_user=True)

    @pytest.mark.asyncio
    async def test_latency(self):
        store = InMemoryConversationStore(latency_s=0.01)
        conversation = await store.create_conversation("New Chat")
        assert conversation.id

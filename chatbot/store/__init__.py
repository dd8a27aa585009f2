"""
Conversation persistence.

Usage:
    from chatbot.store import InMemoryConversationStore, SupabaseConversationStore
"""

from chatbot.store.base import ConversationStore
from chatbot.store.memory import InMemoryConversationStore
from chatbot.store.records import ConversationRecord, MessageRecord
from chatbot.store.supabase import SupabaseConversationStore

__all__ = [
    "ConversationStore",
    "ConversationRecord",
    "InMemoryConversationStore",
    "MessageRecord",
    "SupabaseConversationStore",
]

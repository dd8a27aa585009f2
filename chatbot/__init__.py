"""
chatbot-core: multi-provider chat orchestration.

Routes user messages to interchangeable text-generation providers, persists
conversations to a remote store, and falls back gracefully when a provider
fails.

Quick Start:
    from chatbot import build_app

    app = build_app()
    await app.store.sign_in_anonymously()
    session = await app.start_conversation("New Chat")
    result = await session.send("Hello!")
    if not result.ok:
        show_banner(result.banner)
"""

from chatbot.app import ChatApp, build_app
from chatbot.catalog import ModelCatalog, ModelDescriptor, ProviderId
from chatbot.events import EventBus, GenerationState, StateChanged
from chatbot.exceptions import ChatbotError, ErrorKind
from chatbot.fallback import FallbackPolicy
from chatbot.models import Conversation, Message, MessageStatus
from chatbot.orchestrator import ResponseOrchestrator
from chatbot.session import ChatSession, SendResult

__version__ = "0.1.0"

__all__ = [
    "ChatApp",
    "ChatSession",
    "ChatbotError",
    "Conversation",
    "ErrorKind",
    "EventBus",
    "FallbackPolicy",
    "GenerationState",
    "Message",
    "MessageStatus",
    "ModelCatalog",
    "ModelDescriptor",
    "ProviderId",
    "ResponseOrchestrator",
    "SendResult",
    "StateChanged",
    "build_app",
]

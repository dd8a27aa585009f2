"""
Composition root.

Builds the single instances of the registry, catalog, orchestrator and store
and hands them to whoever drives the UI. Nothing here is a module-level
singleton; call ``build_app`` once at startup and pass the result down.

At startup the orchestrator is moved off the catalog default when that
model's provider is not configured, onto the first model that is. This is
a composition-root decision: the orchestrator itself never switches models
on its own, and callers that build one directly keep the default.

Usage:
    from chatbot.app import build_app

    app = build_app()
    await app.store.sign_in_anonymously()
    session = await app.start_conversation("New Chat")
    result = await session.send("Can you help me write Python code?")
"""

import logging
from dataclasses import dataclass

import httpx

from chatbot.catalog import ModelCatalog
from chatbot.config.settings import ChatbotConfig, load_config
from chatbot.events import EventBus
from chatbot.fallback import FallbackPolicy
from chatbot.logging_config import setup_logging
from chatbot.models import Conversation
from chatbot.orchestrator import ResponseOrchestrator
from chatbot.providers import GroqProvider, HuggingFaceProvider, MockProvider, ProviderRegistry
from chatbot.session import ChatSession, delete_conversation, start_conversation
from chatbot.store import ConversationStore, InMemoryConversationStore, SupabaseConversationStore

logger = logging.getLogger(__name__)


@dataclass
class ChatApp:
    """Wired application services."""

    config: ChatbotConfig
    catalog: ModelCatalog
    registry: ProviderRegistry
    orchestrator: ResponseOrchestrator
    store: ConversationStore
    events: EventBus
    fallback_policy: FallbackPolicy | None = None

    def open_session(self, conversation: Conversation) -> ChatSession:
        """Session for an existing conversation (call ``load()`` to fetch history)."""
        return ChatSession(
            conversation,
            self.store,
            self.orchestrator,
            fallback_policy=self.fallback_policy,
            events=self.events,
        )

    async def start_conversation(self, title: str) -> ChatSession:
        return await start_conversation(
            self.store,
            self.orchestrator,
            title,
            fallback_policy=self.fallback_policy,
            events=self.events,
        )

    async def delete_conversation(self, conversation_id: str) -> None:
        await delete_conversation(self.store, conversation_id, self.events)


def build_registry(
    config: ChatbotConfig, http_client: httpx.AsyncClient | None = None
) -> ProviderRegistry:
    """Register every provider adapter; availability is decided per adapter."""
    return ProviderRegistry(
        [
            HuggingFaceProvider(config.huggingface_api_key, http_client=http_client),
            GroqProvider(config.groq_api_key, http_client=http_client),
            MockProvider(),
        ]
    )


def build_store(
    config: ChatbotConfig, http_client: httpx.AsyncClient | None = None
) -> ConversationStore:
    """Remote store when configured, otherwise the in-memory store.

    Raises:
        ConfigurationError: If store values are present but invalid (e.g. not HTTPS)
    """
    if not config.store_configured:
        logger.warning("Conversation store not configured, using in-memory store")
        return InMemoryConversationStore()
    return SupabaseConversationStore.from_config(config, http_client=http_client)


def build_app(
    config: ChatbotConfig | None = None,
    http_client: httpx.AsyncClient | None = None,
    configure_logging: bool = False,
) -> ChatApp:
    """Wire up the application from configuration.

    Args:
        config: Configuration (read from the environment if None)
        http_client: Shared HTTP client for providers and store
        configure_logging: Install structured JSON logging at config.log_level

    The orchestrator starts on the catalog default, or on the first available
    model when the default's provider has no credentials.
    """
    config = config or load_config()
    if configure_logging:
        setup_logging(config.log_level)
    catalog = ModelCatalog.load(config.catalog_path)
    registry = build_registry(config, http_client)
    events = EventBus()

    policy = FallbackPolicy.for_catalog(catalog)

    # Startup choice: the catalog default if usable, else the first usable model
    orchestrator = ResponseOrchestrator(registry, catalog, events=events)
    available = orchestrator.available_models()
    if available and orchestrator.selected_model not in available:
        orchestrator.switch_model(available[0].id)

    return ChatApp(
        config=config,
        catalog=catalog,
        registry=registry,
        orchestrator=orchestrator,
        store=build_store(config, http_client),
        events=events,
        fallback_policy=policy,
    )

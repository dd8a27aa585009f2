"""
Pytest configuration and shared fixtures.

Provides a scriptable provider adapter, the bundled model catalog and an
in-memory store so orchestration tests never touch the network.
"""

import asyncio
from collections.abc import Sequence

import pytest

from chatbot.catalog import ModelCatalog, ProviderId
from chatbot.config.settings import clear_config
from chatbot.events import EventBus
from chatbot.models import Message
from chatbot.orchestrator import ResponseOrchestrator
from chatbot.providers.base import ProviderAdapter
from chatbot.providers.mock import MockProvider
from chatbot.providers.registry import ProviderRegistry
from chatbot.store.memory import InMemoryConversationStore

VALID_GROQ_KEY = "gsk_" + "a" * 52
VALID_HF_KEY = "hf_test_token_123"


class StubProvider(ProviderAdapter):
    """Adapter whose replies and failures are scripted by the test.

    Each call pops the next outcome; an exception instance is raised, a
    string is returned. When the script runs out the last outcome repeats.
    """

    def __init__(
        self,
        provider_id: ProviderId = ProviderId.HUGGINGFACE,
        outcomes: Sequence[object] = ("Stub reply",),
        available: bool = True,
        model_id: str = "stub-model",
    ):
        self._provider_id = provider_id
        self._outcomes = list(outcomes)
        self.available = available
        self._model_id = model_id
        self.calls: list[dict] = []
        self.started = asyncio.Event()
        self.release: asyncio.Event | None = None

    @property
    def provider_id(self) -> ProviderId:
        return self._provider_id

    @property
    def name(self) -> str:
        return f"Stub {self._provider_id.value}"

    @property
    def model_id(self) -> str:
        return self._model_id

    @property
    def is_available(self) -> bool:
        return self.available

    async def generate(self, message, history: Sequence[Message], *, model=None) -> str:
        self.calls.append({"message": message, "history": list(history), "model": model})
        self.started.set()
        if self.release is not None:
            await self.release.wait()

        outcome = self._outcomes.pop(0) if len(self._outcomes) > 1 else self._outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture(autouse=True)
def reset_config():
    """Drop cached configuration between tests."""
    clear_config()
    yield
    clear_config()


@pytest.fixture
def catalog():
    """The bundled model catalog."""
    return ModelCatalog.load()


@pytest.fixture
def stub_provider_factory():
    """Build StubProvider instances."""
    return StubProvider


@pytest.fixture
def mock_provider():
    return MockProvider(seed=42)


@pytest.fixture
def registry(mock_provider):
    """Registry holding only the mock provider."""
    return ProviderRegistry([mock_provider])


@pytest.fixture
def events():
    return EventBus()


@pytest.fixture
def orchestrator(registry, catalog, events):
    """Orchestrator starting on the mock model."""
    return ResponseOrchestrator(registry, catalog, events=events, selected_model_id="mock-ai")


@pytest.fixture
def store():
    """In-memory store with a signed-in user."""
    return InMemoryConversationStore()


@pytest.fixture
def recorded_events(events):
    """Every event published on the shared bus, in order."""
    received = []
    events.subscribe(received.append)
    return received

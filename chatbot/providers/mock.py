"""
Mock Provider.

Always-available provider that returns canned replies without any network
call. It is the designated fallback when a real provider cannot serve a
request, and the default provider in tests.

Usage:
    from chatbot.providers.mock import MockProvider

    registry.register(MockProvider())
    reply = await registry.get(ProviderId.MOCK).generate("Hello", [])
"""

import asyncio
import random
from collections.abc import Sequence

from chatbot.catalog import ProviderId
from chatbot.exceptions import GenerationFailedError
from chatbot.models import Message
from chatbot.providers.base import ProviderAdapter

CANNED_RESPONSES = (
    "That's an interesting question! Let me think about that.",
    "I understand what you're asking. Here's my perspective on that.",
    "Thanks for sharing that with me. I'd be happy to help!",
    "That's a great point. Let me elaborate on that topic.",
    "I see what you mean. Here's how I would approach that.",
    "Absolutely! That's something I can definitely help you with.",
    "Good question! Let me break that down for you.",
    "I appreciate you asking about that. Here's what I think.",
    "Based on what you're saying, I think the best approach would be...",
    "Let me help you with that. Here's what I recommend...",
)

# (keywords, reply) pairs checked in order against the lowercased message
CONTEXTUAL_RESPONSES = (
    (
        ("code", "function", "python", "bug"),
        "Happy to help with your code! Share the snippet and what you expect it to do.",
    ),
    (("explain", "what is", "why"), "Sure, let me explain that step by step with a simple example."),
    (("summarize", "summary", "tl;dr"), "Here's a short summary of the key points."),
)


class MockProvider(ProviderAdapter):
    """Mock provider for fallback and testing without real API calls.

    Simulates responses with configurable latency and failure rate.
    """

    history_limit = 0

    def __init__(
        self,
        model_id: str = "mock-ai",
        latency_s: float = 0.0,
        failure_rate: float = 0.0,
        seed: int | None = None,
    ):
        """Initialize mock provider.

        Args:
            model_id: Model identifier
            latency_s: Simulated response latency in seconds
            failure_rate: Probability of simulated failure (0-1)
            seed: Seed for reply selection, for reproducible output
        """
        self._model_id = model_id
        self._latency_s = latency_s
        self._failure_rate = failure_rate
        self._random = random.Random(seed)
        self._call_count = 0

    @property
    def provider_id(self) -> ProviderId:
        return ProviderId.MOCK

    @property
    def name(self) -> str:
        return "Mock AI"

    @property
    def model_id(self) -> str:
        return self._model_id

    @property
    def is_available(self) -> bool:
        return True

    @property
    def call_count(self) -> int:
        """Number of generate() calls made so far."""
        return self._call_count

    async def generate(
        self,
        message: str,
        history: Sequence[Message],
        *,
        model: str | None = None,
    ) -> str:
        """Generate a mock reply."""
        self._call_count += 1

        if self._latency_s > 0:
            await asyncio.sleep(self._latency_s)

        if self._failure_rate > 0 and self._random.random() < self._failure_rate:
            raise GenerationFailedError("Simulated API failure", service=self.name)

        return self.clean_text(self._generate_mock_response(message))

    def _generate_mock_response(self, message: str) -> str:
        lowered = message.lower()
        for keywords, reply in CONTEXTUAL_RESPONSES:
            if any(keyword in lowered for keyword in keywords):
                return reply
        return self._random.choice(CANNED_RESPONSES)

"""
Provider Adapter Layer.

Stable interface for text-generation providers, so models can be switched
without changing the orchestrator.

    ResponseOrchestrator
         ↓
    ProviderRegistry  (keyed by ProviderId)
         ↓
    ProviderAdapter   (Groq, Hugging Face, Mock)
         ↓
    Vendor HTTP APIs

Usage:
    from chatbot.providers import ProviderRegistry, GroqProvider, MockProvider

    registry = ProviderRegistry([GroqProvider(api_key), MockProvider()])
"""

from chatbot.providers.base import ProviderAdapter, ProviderState
from chatbot.providers.groq import GroqProvider
from chatbot.providers.huggingface import HuggingFaceProvider
from chatbot.providers.mock import MockProvider
from chatbot.providers.registry import ProviderRegistry

__all__ = [
    "ProviderAdapter",
    "ProviderState",
    "ProviderRegistry",
    "GroqProvider",
    "HuggingFaceProvider",
    "MockProvider",
]

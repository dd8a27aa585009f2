"""Tests for chatbot/providers/registry.py and the adapter base helpers."""

import httpx
import pytest

from chatbot.catalog import ProviderId
from chatbot.exceptions import InvalidCredentialError, MalformedResponseError
from chatbot.models import Message
from chatbot.providers import GroqProvider, HuggingFaceProvider, MockProvider, ProviderRegistry
from chatbot.providers.base import ProviderState, raise_for_provider_status


class TestProviderRegistry:
    """Tests for ProviderRegistry operations."""

    def test_register_and_get(self):
        registry = ProviderRegistry()
        provider = MockProvider()

        registry.register(provider)

        assert registry.get(ProviderId.MOCK) is provider
        assert registry.has_provider(ProviderId.MOCK)
        assert registry.list_providers() == [ProviderId.MOCK]

    def test_get_missing_returns_none(self):
        assert ProviderRegistry().get(ProviderId.GOOGLE) is None

    def test_register_replaces_existing(self):
        first, second = MockProvider(model_id="a"), MockProvider(model_id="b")
        registry = ProviderRegistry([first])

        registry.register(second)

        assert registry.get(ProviderId.MOCK) is second
        assert len(registry.list_providers()) == 1

    def test_unregister(self):
        registry = ProviderRegistry([MockProvider()])
        registry.unregister(ProviderId.MOCK)
        assert not registry.has_provider(ProviderId.MOCK)

    def test_unregister_missing_raises(self):
        with pytest.raises(KeyError, match="Provider not found: groq"):
            ProviderRegistry().unregister(ProviderId.GROQ)

    def test_is_available(self):
        registry = ProviderRegistry([GroqProvider(""), MockProvider()])

        assert registry.is_available(ProviderId.MOCK)
        assert not registry.is_available(ProviderId.GROQ)
        assert not registry.is_available(ProviderId.GOOGLE)

    def test_states_are_computed_on_demand(self, stub_provider_factory):
        stub = stub_provider_factory(ProviderId.HUGGINGFACE, available=False)
        registry = ProviderRegistry([stub, MockProvider()])

        assert registry.states() == [
            ProviderState(ProviderId.HUGGINGFACE, False),
            ProviderState(ProviderId.MOCK, True),
        ]

        stub.available = True
        assert registry.states()[0].is_available

    def test_clear(self):
        registry = ProviderRegistry([MockProvider(), HuggingFaceProvider("hf_x")])
        registry.clear()
        assert registry.list_providers() == []


class TestAdapterHelpers:
    """Tests for shared ProviderAdapter helpers."""

    def test_recent_history_keeps_last_messages(self):
        provider = HuggingFaceProvider("hf_x")
        history = [Message(str(i), is_from_user=True) for i in range(5)]

        assert [m.content for m in provider.recent_history(history)] == ["2", "3", "4"]

    def test_recent_history_disabled(self):
        history = [Message("a", is_from_user=True)]
        assert MockProvider().recent_history(history) == []

    def test_clean_text_rejects_non_strings(self):
        with pytest.raises(MalformedResponseError):
            MockProvider().clean_text(None)

    def test_success_status_passes(self):
        raise_for_provider_status(httpx.Response(200), service="x", model="m")

    def test_403_is_invalid_credential(self):
        with pytest.raises(InvalidCredentialError):
            raise_for_provider_status(httpx.Response(403), service="x", model="m")

"""Tests for chatbot/fallback.py - caller-side fallback decision."""

from chatbot.catalog import ModelCatalog, ModelDescriptor, ProviderId
from chatbot.exceptions import (
    ErrorKind,
    ModelNotFoundError,
    RateLimitError,
    UnavailableError,
)
from chatbot.fallback import DEFAULT_TRIGGERS, FallbackPolicy


class TestFallbackPolicy:
    """Tests for the caller-side fallback decision."""

    def test_model_not_found_triggers(self):
        policy = FallbackPolicy()
        assert policy.should_fallback(ModelNotFoundError(), "meta-llama/Llama-2-7b-chat-hf")

    def test_unavailable_triggers(self):
        assert FallbackPolicy().should_fallback(UnavailableError(), "llama-3.1-8b-instant")

    def test_rate_limit_does_not_trigger(self):
        assert not FallbackPolicy().should_fallback(RateLimitError(), "llama-3.1-8b-instant")

    def test_never_falls_back_from_fallback_model(self):
        assert not FallbackPolicy().should_fallback(ModelNotFoundError(), "mock-ai")

    def test_custom_triggers(self):
        policy = FallbackPolicy(
            fallback_model_id="llama-3.1-8b-instant",
            triggers=frozenset({ErrorKind.RATE_LIMITED}),
        )

        assert policy.should_fallback(RateLimitError(), "mock-ai")
        assert not policy.should_fallback(ModelNotFoundError(), "mock-ai")

    def test_no_fallback_model_never_triggers(self):
        policy = FallbackPolicy(fallback_model_id=None)
        assert not policy.should_fallback(ModelNotFoundError(), "hf")


class TestForCatalog:
    """Tests for deriving the policy from a model catalog."""

    def test_uses_declared_fallback(self):
        catalog = ModelCatalog(
            [
                ModelDescriptor("hf", "HF", ProviderId.HUGGINGFACE),
                ModelDescriptor("echo", "Echo", ProviderId.MOCK),
            ],
            fallback_model_id="echo",
        )

        policy = FallbackPolicy.for_catalog(catalog)

        assert policy.fallback_model_id == "echo"
        assert policy.triggers == DEFAULT_TRIGGERS

    def test_bundled_catalog_falls_back_to_mock(self, catalog):
        assert FallbackPolicy.for_catalog(catalog).fallback_model_id == "mock-ai"

    def test_catalog_without_fallback(self):
        catalog = ModelCatalog([ModelDescriptor("hf", "HF", ProviderId.HUGGINGFACE)])

        policy = FallbackPolicy.for_catalog(catalog)

        assert policy.fallback_model_id is None
        assert not policy.should_fallback(UnavailableError(), "hf")

    def test_custom_triggers(self, catalog):
        triggers = frozenset({ErrorKind.RATE_LIMITED})
        assert FallbackPolicy.for_catalog(catalog, triggers=triggers).triggers == triggers

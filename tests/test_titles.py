"""Tests for chatbot/titles.py - conversation title derivation."""

import pytest

from chatbot.catalog import ProviderId
from chatbot.exceptions import GenerationFailedError
from chatbot.models import Message
from chatbot.orchestrator import ResponseOrchestrator
from chatbot.providers import MockProvider, ProviderRegistry
from chatbot.titles import (
    TitleGenerator,
    clean_title,
    keyword_title,
    should_generate_title,
)


@pytest.fixture
def make_generator(stub_provider_factory, catalog):
    """TitleGenerator whose selected model is served by a scripted stub."""

    def _make(*outcomes, available=True):
        stub = stub_provider_factory(
            ProviderId.HUGGINGFACE, outcomes=list(outcomes), available=available
        )
        orchestrator = ResponseOrchestrator(ProviderRegistry([stub]), catalog)
        return TitleGenerator(orchestrator), stub

    return _make


class TestKeywordTitle:
    """Tests for the keyword fallback table."""

    def test_code_wins_over_write(self):
        assert keyword_title("Can you help me write Python code for sorting?") == "Code Help"

    @pytest.mark.parametrize(
        "message,title",
        [
            ("Please write a poem about autumn", "Creative Writing"),
            ("Explain photosynthesis for my exam", "Learning & Study"),
            ("Solve this algebra equation", "Math Help"),
            ("Give me ideas for a party", "Brainstorming"),
            ("Best recipe for pancakes", "Cooking Tips"),
            ("Plan a trip to Lisbon", "Travel Plans"),
            ("A good workout routine", "Health & Fitness"),
        ],
    )
    def test_topics(self, message, title):
        assert keyword_title(message) == title

    def test_default(self):
        assert keyword_title("Hello there, how are you?") == "Chat"

    def test_matches_whole_words_only(self):
        assert keyword_title("I love decoding puzzles") == "Chat"


class TestCleanTitle:
    """Tests for provider title normalization."""

    def test_strips_quotes_and_prefix(self):
        assert clean_title('"Title: Sorting in Python."') == "Sorting in Python"

    def test_first_line_only(self):
        assert clean_title("Python Sorting\nThis conversation is about...") == "Python Sorting"

    def test_truncates_long_titles(self):
        title = clean_title("A" * 80)

        assert len(title) == 50
        assert title.endswith("...")

    def test_rejects_short_titles(self):
        assert clean_title("Hi") is None
        assert clean_title("   ") is None

    def test_rejects_sentences(self):
        reply = "Happy to help with your code! Share the snippet and I will take a look."
        assert clean_title(reply) is None

    def test_keeps_six_word_titles(self):
        title = "Sorting Lists of Numbers in Python"
        assert clean_title(title) == title


class TestShouldGenerateTitle:
    """Tests for the auto-title trigger."""

    def test_first_meaningful_message_with_generic_title(self):
        history = [Message("Hello, how can I help?", is_from_user=False)]
        message = "Can you help me write Python code?"
        history.append(Message(message, is_from_user=True))

        assert should_generate_title(message, history, "New Chat")

    def test_short_message(self):
        assert not should_generate_title("hi", [Message("hi", is_from_user=True)], "New Chat")

    def test_custom_title_is_kept(self):
        message = "Can you help me write Python code?"
        assert not should_generate_title(message, [], "My Sorting Project")

    def test_not_first_user_message(self):
        history = [
            Message("First message here", is_from_user=True),
            Message("Reply", is_from_user=False),
            Message("Second message here", is_from_user=True),
        ]
        assert not should_generate_title("Second message here", history, "New Chat")


class TestTitleGenerator:
    """Tests for TitleGenerator.derive_title."""

    @pytest.mark.asyncio
    async def test_provider_title(self, make_generator):
        generator, stub = make_generator("Python Sorting Help")

        title = await generator.derive_title("Can you help me write Python code for sorting?")

        assert title == "Python Sorting Help"
        assert stub.calls[0]["history"] == []
        assert "write Python code for sorting" in stub.calls[0]["message"]

    @pytest.mark.asyncio
    async def test_provider_failure_uses_keywords(self, make_generator):
        generator, _ = make_generator(GenerationFailedError("HTTP 500: API Error"))

        title = await generator.derive_title("Can you help me write Python code for sorting?")

        assert title == "Code Help"

    @pytest.mark.asyncio
    async def test_unusable_provider_title_uses_keywords(self, make_generator):
        generator, _ = make_generator("OK")
        assert await generator.derive_title("Plan a trip to Lisbon") == "Travel Plans"

    @pytest.mark.asyncio
    async def test_unconfigured_provider_uses_keywords(self, make_generator):
        generator, stub = make_generator("Ignored", available=False)

        assert await generator.derive_title("Hello there friend") == "Chat"
        assert stub.calls == []

    @pytest.mark.asyncio
    async def test_conversational_reply_uses_keywords(self, catalog):
        orchestrator = ResponseOrchestrator(
            ProviderRegistry([MockProvider(seed=3)]), catalog, selected_model_id="mock-ai"
        )
        generator = TitleGenerator(orchestrator)

        title = await generator.derive_title("Can you help me write Python code for sorting?")

        assert title == "Code Help"


"""
Conversation title derivation.

Best effort: ask the selected provider for a 2-4 word title, and fall back to
a keyword table when that fails. Never raises.
"""

import logging
import re
from collections.abc import Sequence

from chatbot.models import Message
from chatbot.orchestrator import ResponseOrchestrator

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 50
MIN_TITLE_LENGTH = 3
# Replies longer than this are sentences, not titles
MAX_TITLE_WORDS = 6
DEFAULT_TITLE = "Chat"

# Titles that are auto-replaced once the first real message arrives
GENERIC_TITLES = frozenset(
    {
        "New Chat",
        "General Chat",
        "Creative Writing",
        "Code Help",
        "Learning & Study",
        "Problem Solving",
        "Brainstorming",
    }
)

# Checked in order; the first entry with a keyword among the message words wins
KEYWORD_TOPICS: tuple[tuple[frozenset[str], str], ...] = (
    (
        frozenset(
            {"code", "coding", "python", "javascript", "swift", "java", "programming",
             "bug", "debug", "function", "algorithm", "sql", "api"}
        ),
        "Code Help",
    ),
    (frozenset({"write", "writing", "story", "poem", "essay", "creative"}), "Creative Writing"),
    (frozenset({"learn", "study", "explain", "homework", "exam", "teach"}), "Learning & Study"),
    (frozenset({"math", "calculate", "equation", "algebra"}), "Math Help"),
    (frozenset({"problem", "fix", "solve", "issue", "error"}), "Problem Solving"),
    (frozenset({"idea", "ideas", "brainstorm"}), "Brainstorming"),
    (frozenset({"recipe", "cook", "cooking", "food"}), "Cooking Tips"),
    (frozenset({"travel", "trip", "vacation"}), "Travel Plans"),
    (frozenset({"health", "fitness", "workout", "exercise"}), "Health & Fitness"),
)

TITLE_PROMPT = (
    "Create a short title (2-4 words) for a conversation that starts with the "
    "message below. Reply with the title only, no quotes or punctuation.\n\n"
    "Message: {message}"
)

_WORD_PATTERN = re.compile(r"[a-z0-9']+")


def keyword_title(message: str) -> str:
    """Topic title from the fixed keyword table, or ``"Chat"``."""
    words = set(_WORD_PATTERN.findall(message.lower()))
    for keywords, topic in KEYWORD_TOPICS:
        if words & keywords:
            return topic
    return DEFAULT_TITLE


def clean_title(raw: str) -> str | None:
    """Normalize a provider-suggested title; None if it is unusable."""
    lines = raw.strip().splitlines()
    title = lines[0] if lines else ""
    title = title.strip().strip("\"'`*").strip()
    if title.lower().startswith("title:"):
        title = title[len("title:") :].strip()
    title = title.rstrip(".")
    if len(title.split()) > MAX_TITLE_WORDS:
        return None
    if len(title) > MAX_TITLE_LENGTH:
        title = title[: MAX_TITLE_LENGTH - 3].rstrip() + "..."
    if len(title) < MIN_TITLE_LENGTH:
        return None
    return title


def should_generate_title(message: str, history: Sequence[Message], current_title: str) -> bool:
    """Whether a message should trigger automatic titling.

    Only the first user message of a conversation that still carries a
    generic title, and only if it is longer than 5 characters.
    """
    user_messages = [m for m in history if m.is_from_user]
    is_first_user_message = len(user_messages) <= 1
    meaningful = len(message.strip()) > 5
    return is_first_user_message and current_title in GENERIC_TITLES and meaningful


class TitleGenerator:
    """Derives conversation titles with the orchestrator's selected model."""

    def __init__(self, orchestrator: ResponseOrchestrator):
        self._orchestrator = orchestrator

    async def derive_title(self, message: str) -> str:
        """Return a short title for ``message``. Never raises."""
        try:
            model = self._orchestrator.selected_model
            provider = self._orchestrator.resolve_provider(model)
            raw = await provider.generate(TITLE_PROMPT.format(message=message), [], model=model.id)
            title = clean_title(raw)
            if title is not None:
                logger.info(f"Generated title: {title}")
                return title
            logger.info("Provider title rejected, using keyword table")
        except Exception as e:
            logger.warning(f"Title generation failed, using keyword table: {e}")

        return keyword_title(message)

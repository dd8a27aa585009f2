"""
Chat Session.

Caller-level controller for one open conversation. It owns the send flow the
orchestrator deliberately leaves to its callers:

1. Persist the user's message (on failure, hand the typed input back).
2. Auto-title the conversation on its first meaningful message.
3. Generate a reply; on a fallback-eligible error, switch to the fallback
   model and retry exactly once.
4. Persist the reply.

Results that arrive after ``abandon()`` are not applied to the session.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from chatbot.events import ConversationEvent, ConversationEventType, EventBus
from chatbot.exceptions import ChatbotError, ConfigurationError
from chatbot.fallback import FallbackPolicy
from chatbot.models import Conversation, Message
from chatbot.orchestrator import ResponseOrchestrator
from chatbot.store.base import ConversationStore
from chatbot.titles import TitleGenerator, should_generate_title

logger = logging.getLogger(__name__)

INTRODUCTION_PROMPT = (
    "Please introduce yourself as a helpful AI assistant and ask how you can help with {title}."
)
INTRODUCTION_FALLBACK = "Hello! I'm your AI assistant. How can I help you with {title} today?"


@dataclass
class SendResult:
    """Outcome of one send, ready for the UI to render."""

    user_message: Message | None = None
    reply: Message | None = None
    error: ChatbotError | None = None
    restored_input: str | None = None
    used_fallback: bool = False
    title: str | None = None
    stale: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and self.reply is not None

    @property
    def banner(self) -> str | None:
        """Dismissible banner text, if the send failed."""
        return self.error.user_message if self.error else None


class ChatSession:
    """Send flow for a single conversation.

    Without an explicit ``fallback_policy`` the session falls back to the
    catalog's fallback model, or not at all if the catalog declares none.

    Raises:
        ConfigurationError: If the policy names a model missing from the catalog
    """

    def __init__(
        self,
        conversation: Conversation,
        store: ConversationStore,
        orchestrator: ResponseOrchestrator,
        *,
        fallback_policy: FallbackPolicy | None = None,
        title_generator: TitleGenerator | None = None,
        events: EventBus | None = None,
        messages: Sequence[Message] = (),
    ):
        self.conversation = conversation
        self._store = store
        self._orchestrator = orchestrator
        self._fallback_policy = fallback_policy or FallbackPolicy.for_catalog(orchestrator.catalog)
        fallback_id = self._fallback_policy.fallback_model_id
        if fallback_id is not None and fallback_id not in orchestrator.catalog:
            raise ConfigurationError(
                f"Fallback model {fallback_id} is not in the model catalog",
                details={"model_id": fallback_id},
            )
        self._title_generator = title_generator or TitleGenerator(orchestrator)
        self._events = events or orchestrator.events
        self._messages: list[Message] = list(messages)
        self._token = 0
        self._sending = False

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def is_sending(self) -> bool:
        return self._sending

    async def load(self) -> list[Message]:
        """Replace local history with the stored messages."""
        self._messages = await self._store.fetch_messages(self.conversation.id)
        return list(self._messages)

    def abandon(self) -> None:
        """Drop interest in the in-flight send (e.g. the view went away)."""
        self._token += 1
        self._sending = False
        logger.info("Send abandoned", extra=self._log_extra())

    def _is_stale(self, token: int) -> bool:
        return token != self._token

    def _log_extra(self, error: ChatbotError | None = None) -> dict[str, str]:
        """Context fields attached to every session log record."""
        extra = {
            "conversation_id": self.conversation.id,
            "model_id": self._orchestrator.selected_model.id,
        }
        if error is not None:
            extra["error_kind"] = error.kind.value
        return extra

    async def send(self, text: str) -> SendResult:
        """Send a user message and obtain a reply.

        Blank input is ignored. Failures are returned in the result, never
        raised, and carry the typed input so it can be restored.

        Raises:
            RuntimeError: If a send is already in flight
        """
        content = text.strip()
        if not content:
            return SendResult()

        if self._sending:
            raise RuntimeError("A message is already being sent")

        self._token += 1
        token = self._token
        self._sending = True
        try:
            return await self._send(content, token)
        finally:
            if not self._is_stale(token):
                self._sending = False

    async def _send(self, content: str, token: int) -> SendResult:
        history = list(self._messages)

        try:
            user_message = await self._store.append_message(
                self.conversation.id, content, is_from_user=True
            )
        except ChatbotError as e:
            logger.error(f"Failed to send user message: {e}", extra=self._log_extra(e))
            return SendResult(error=e, restored_input=content)

        result = SendResult(user_message=user_message)
        if self._is_stale(token):
            result.stale = True
            return result
        self._messages.append(user_message)

        if should_generate_title(content, self._messages, self.conversation.title):
            result.title = await self._update_title(content)

        try:
            reply_text, result.used_fallback = await self._generate(content, history)
        except ChatbotError as e:
            logger.error(f"Failed to generate AI response: {e}", extra=self._log_extra(e))
            result.error = e
            result.restored_input = content
            return result

        if self._is_stale(token):
            result.stale = True
            return result

        try:
            reply = await self._store.append_message(
                self.conversation.id, reply_text, is_from_user=False
            )
        except ChatbotError as e:
            logger.error(f"Failed to save AI response: {e}", extra=self._log_extra(e))
            result.error = e
            return result

        if self._is_stale(token):
            result.stale = True
            return result

        self._messages.append(reply)
        result.reply = reply
        return result

    async def _generate(self, content: str, history: list[Message]) -> tuple[str, bool]:
        """Generate a reply, falling back once when the policy allows."""
        try:
            return await self._orchestrator.generate(content, history), False
        except ChatbotError as e:
            current = self._orchestrator.selected_model.id
            if not self._fallback_policy.should_fallback(e, current):
                raise
            logger.warning(
                f"Auto-switching to {self._fallback_policy.fallback_model_id} "
                f"after {e.kind.value} from {current}",
                extra=self._log_extra(e),
            )

        self._orchestrator.switch_model(self._fallback_policy.fallback_model_id)
        return await self._orchestrator.generate(content, history), True

    async def _update_title(self, content: str) -> str | None:
        """Derive and persist a new title. Failures are logged, not surfaced."""
        title = await self._title_generator.derive_title(content)
        if title == self.conversation.title:
            return None

        try:
            await self._store.update_conversation_title(self.conversation.id, title)
        except ChatbotError as e:
            logger.warning(f"Failed to save generated title: {e}", extra=self._log_extra(e))
            return None

        self.conversation = self.conversation.with_title(title)
        self._events.publish(
            ConversationEvent(ConversationEventType.TITLE_UPDATED, self.conversation.id, title)
        )
        logger.info(f"Title updated to: {title}", extra=self._log_extra())
        return title


async def start_conversation(
    store: ConversationStore,
    orchestrator: ResponseOrchestrator,
    title: str,
    *,
    fallback_policy: FallbackPolicy | None = None,
    events: EventBus | None = None,
) -> ChatSession:
    """Create a conversation and seed it with an introduction from the assistant.

    The introduction is best effort: if generation fails a canned greeting is
    stored instead.

    Raises:
        ValueError: If the title is blank
        ConfigurationError: If the fallback policy names an unknown model
        StoreError: If the conversation cannot be created
        UnauthenticatedError: If no user is signed in
    """
    title = title.strip()
    if not title:
        raise ValueError("Conversation title must not be empty")

    events = events or orchestrator.events
    conversation = await store.create_conversation(title)
    events.publish(ConversationEvent(ConversationEventType.CREATED, conversation.id, title))

    try:
        introduction = await orchestrator.generate(INTRODUCTION_PROMPT.format(title=title))
    except ChatbotError as e:
        logger.warning(
            f"Introduction generation failed, using greeting: {e}",
            extra={
                "conversation_id": conversation.id,
                "model_id": orchestrator.selected_model.id,
                "error_kind": e.kind.value,
            },
        )
        orchestrator.clear_error()
        introduction = INTRODUCTION_FALLBACK.format(title=title)

    welcome = await store.append_message(conversation.id, introduction, is_from_user=False)

    return ChatSession(
        conversation,
        store,
        orchestrator,
        fallback_policy=fallback_policy,
        events=events,
        messages=[welcome],
    )


async def delete_conversation(
    store: ConversationStore,
    conversation_id: str,
    events: EventBus | None = None,
) -> None:
    """Delete a conversation and announce it.

    Raises:
        CannotDeleteLastError: If it is the user's only conversation
    """
    await store.delete_conversation(conversation_id)
    if events is not None:
        events.publish(ConversationEvent(ConversationEventType.DELETED, conversation_id))

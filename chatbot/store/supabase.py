"""Supabase Conversation Store.

Talks to a Supabase project over HTTPS: GoTrue (``/auth/v1``) for anonymous
sessions and PostgREST (``/rest/v1``) for the ``conversations`` and
``messages`` tables. Row-level security on the server scopes every query to
the signed-in user.

Example:
    >>> from chatbot.config import get_config
    >>> from chatbot.store.supabase import SupabaseConversationStore
    >>>
    >>> store = SupabaseConversationStore.from_config(get_config())
    >>> await store.sign_in_anonymously()
    >>> conversation = await store.create_conversation("New Chat")
    >>> await store.append_message(conversation.id, "Hello!", is_from_user=True)
"""

import logging
from typing import Any

import httpx
from pydantic import ValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from chatbot.config.settings import ChatbotConfig
from chatbot.exceptions import CannotDeleteLastError, StoreError, UnauthenticatedError
from chatbot.models import Conversation, Message, MessageType
from chatbot.store.base import ConversationStore
from chatbot.store.records import (
    ConversationRecord,
    CreateConversationRequest,
    InsertMessageRequest,
    MessageRecord,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "supabase"


class SupabaseConversationStore(ConversationStore):
    """Conversation store backed by Supabase (PostgREST + GoTrue).

    Attributes:
        base_url: Project URL (e.g., "https://abc.supabase.co")
        anon_key: Project anon/public key
    """

    def __init__(
        self,
        base_url: str,
        anon_key: str,
        http_client: httpx.AsyncClient | None = None,
        access_token: str | None = None,
        user_id: str | None = None,
    ):
        """Initialize Supabase store.

        Args:
            base_url: Project URL
            anon_key: Project anon key
            http_client: Shared client; a short-lived one is created per call if None
            access_token: Existing session token, if already signed in
            user_id: Id of the user owning ``access_token``
        """
        self.base_url = base_url.rstrip("/")
        self.anon_key = anon_key
        self._http_client = http_client
        self._access_token = access_token
        self._user_id = user_id

    @classmethod
    def from_config(
        cls, config: ChatbotConfig, http_client: httpx.AsyncClient | None = None
    ) -> "SupabaseConversationStore":
        """Build a store from validated configuration.

        Raises:
            ConfigurationError: If the store configuration is missing or invalid
        """
        config.validate_store_config()
        return cls(config.supabase_url, config.supabase_anon_key, http_client=http_client)

    @property
    def current_user_id(self) -> str | None:
        return self._user_id

    # ========================================================================
    # HTTP
    # ========================================================================

    def _headers(self, prefer: str | None = None) -> dict[str, str]:
        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {self._access_token or self.anon_key}",
            "Content-Type": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    @retry(
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        stop=stop_after_attempt(3),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
        reraise=True,
    )
    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send one request, retrying transport failures only."""
        url = f"{self.base_url}{path}"
        if self._http_client is not None:
            return await self._http_client.request(method, url, **kwargs)
        async with httpx.AsyncClient() as client:
            return await client.request(method, url, **kwargs)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json_data: Any = None,
        params: dict[str, str] | None = None,
        prefer: str | None = None,
    ) -> Any:
        """Make an authenticated request and return the parsed JSON body.

        Raises:
            UnauthenticatedError: If the session is missing or rejected (401)
            StoreError: For any other failure
        """
        try:
            response = await self._send(
                method,
                path,
                json=json_data,
                params=params,
                headers=self._headers(prefer),
            )
        except httpx.TimeoutException as e:
            raise StoreError(f"Store timeout: {e}", service=SERVICE_NAME) from e
        except httpx.HTTPError as e:
            raise StoreError(f"Store network error: {e}", service=SERVICE_NAME) from e

        if response.status_code == 401:
            raise UnauthenticatedError(status_code=401, service=SERVICE_NAME)

        if response.status_code >= 400:
            raise StoreError(
                f"HTTP {response.status_code}: {self._error_message(response)}",
                status_code=response.status_code,
                service=SERVICE_NAME,
            )

        if response.status_code == 204 or not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise StoreError("Store returned invalid JSON", service=SERVICE_NAME) from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:200] or "Unknown error"
        if isinstance(body, dict):
            for key in ("message", "msg", "error_description", "error"):
                if body.get(key):
                    return str(body[key])
        return str(body)[:200]

    @staticmethod
    def _single_row(body: Any) -> dict[str, Any]:
        if isinstance(body, list) and body:
            return body[0]
        if isinstance(body, dict):
            return body
        raise StoreError("Store returned no row", service=SERVICE_NAME)

    @staticmethod
    def _parse(model: type, row: Any) -> Any:
        try:
            return model.model_validate(row)
        except ValidationError as e:
            raise StoreError(f"Unexpected row shape: {e}", service=SERVICE_NAME) from e

    # ========================================================================
    # AUTHENTICATION
    # ========================================================================

    async def sign_in_anonymously(self) -> str:
        """Create an anonymous user session.

        Raises:
            UnauthenticatedError: If no user is returned
        """
        logger.info("Attempting anonymous sign in")
        self._access_token = None
        body = await self._request("POST", "/auth/v1/signup", json_data={})

        user = (body or {}).get("user") or {}
        access_token = (body or {}).get("access_token")
        if not access_token or not user.get("id"):
            logger.error("Anonymous sign in failed: no user returned")
            raise UnauthenticatedError("Anonymous sign in failed", service=SERVICE_NAME)

        self._access_token = access_token
        self._user_id = user["id"]
        logger.info(f"Anonymous sign in successful: {self._user_id}")
        return self._user_id

    async def sign_out(self) -> None:
        if self._access_token is not None:
            await self._request("POST", "/auth/v1/logout")
        self._access_token = None
        self._user_id = None

    # ========================================================================
    # CONVERSATIONS
    # ========================================================================

    async def create_conversation(self, title: str) -> Conversation:
        user_id = self._require_user()
        logger.info(f"Creating conversation for user: {user_id}")

        payload = CreateConversationRequest(user_id=user_id, title=title)
        body = await self._request(
            "POST",
            "/rest/v1/conversations",
            json_data=payload.model_dump(),
            prefer="return=representation",
        )
        record = self._parse(ConversationRecord, self._single_row(body))

        logger.info(
            f"Created conversation: {record.id}", extra={"conversation_id": record.id}
        )
        return Conversation.from_record(record)

    async def fetch_conversations(self, user_id: str | None = None) -> list[Conversation]:
        user_id = user_id or self._require_user()
        body = await self._request(
            "GET",
            "/rest/v1/conversations",
            params={
                "select": "*",
                "user_id": f"eq.{user_id}",
                "order": "updated_at.desc",
            },
        )
        return [Conversation.from_record(self._parse(ConversationRecord, row)) for row in body or []]

    async def update_conversation_title(self, conversation_id: str, title: str) -> None:
        self._require_user()
        body = await self._request(
            "PATCH",
            "/rest/v1/conversations",
            params={"id": f"eq.{conversation_id}"},
            json_data={"title": title},
            prefer="return=representation",
        )
        if not body:
            raise StoreError(f"Conversation not found: {conversation_id}", service=SERVICE_NAME)

    async def delete_conversation(self, conversation_id: str) -> None:
        user_id = self._require_user()

        body = await self._request(
            "GET",
            "/rest/v1/conversations",
            params={"select": "id", "user_id": f"eq.{user_id}"},
        )
        owned_ids = {row.get("id") for row in body or []}
        if conversation_id not in owned_ids:
            raise StoreError(f"Conversation not found: {conversation_id}", service=SERVICE_NAME)
        if len(owned_ids) <= 1:
            raise CannotDeleteLastError(service=SERVICE_NAME)

        await self._request(
            "DELETE",
            "/rest/v1/conversations",
            params={"id": f"eq.{conversation_id}"},
        )
        logger.info(f"Deleted conversation: {conversation_id}")

    # ========================================================================
    # MESSAGES
    # ========================================================================

    async def fetch_messages(self, conversation_id: str) -> list[Message]:
        self._require_user()
        body = await self._request(
            "GET",
            "/rest/v1/messages",
            params={
                "select": "*",
                "conversation_id": f"eq.{conversation_id}",
                "order": "created_at.asc",
            },
        )
        return [Message.from_record(self._parse(MessageRecord, row)) for row in body or []]

    async def append_message(
        self,
        conversation_id: str,
        content: str,
        is_from_user: bool,
        message_type: MessageType = MessageType.TEXT,
    ) -> Message:
        self._require_user()
        payload = InsertMessageRequest(
            conversation_id=conversation_id,
            content=content,
            is_from_user=is_from_user,
            message_type=message_type,
        )
        body = await self._request(
            "POST",
            "/rest/v1/messages",
            json_data=payload.model_dump(mode="json"),
            prefer="return=representation",
        )
        return Message.from_record(self._parse(MessageRecord, self._single_row(body)))

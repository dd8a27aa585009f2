"""
Groq Provider.

Groq exposes an OpenAI-compatible chat completions API, so this adapter
drives it with the ``openai`` client pointed at Groq's base URL. Client-side
retries are disabled: each ``generate`` call is exactly one attempt.

Usage:
    from chatbot.providers.groq import GroqProvider

    provider = GroqProvider(api_key=config.groq_api_key)
    registry.register(provider)
    reply = await provider.generate("Hello", history, model="mixtral-8x7b-32768")
"""

import logging
from collections.abc import Sequence

import httpx
import openai
from openai import AsyncOpenAI

from chatbot.catalog import ProviderId
from chatbot.config.settings import is_valid_groq_key
from chatbot.exceptions import (
    GenerationFailedError,
    InvalidCredentialError,
    MalformedResponseError,
    ModelNotFoundError,
    NotConfiguredError,
    ProviderError,
    RateLimitError,
    UnavailableError,
)
from chatbot.models import Message
from chatbot.providers.base import ProviderAdapter

logger = logging.getLogger(__name__)

GROQ_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_MODEL = "llama-3.1-8b-instant"


class GroqProvider(ProviderAdapter):
    """Groq chat completions provider.

    Sends the system instruction, the last 5 history messages and the new
    message as chat-completion messages.
    """

    history_limit = 5

    def __init__(
        self,
        api_key: str | None,
        model: str = DEFAULT_MODEL,
        base_url: str = GROQ_BASE_URL,
        max_tokens: int = 1024,
        temperature: float = 0.7,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize Groq provider.

        Args:
            api_key: Groq API key (``gsk_...``)
            model: Default model id
            base_url: OpenAI-compatible API base URL
            max_tokens: Maximum tokens in a reply
            temperature: Sampling temperature
            http_client: Custom httpx client handed to the OpenAI client
        """
        self._api_key = api_key or ""
        self._model = model
        self._base_url = base_url
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._http_client = http_client
        self._client: AsyncOpenAI | None = None

    @property
    def provider_id(self) -> ProviderId:
        return ProviderId.GROQ

    @property
    def name(self) -> str:
        return "Groq"

    @property
    def model_id(self) -> str:
        return self._model

    @property
    def is_available(self) -> bool:
        return is_valid_groq_key(self._api_key)

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self._api_key,
                base_url=self._base_url,
                max_retries=0,
                http_client=self._http_client,
            )
        return self._client

    async def generate(
        self,
        message: str,
        history: Sequence[Message],
        *,
        model: str | None = None,
    ) -> str:
        """Generate a reply via Groq chat completions."""
        if not self.is_available:
            raise NotConfiguredError("Groq API key not found", service=self.name)

        model = model or self._model
        logger.info(f"Sending request to Groq: {model}", extra={"model_id": model})

        try:
            response = await self._get_client().chat.completions.create(
                model=model,
                messages=self.build_chat_messages(message, history),
                max_tokens=self._max_tokens,
                temperature=self._temperature,
            )
        except openai.APIStatusError as e:
            raise self._map_status_error(e, model) from e
        except openai.APIConnectionError as e:
            raise GenerationFailedError(f"Network error: {e}", service=self.name) from e
        except openai.APIResponseValidationError as e:
            raise MalformedResponseError(
                f"Could not parse response: {e}", service=self.name
            ) from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise MalformedResponseError(
                "Response contained no message choices", service=self.name
            ) from e

        return self.clean_text(content)

    def _map_status_error(self, error: openai.APIStatusError, model: str) -> ProviderError:
        status = error.status_code

        if isinstance(error, (openai.AuthenticationError, openai.PermissionDeniedError)):
            return InvalidCredentialError(
                "Authentication rejected by provider", status_code=status, service=self.name
            )
        if isinstance(error, openai.NotFoundError):
            return ModelNotFoundError(f"Model not found: {model}", model=model, service=self.name)
        if isinstance(error, openai.RateLimitError):
            retry_after = error.response.headers.get("retry-after")
            try:
                seconds = float(retry_after) if retry_after is not None else None
            except ValueError:
                seconds = None
            return RateLimitError(retry_after=seconds, service=self.name)
        if status == 503:
            return UnavailableError(service=self.name)
        return GenerationFailedError(
            f"HTTP {status}: API Error", status_code=status, service=self.name
        )

    async def verify_credential(self) -> tuple[bool, str | None]:
        """Check the key against the live API (``GET /models``).

        Explicit diagnostic only; ``is_available`` never calls this.

        Returns:
            (is_valid, error description or None)
        """
        if not self.is_available:
            return False, "No valid API key configured"

        try:
            await self._get_client().models.list()
        except openai.AuthenticationError:
            return False, "Invalid or expired token"
        except openai.APIStatusError as e:
            return False, f"HTTP {e.status_code}"
        except openai.APIError as e:
            return False, str(e)

        return True, None

"""
Hugging Face Inference API Provider.

Calls the hosted text-generation endpoint for a model
(``POST {base_url}/{model}``) with a bearer token.

Usage:
    from chatbot.providers.huggingface import HuggingFaceProvider

    provider = HuggingFaceProvider(api_key=config.huggingface_api_key)
    registry.register(provider)
"""

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from chatbot.catalog import ProviderId
from chatbot.config.settings import is_valid_huggingface_key
from chatbot.exceptions import (
    GenerationFailedError,
    MalformedResponseError,
    NotConfiguredError,
    UnavailableError,
)
from chatbot.models import Message
from chatbot.providers.base import ProviderAdapter, raise_for_provider_status

logger = logging.getLogger(__name__)

HUGGINGFACE_BASE_URL = "https://api-inference.huggingface.co/models"
DEFAULT_MODEL = "meta-llama/Llama-2-7b-chat-hf"

GENERATION_PARAMETERS = {
    "max_new_tokens": 512,
    "temperature": 0.7,
    "top_p": 0.95,
    "repetition_penalty": 1.1,
    "return_full_text": False,
}


class HuggingFaceProvider(ProviderAdapter):
    """Hugging Face Inference API provider.

    Sends the last 3 history messages as a plain-text transcript.
    """

    history_limit = 3

    def __init__(
        self,
        api_key: str | None,
        model: str = DEFAULT_MODEL,
        base_url: str = HUGGINGFACE_BASE_URL,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize Hugging Face provider.

        Args:
            api_key: Hugging Face access token (``hf_...``)
            model: Default model repository id
            base_url: Inference API base URL
            http_client: Shared client; a short-lived one is created per call if None
        """
        self._api_key = api_key or ""
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._http_client = http_client

    @property
    def provider_id(self) -> ProviderId:
        return ProviderId.HUGGINGFACE

    @property
    def name(self) -> str:
        return "Hugging Face"

    @property
    def model_id(self) -> str:
        return self._model

    @property
    def is_available(self) -> bool:
        return is_valid_huggingface_key(self._api_key)

    def build_prompt(self, message: str, history: Sequence[Message]) -> str:
        """Render system instruction, recent history and message as a transcript."""
        lines = [self.system_instruction, ""]
        for item in self.recent_history(history):
            speaker = "User" if item.is_from_user else "Assistant"
            lines.append(f"{speaker}: {item.content}")
        lines.append(f"User: {message}")
        lines.append("Assistant:")
        return "\n".join(lines)

    async def generate(
        self,
        message: str,
        history: Sequence[Message],
        *,
        model: str | None = None,
    ) -> str:
        """Generate a reply via the Inference API."""
        if not self.is_available:
            raise NotConfiguredError("Hugging Face API key not found", service=self.name)

        model = model or self._model
        payload = {
            "inputs": self.build_prompt(message, history),
            "parameters": GENERATION_PARAMETERS,
            "options": {"wait_for_model": False, "use_cache": False},
        }

        logger.info(f"Sending request to Hugging Face: {model}", extra={"model_id": model})

        try:
            if self._http_client is not None:
                response = await self._post(self._http_client, model, payload)
            else:
                async with httpx.AsyncClient() as client:
                    response = await self._post(client, model, payload)
        except httpx.HTTPError as e:
            raise GenerationFailedError(f"Network error: {e}", service=self.name) from e

        logger.debug(f"Hugging Face response status: {response.status_code}")
        raise_for_provider_status(response, service=self.name, model=model)

        try:
            body = response.json()
        except ValueError as e:
            raise MalformedResponseError("Response is not JSON", service=self.name) from e

        return self.clean_text(self._extract_text(body))

    async def _post(
        self, client: httpx.AsyncClient, model: str, payload: dict[str, Any]
    ) -> httpx.Response:
        return await client.post(
            f"{self._base_url}/{model}",
            json=payload,
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
            },
        )

    def _extract_text(self, body: Any) -> str:
        """Pull generated text out of the Inference API response shapes."""
        if isinstance(body, list) and body and isinstance(body[0], dict):
            return body[0].get("generated_text", "")

        if isinstance(body, dict):
            if "generated_text" in body:
                return body["generated_text"]
            if "error" in body:
                error = str(body["error"])
                if "loading" in error.lower():
                    raise UnavailableError(
                        error, retry_after=body.get("estimated_time"), service=self.name
                    )
                raise GenerationFailedError(error, service=self.name)

        raise MalformedResponseError("Unexpected response shape", service=self.name)

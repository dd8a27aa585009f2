"""
Configuration management for chatbot-core.

Loads provider credentials and the conversation store endpoint from
environment variables. Empty or placeholder values mean "not configured";
they never abort startup. A store URL that is present but malformed or not
HTTPS is a real misconfiguration and is rejected by ``validate_store_config``.
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

from chatbot.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Substrings that mark a value copied from a template and never filled in
PLACEHOLDER_MARKERS = ("YOUR_", "your-project", "placeholder")

GROQ_KEY_PREFIX = "gsk_"
GROQ_KEY_MIN_LENGTH = 50
HUGGINGFACE_KEY_PREFIX = "hf_"
SUPABASE_ANON_KEY_PREFIX = "eyJ"


def is_placeholder(value: str | None) -> bool:
    """Return True if a configuration value is empty or a template placeholder."""
    if value is None or not value.strip():
        return True
    return any(marker in value for marker in PLACEHOLDER_MARKERS)


def is_valid_groq_key(key: str | None) -> bool:
    """Groq keys start with ``gsk_`` and are at least 50 characters."""
    if is_placeholder(key):
        return False
    return key.startswith(GROQ_KEY_PREFIX) and len(key) >= GROQ_KEY_MIN_LENGTH


def is_valid_huggingface_key(key: str | None) -> bool:
    """Hugging Face access tokens start with ``hf_``."""
    if is_placeholder(key):
        return False
    return key.startswith(HUGGINGFACE_KEY_PREFIX) and len(key) > len(HUGGINGFACE_KEY_PREFIX)


@dataclass
class ChatbotConfig:
    """Runtime configuration: named credentials plus the store endpoint."""

    groq_api_key: str = ""
    huggingface_api_key: str = ""
    supabase_url: str = ""
    supabase_anon_key: str = ""
    log_level: str = "INFO"
    catalog_path: Path | None = None

    @property
    def has_groq_key(self) -> bool:
        return is_valid_groq_key(self.groq_api_key)

    @property
    def has_huggingface_key(self) -> bool:
        return is_valid_huggingface_key(self.huggingface_api_key)

    @property
    def has_any_provider_key(self) -> bool:
        return self.has_groq_key or self.has_huggingface_key

    @property
    def store_configured(self) -> bool:
        """True when both store values are present and not placeholders."""
        return not is_placeholder(self.supabase_url) and not is_placeholder(
            self.supabase_anon_key
        )

    def validate_store_config(self) -> None:
        """Validate the store endpoint and key.

        Raises:
            ConfigurationError: If credentials are missing, the URL is
                malformed, the URL is not HTTPS, or the key is malformed.
        """
        if not self.store_configured:
            raise ConfigurationError(
                "Supabase credentials not configured. Set SUPABASE_URL and SUPABASE_ANON_KEY.",
                details={"reason": "missing_credentials"},
            )

        parsed = urlparse(self.supabase_url)
        if not parsed.scheme or not parsed.netloc:
            raise ConfigurationError(
                "Invalid Supabase project URL. Please check your configuration.",
                details={"reason": "invalid_url"},
            )

        if parsed.scheme != "https":
            raise ConfigurationError(
                "Supabase URL must use HTTPS.",
                details={"reason": "insecure_url"},
            )

        if not self.supabase_anon_key.startswith(SUPABASE_ANON_KEY_PREFIX):
            raise ConfigurationError(
                "Supabase anon key is malformed.",
                details={"reason": "invalid_key"},
            )


def load_config(environ: Mapping[str, str] | None = None) -> ChatbotConfig:
    """
    Build configuration from environment variables.

    Args:
        environ: Mapping to read from (defaults to ``os.environ``)

    Returns:
        ChatbotConfig populated from the environment.
    """
    env = os.environ if environ is None else environ

    catalog_path = env.get("CHATBOT_MODEL_CATALOG")
    config = ChatbotConfig(
        groq_api_key=env.get("GROQ_API_KEY", "").strip(),
        huggingface_api_key=env.get("HUGGINGFACE_API_KEY", "").strip(),
        supabase_url=env.get("SUPABASE_URL", "").strip().rstrip("/"),
        supabase_anon_key=env.get("SUPABASE_ANON_KEY", "").strip(),
        log_level=env.get("CHATBOT_LOG_LEVEL", "INFO"),
        catalog_path=Path(catalog_path) if catalog_path else None,
    )

    logger.info(
        f"Configuration loaded: groq={config.has_groq_key}, "
        f"huggingface={config.has_huggingface_key}, store={config.store_configured}"
    )
    return config


_config: ChatbotConfig | None = None


def get_config() -> ChatbotConfig:
    """Return the process configuration, loading it on first use."""
    global _config

    if _config is None:
        _config = load_config()
    return _config


def clear_config() -> None:
    """Clear cached configuration (for testing)."""
    global _config
    _config = None

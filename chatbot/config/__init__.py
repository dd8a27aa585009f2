"""
Configuration module.

Provides access to provider credentials and store settings.

Usage:
    from chatbot.config import get_config

    config = get_config()
    if config.has_groq_key:
        ...
"""

from chatbot.config.settings import (
    ChatbotConfig,
    clear_config,
    get_config,
    is_placeholder,
    is_valid_groq_key,
    is_valid_huggingface_key,
    load_config,
)

__all__ = [
    "ChatbotConfig",
    "clear_config",
    "get_config",
    "is_placeholder",
    "is_valid_groq_key",
    "is_valid_huggingface_key",
    "load_config",
]

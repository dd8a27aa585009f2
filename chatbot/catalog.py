"""
Model Catalog.

Enumerates the user-selectable models. Each model binds to exactly one
provider; the set of models is configuration (``config/models.yaml``), so
adding a model does not touch the orchestrator.

Usage:
    from chatbot.catalog import ModelCatalog

    catalog = ModelCatalog.load()
    for model in catalog.all():
        print(model.display_name, model.provider_id.value)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from chatbot.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).parent / "config" / "models.yaml"


class ProviderId(str, Enum):
    """Identity of a backing text-generation service."""

    HUGGINGFACE = "huggingface"
    GOOGLE = "google"
    GROQ = "groq"
    MOCK = "mock"


@dataclass(frozen=True)
class ModelDescriptor:
    """Static catalog entry for one selectable model."""

    id: str
    display_name: str
    provider_id: ProviderId
    is_free: bool = True


class ModelCatalog:
    """Ordered, immutable set of model descriptors."""

    def __init__(
        self,
        models: list[ModelDescriptor],
        default_model_id: str | None = None,
        fallback_model_id: str | None = None,
    ):
        if not models:
            raise ConfigurationError("Model catalog is empty")

        self._models: dict[str, ModelDescriptor] = {}
        for model in models:
            if model.id in self._models:
                raise ConfigurationError(f"Duplicate model in catalog: {model.id}")
            self._models[model.id] = model

        self._default_id = default_model_id or models[0].id
        self._fallback_id = fallback_model_id

        for label, model_id in (("default", self._default_id), ("fallback", self._fallback_id)):
            if model_id is not None and model_id not in self._models:
                raise ConfigurationError(f"Unknown {label} model in catalog: {model_id}")

    @classmethod
    def load(cls, path: Path | None = None) -> "ModelCatalog":
        """Load the catalog from YAML.

        Args:
            path: Catalog file (uses the bundled catalog if None)

        Raises:
            ConfigurationError: If the file is missing or malformed.
        """
        path = path or DEFAULT_CATALOG_PATH

        try:
            with open(path) as f:
                config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load model catalog {path}: {e}") from e

        catalog = cls.from_dict(config)
        logger.info(f"Loaded {len(catalog)} models from {path}")
        return catalog

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> "ModelCatalog":
        """Build a catalog from an already-parsed mapping."""
        models = []
        for entry in config.get("models", []):
            try:
                models.append(
                    ModelDescriptor(
                        id=str(entry["id"]),
                        display_name=str(entry.get("display_name", entry["id"])),
                        provider_id=ProviderId(entry["provider"]),
                        is_free=bool(entry.get("is_free", True)),
                    )
                )
            except (KeyError, TypeError, ValueError) as e:
                raise ConfigurationError(f"Invalid catalog entry {entry!r}: {e}") from e

        return cls(
            models,
            default_model_id=config.get("default_model"),
            fallback_model_id=config.get("fallback_model"),
        )

    def all(self) -> list[ModelDescriptor]:
        """All models in declaration order."""
        return list(self._models.values())

    def get(self, model_id: str) -> ModelDescriptor:
        """Look up a model by id.

        Raises:
            KeyError: If the model is not in the catalog
        """
        if model_id not in self._models:
            available = ", ".join(self._models) or "none"
            raise KeyError(f"Model not found: {model_id}. Available: {available}")
        return self._models[model_id]

    def display_name(self, model_id: str) -> str:
        return self.get(model_id).display_name

    def has_model(self, model_id: str) -> bool:
        return model_id in self._models

    def models_for(self, provider_id: ProviderId) -> list[ModelDescriptor]:
        """Models bound to one provider."""
        return [m for m in self._models.values() if m.provider_id == provider_id]

    @property
    def default_model(self) -> ModelDescriptor:
        return self._models[self._default_id]

    @property
    def fallback_model(self) -> ModelDescriptor | None:
        if self._fallback_id is None:
            return None
        return self._models[self._fallback_id]

    def __len__(self) -> int:
        return len(self._models)

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._models

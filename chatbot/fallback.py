"""
Caller-side fallback policy.

Decides which generation errors justify one retry against the designated
fallback model. Kept outside the orchestrator so the trigger set can be
configured per caller.
"""

from dataclasses import dataclass, field

from chatbot.catalog import ModelCatalog
from chatbot.exceptions import ErrorKind, error_kind

DEFAULT_TRIGGERS = frozenset({ErrorKind.MODEL_NOT_FOUND, ErrorKind.UNAVAILABLE})


@dataclass(frozen=True)
class FallbackPolicy:
    """Which error kinds switch the session to ``fallback_model_id``.

    A policy without a fallback model never falls back.
    """

    fallback_model_id: str | None = "mock-ai"
    triggers: frozenset[ErrorKind] = field(default=DEFAULT_TRIGGERS)

    @classmethod
    def for_catalog(
        cls, catalog: ModelCatalog, triggers: frozenset[ErrorKind] = DEFAULT_TRIGGERS
    ) -> "FallbackPolicy":
        """Policy targeting the catalog's declared fallback model, if any."""
        fallback = catalog.fallback_model
        return cls(fallback_model_id=fallback.id if fallback else None, triggers=triggers)

    def should_fallback(self, error: BaseException, current_model_id: str) -> bool:
        """True if ``error`` is a trigger and we are not already on the fallback."""
        if self.fallback_model_id is None or current_model_id == self.fallback_model_id:
            return False
        return error_kind(error) in self.triggers

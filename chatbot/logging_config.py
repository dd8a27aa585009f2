"""
Structured JSON logging configuration.

Every record is emitted as one JSON object per line, carrying the request,
provider and conversation identifiers when the caller passes them via
``extra``. Records logged with a ``ChatbotError`` in ``exc_info`` also carry
its ``error_kind`` and ``service``, so failures can be grouped by kind
without parsing messages.
"""

import json
import logging
import sys
from datetime import datetime, timezone

from chatbot.exceptions import ChatbotError

# Context fields copied from ``extra`` into the JSON payload when present
CONTEXT_FIELDS = ("request_id", "provider_id", "model_id", "conversation_id", "error_kind")


class JSONFormatter(logging.Formatter):
    """
    Custom JSON formatter for structured logging.

    Example:
        >>> handler = logging.StreamHandler()
        >>> handler.setFormatter(JSONFormatter())
        >>> logger = logging.getLogger(__name__)
        >>> logger.addHandler(handler)
        >>> logger.info("Generation started", extra={"request_id": 3})
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON.

        Args:
            record: Python logging.LogRecord

        Returns:
            JSON string with structured log data
        """
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for field_name in CONTEXT_FIELDS:
            if hasattr(record, field_name):
                log_entry[field_name] = getattr(record, field_name)

        if record.exc_info:
            error = record.exc_info[1]
            if isinstance(error, ChatbotError):
                log_entry.setdefault("error_kind", error.kind.value)
                if error.service:
                    log_entry["service"] = error.service
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(level: str = "INFO") -> None:
    """
    Configure structured JSON logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(JSONFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)

    # Set levels for noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)

    logging.info("Structured JSON logging configured", extra={"log_level": level})

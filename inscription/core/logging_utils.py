import json
import logging
import time
from collections import Counter, deque
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# Every LogRecord has these; anything else arrived through ``extra``
_STANDARD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime"}

# Libraries that are chatty at INFO
_QUIET_LOGGERS = ("sqlalchemy.engine", "uvicorn.access", "asyncio")

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(log_level: str = "INFO", log_format: str = "text"):
    """
    Route all logging to stderr.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR
        log_format: "json" for one JSON object per line, anything else for text
    """
    handler = logging.StreamHandler()
    handler.setFormatter(
        JsonFormatter() if log_format.lower() == "json" else logging.Formatter(TEXT_FORMAT)
    )

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug(f"Logging configured: level={log_level}, format={log_format}")


class JsonFormatter(logging.Formatter):
    """JSON lines; ``extra`` fields become top-level keys"""

    def format(self, record):
        entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        entry.update(
            (key, _serializable(value))
            for key, value in vars(record).items()
            if key not in _STANDARD_ATTRIBUTES and not key.startswith("_")
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def _serializable(value):
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


class ErrorTracker:
    """
    Counts errors by type and keeps the most recent ones.

    Read by /health; the counters live in the process and reset on restart.
    """

    def __init__(self, max_history: int = 100):
        self.error_counts: Counter = Counter()
        self.last_errors: deque = deque(maxlen=max_history)

    def track_error(
        self, error_type: str, error_message: str, context: Dict[str, Any] = None
    ):
        self.error_counts[error_type] += 1
        self.last_errors.append(
            {
                "timestamp": time.time(),
                "type": error_type,
                "message": error_message,
                "context": context or {},
            }
        )
        logger.warning(
            f"Error tracked: {error_type} (#{self.error_counts[error_type]})",
            extra={"error_type": error_type, "error_message": error_message, "context": context},
        )

    def get_stats(self) -> Dict[str, Any]:
        return {
            "error_counts": dict(self.error_counts),
            "total_errors": sum(self.error_counts.values()),
            "unique_error_types": len(self.error_counts),
            "last_errors": list(self.last_errors)[-10:],
        }

    def reset_stats(self):
        self.error_counts.clear()
        self.last_errors.clear()


error_tracker = ErrorTracker()


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_business_event(
    event: str,
    entity_type: str,
    entity_id: Optional[int],
    details: Dict[str, Any] = None,
):
    """
    Log a registration milestone (member_registered, registration_replayed, ...)

    Args:
        event: Event name
        entity_type: member, subscription or system
        entity_id: Entity id, 0 for system events
        details: Extra payload, kept as a nested object in JSON logs
    """
    logger.info(
        f"Business event: {event} {entity_type}#{entity_id}",
        extra={
            "event": event,
            "entity_type": entity_type,
            "entity_id": entity_id,
            "details": details or {},
            "category": "business_event",
        },
    )

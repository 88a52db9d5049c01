"""
Structured logging configuration with trace IDs
"""
import contextvars
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from wealth_oven.core.config import get_settings

# Context variable to store trace ID across calls in one request
trace_id_var = contextvars.ContextVar("trace_id", default=None)

# Fields passed through `extra=` that end up in the JSON record
EXTRA_FIELDS = (
    "user_id",
    "auction_id",
    "bid_id",
    "purchase_id",
    "payment_intent_id",
    "request_id",
    "method",
    "path",
    "status_code",
    "duration_ms",
)


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter with trace ID and service fields"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname

        trace_id = trace_id_var.get()
        if trace_id:
            log_record["trace_id"] = trace_id

        log_record["service"] = "wealth-oven"

        for field in EXTRA_FIELDS:
            if hasattr(record, field):
                log_record[field] = getattr(record, field)


def setup_logging() -> logging.Logger:
    """Configure root logging (JSON or plain text)"""
    settings = get_settings()

    handler = logging.StreamHandler()
    if settings.LOG_JSON:
        handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(settings.LOG_LEVEL)

    # Reduce noise from libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    return root_logger


def set_trace_id(trace_id: str):
    """Set trace ID for current context"""
    trace_id_var.set(trace_id)


def generate_trace_id() -> str:
    """Generate a new trace ID"""
    return str(uuid.uuid4())

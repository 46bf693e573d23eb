# account_audit/config/logging.py

import json
import logging
from datetime import datetime, timezone

from account_audit.core.context import correlation_id_ctx, request_context_ctx


class JsonFormatter(logging.Formatter):
    def format(self, record):
        request = request_context_ctx.get()
        log_record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "correlation_id": correlation_id_ctx.get(),
            "ip_address": request.ip_address if request else None,
        }
        for key in ("account_id", "log_id", "error_kind", "error"):
            if key in record.__dict__:
                log_record[key] = record.__dict__[key]
        return json.dumps(log_record, default=str)


def configure_logging(log_level: str):
    """Install the JSON handler on the root logger. Repeated calls only update the level."""
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    if any(isinstance(h.formatter, JsonFormatter) for h in root_logger.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

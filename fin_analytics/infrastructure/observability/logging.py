"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from fin_analytics.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_profile(
    user_id: str,
    transaction_count: int,
    recurring_count: int,
    insight_count: int,
    duration_ms: float,
) -> None:
    """Log structured profile outcome for analysis"""
    logging.getLogger("fin_analytics.profile").info(
        "Profile built",
        extra={
            "user_id": user_id,
            "step": "profile_complete",
            "transaction_count": transaction_count,
            "recurring_count": recurring_count,
            "insight_count": insight_count,
            "duration_ms": duration_ms,
        },
    )

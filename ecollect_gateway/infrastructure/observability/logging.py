"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from ecollect_gateway.config import settings


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
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_accounts_loaded(
    request_id: str,
    source_counts: Dict[str, int],
    note_count: int,
    sms_count: int,
    duration_ms: float,
) -> None:
    """Log structured aggregation outcome"""
    logging.info(
        "Accounts aggregated",
        extra={
            "request_id": request_id,
            "step": "accounts_aggregated",
            "accounts": sum(source_counts.values()),
            "notes_only": source_counts.get("notes", 0),
            "sms_only": source_counts.get("sms", 0),
            "both": source_counts.get("both", 0),
            "notes_fetched": note_count,
            "sms_fetched": sms_count,
            "duration_ms": duration_ms,
        },
    )


def log_chat_completed(
    request_id: str,
    custnumber: str | None,
    mode: str,
    duration_ms: float,
) -> None:
    """Log structured assistant completion"""
    logging.info(
        "Assistant reply generated",
        extra={
            "request_id": request_id,
            "custnumber": custnumber,
            "step": "chat_complete",
            "mode": mode,
            "duration_ms": duration_ms,
        },
    )

"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from commission_engine.config import settings


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


def log_batch_outcome(
    month: str,
    processed: int,
    failed: int,
    cancelled: bool,
    duration_ms: float,
) -> None:
    """Log structured month recalculation outcome for analysis"""
    logging.getLogger("commission_engine.batch").info(
        "Month recalculation completed",
        extra={
            "month": month,
            "step": "recalculation_complete",
            "outcome": "success" if failed == 0 and not cancelled else "partial_failure",
            "processed": processed,
            "failed": failed,
            "cancelled": cancelled,
            "duration_ms": duration_ms,
        },
    )

"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List

from pythonjsonlogger import jsonlogger

from rate_truth.config import settings


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

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_analysis(
    request_id: str,
    method: str,
    final_apr: float,
    ai_estimated_apr: float,
    correction_applied: bool,
    warning_codes: List[str],
    duration_ms: float,
) -> None:
    """Log structured analysis outcome for auditing estimate quality"""
    logging.info(
        "Analysis completed",
        extra={
            "request_id": request_id,
            "step": "analysis_complete",
            "method": method,
            "final_apr": final_apr,
            "ai_estimated_apr": ai_estimated_apr,
            "apr_delta": round(final_apr - ai_estimated_apr, 2),
            "correction_applied": correction_applied,
            "warning_codes": warning_codes,
            "duration_ms": duration_ms,
        },
    )
    for code in warning_codes:
        logging.warning(
            "Engine warning",
            extra={"request_id": request_id, "warning_code": code},
        )

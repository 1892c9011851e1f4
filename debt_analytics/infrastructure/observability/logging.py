"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter stamping each record with UTC time, level and service name"""

    def __init__(self, *args, service_name: str = "debt-analytics", **kwargs):
        super().__init__(*args, **kwargs)
        self.service_name = service_name

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = self.service_name


def setup_logging(level: str = "INFO", service_name: str = "debt-analytics") -> None:
    """Route the root logger to stdout as JSON; safe to call more than once"""
    logger = logging.getLogger()
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s", service_name=service_name)
    )
    logger.addHandler(handler)


def log_report(
    request_id: str,
    report: str,
    subject: Dict[str, str],
    duration_ms: float,
    accounts: int = 1,
) -> None:
    """Log structured report outcome; subject is the owner_id and/or account_id"""
    logging.info(
        "Report completed",
        extra={
            "request_id": request_id,
            **subject,
            "step": "report_complete",
            "report": report,
            "accounts": accounts,
            "duration_ms": duration_ms,
        },
    )

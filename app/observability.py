"""Structured JSON logging for the risk-routing service"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from app.models import Transaction


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter with timestamp and service metadata"""

    service_name = "payment-risk-router"

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = self.service_name


def setup_logging(level: str = "INFO", service_name: str = "payment-risk-router") -> None:
    """Configure structured JSON logging on the root logger"""
    logger = logging.getLogger()
    logger.setLevel(level.upper())

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    formatter.service_name = service_name
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_decision(transaction: Transaction) -> None:
    """Log the routing outcome of a processed payment"""
    triggered = transaction.metadata.triggered_rules if transaction.metadata else []
    logging.getLogger("app.decisions").info(
        "Payment routed",
        extra={
            "transaction_id": transaction.id,
            "step": "routing_complete",
            "provider": transaction.provider.value,
            "status": transaction.status.value,
            "risk_score": transaction.risk_score,
            "triggered_rules": triggered,
        },
    )

"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger

from finledger.config import settings

logger = logging.getLogger("finledger")


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    root = logging.getLogger()
    root.setLevel(level)

    # Remove existing handlers
    root.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    root.addHandler(handler)


def log_ledger_movement(
    action: str,
    user_id: int,
    account_id: int,
    entry_id: int,
    direction: str,
    amount: Decimal,
    balance: Decimal,
) -> None:
    """Log one applied or reversed ledger entry with the resulting balance"""
    logger.info(
        f"Ledger entry {action}",
        extra={
            "step": f"ledger_{action}",
            "user_id": user_id,
            "account_id": account_id,
            "entry_id": entry_id,
            "direction": direction,
            "amount": str(amount),
            "balance": str(balance),
        },
    )


def log_investment_progress(
    action: str,
    user_id: int,
    schema_type: str,
    schema_id: int,
    expense_id: int,
    amount: Decimal,
) -> None:
    """Log a payment applied to or reverted from an investment schema"""
    logger.info(
        f"Investment payment {action}",
        extra={
            "step": f"investment_{action}",
            "user_id": user_id,
            "schema_type": schema_type,
            "schema_id": schema_id,
            "expense_id": expense_id,
            "amount": str(amount),
        },
    )


def log_domain_error(error: Exception, request_id: Optional[str] = None) -> None:
    """Domain errors are expected outcomes; log at warning level"""
    logger.warning(
        f"{type(error).__name__}: {error}",
        extra={"request_id": request_id, "error_type": type(error).__name__},
    )

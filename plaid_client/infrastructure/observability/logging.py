"""Structured JSON logging for Plaid calls"""

import logging
import sys
from datetime import datetime, timezone
from typing import IO, Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from plaid_client.config import get_settings

logger = logging.getLogger("plaid_client")


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def __init__(self, *args: Any, service_name: str = "plaid-client", **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.service_name = service_name

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = self.service_name


def setup_logging(
    level: str | None = None,
    service_name: str | None = None,
    stream: Optional[IO[str]] = None,
) -> None:
    """
    Route client logs to ``stream`` (stdout by default) as JSON.

    Opt-in for applications; importing the client never configures logging.
    Missing level and service name fall back to PLAID_* settings.
    """
    if level is None or service_name is None:
        config = get_settings()
        level = level or config.log_level
        service_name = service_name or config.service_name

    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(
        CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s", service_name=service_name)
    )
    logger.addHandler(handler)
    logger.propagate = False


def log_request(method: str, endpoint: str, status_code: int, duration_ms: float) -> None:
    """Log one completed HTTP exchange; envelopes carry secrets and are never logged"""
    logger.debug(
        "Plaid request completed",
        extra={
            "method": method,
            "endpoint": endpoint,
            "status_code": status_code,
            "duration_ms": duration_ms,
        },
    )


def log_transport_failure(method: str, endpoint: str, kind: str, error: Exception) -> None:
    """Debug trace only; the error itself is raised to the caller"""
    logger.debug(
        f"Plaid request failed: {error}",
        extra={"method": method, "endpoint": endpoint, "failure": kind},
    )

"""Structured logging configuration for the S3 Bucket Migrator."""

import json
import logging
import sys
from typing import Any, TextIO

from .utils.context import get_context_dict

SECRET_FIELDS = {"access_key", "secret_key", "session_token", "password"}


def setup_structured_logging(level: str | int = logging.INFO, stream: TextIO = sys.stdout) -> None:
    """Configure structured JSON-line logging, on stdout unless another stream is given."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[logging.StreamHandler(stream)],
        force=True,
    )


def log_resource_event(
    logger: logging.Logger,
    controller: str,
    resource_kind: str,
    resource_name: str,
    namespace: str,
    uid: str,
    event: str,
    reason: str,
    message: str,
    level: int = logging.INFO,
    **kwargs: Any,
) -> None:
    """Log a structured resource event."""
    log_data = {
        "controller": controller,
        "resource": resource_kind,
        "name": resource_name,
        "namespace": namespace,
        "uid": uid,
        "event": event,
        "reason": reason,
        "message": message,
    }
    log_data.update(kwargs)
    logger.log(level, json.dumps(sanitize_secrets(get_context_dict(log_data)), default=str))


def log_migration_event(
    logger: logging.Logger,
    event: str,
    source: str,
    target: str,
    level: int = logging.INFO,
    **kwargs: Any,
) -> None:
    """Log a structured per-bucket migration event with the run's correlation ID."""
    log_data = {"event": event, "source": source, "target": target}
    log_data.update(kwargs)
    logger.log(level, json.dumps(sanitize_secrets(get_context_dict(log_data)), default=str))


def sanitize_secrets(log_data: dict[str, Any]) -> dict[str, Any]:
    """Remove secret fields from log data."""
    sanitized = log_data.copy()
    for field in SECRET_FIELDS:
        if field in sanitized:
            sanitized[field] = "***REDACTED***"
    return sanitized

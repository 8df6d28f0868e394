"""Operator entry point for the S3 Bucket Migrator."""

from __future__ import annotations

import os
from typing import Any

import kopf

from . import handlers  # noqa: F401  # registers the kopf handlers
from . import health
from . import logging as structured_logging
from .tracing import initialize_tracing


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    """Configure the operator."""
    structured_logging.setup_structured_logging(os.getenv("LOG_LEVEL", "INFO"))
    initialize_tracing()

    # Annotations keep kopf progress out of the status we own
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage()
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage()

    settings.posting.level = 0
    settings.networking.request_timeout = 30.0
    settings.execution.max_workers = int(os.getenv("OPERATOR_MAX_WORKERS", "4"))

    metrics_port = int(os.getenv("METRICS_PORT", "8080"))
    health.start_metrics_server(metrics_port)
    health.mark_ready()


@kopf.on.cleanup()
def shutdown(**_: Any) -> None:
    """Report not-ready while the operator stops."""
    health.mark_ready(False)

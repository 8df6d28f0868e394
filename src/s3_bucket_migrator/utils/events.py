"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import (
    EVENT_REASON_BUCKET_FAILED,
    EVENT_REASON_BUCKET_MIGRATED,
    EVENT_REASON_MIGRATION_SUCCEEDED,
    EVENT_REASON_PLAN_READY,
    EVENT_REASON_RECONCILE_FAILED,
    EVENT_REASON_RECONCILE_STARTED,
    EVENT_REASON_VALIDATE_FAILED,
    EVENT_REASON_VALIDATE_SUCCEEDED,
)


def emit_event(
    meta: dict[str, Any],
    reason: str,
    message: str,
    type_: str = "Normal",
) -> None:
    """Emit a Kubernetes event.

    Args:
        meta: Resource metadata
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        meta,
        reason=reason,
        message=message,
        type=type_,
    )


def emit_reconcile_started(meta: dict[str, Any]) -> None:
    """Emit reconcile started event."""
    emit_event(meta, EVENT_REASON_RECONCILE_STARTED, "Reconciliation started")


def emit_reconcile_failed(meta: dict[str, Any], message: str) -> None:
    """Emit reconcile failed event."""
    emit_event(meta, EVENT_REASON_RECONCILE_FAILED, message, type_="Warning")


def emit_validate_succeeded(meta: dict[str, Any]) -> None:
    emit_event(meta, EVENT_REASON_VALIDATE_SUCCEEDED, "Validation succeeded")


def emit_validate_failed(meta: dict[str, Any], message: str) -> None:
    emit_event(meta, EVENT_REASON_VALIDATE_FAILED, message, type_="Warning")


def emit_plan_ready(meta: dict[str, Any], bucket_count: int) -> None:
    """Emit plan ready event."""
    emit_event(meta, EVENT_REASON_PLAN_READY, f"Migration plan ready for {bucket_count} bucket(s)")


def emit_bucket_migrated(meta: dict[str, Any], source: str, target: str) -> None:
    """Emit bucket migrated event."""
    emit_event(meta, EVENT_REASON_BUCKET_MIGRATED, f"Bucket {source} migrated to {target}")


def emit_bucket_failed(meta: dict[str, Any], source: str, message: str) -> None:
    """Emit bucket migration failed event."""
    emit_event(meta, EVENT_REASON_BUCKET_FAILED, f"Bucket {source}: {message}", type_="Warning")


def emit_migration_succeeded(meta: dict[str, Any], bucket_count: int) -> None:
    """Emit migration succeeded event."""
    emit_event(meta, EVENT_REASON_MIGRATION_SUCCEEDED, f"Migrated {bucket_count} bucket(s)")

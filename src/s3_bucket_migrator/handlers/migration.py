"""Handler for BucketMigration CRD."""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Any

import kopf
from kubernetes.client.exceptions import ApiException

from .. import metrics
from ..builders.migration import create_migration_request_from_spec, create_settings_from_spec
from ..builders.provider import create_provider_from_spec
from ..config import MigrationSettings
from ..constants import (
    API_GROUP_VERSION,
    KIND_BUCKET_MIGRATION,
    PHASE_FAILED,
    PHASE_PARTIALLY_FAILED,
    PHASE_PLANNED,
    PHASE_SUCCEEDED,
)
from ..exceptions import CredentialError, MigrationConfigError
from ..migration.planner import build_plan
from ..migration.reporting import STATUS_PARTIAL, STATUS_SUCCEEDED
from ..migration.runner import MigrationRunner, RunSummary
from ..tracing import trace_span
from ..utils.conditions import (
    set_config_invalid_condition,
    set_partially_applied_condition,
    set_planned_condition,
    set_ready_condition,
)
from ..utils.errors import sanitize_exception
from ..utils.events import (
    emit_bucket_failed,
    emit_bucket_migrated,
    emit_migration_succeeded,
    emit_plan_ready,
    emit_validate_succeeded,
)
from .base import BaseHandler
from .shared import get_k8s_client, get_provider_with_cache, is_provider_ready

# Set on operator shutdown; running migrations stop at the next step boundary
_shutdown = threading.Event()

RETRY_DELAY_SECONDS = 60


def summary_phase(summary: RunSummary) -> str:
    """Map a run summary to the resource phase."""
    if not summary.applied:
        return PHASE_PLANNED
    if not summary.failures:
        return PHASE_SUCCEEDED
    if any(outcome.status in (STATUS_SUCCEEDED, STATUS_PARTIAL) for outcome in summary.outcomes):
        return PHASE_PARTIALLY_FAILED
    return PHASE_FAILED


class BucketMigrationHandler(BaseHandler):
    """Handler for BucketMigration resources.

    Each reconcile runs the whole migration again. Runs are idempotent, so a
    retry after a partial failure only does the remaining work. Deleting a
    BucketMigration leaves every bucket in place.
    """

    def __init__(self, settings: MigrationSettings | None = None) -> None:
        super().__init__(KIND_BUCKET_MIGRATION)
        self.settings = settings or MigrationSettings.from_env()

    def reconcile(
        self,
        spec: dict[str, Any],
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
    ) -> None:
        """Reconcile BucketMigration resource."""
        name = meta.get("name", "unknown")
        namespace = meta.get("namespace", "default")
        generation = meta.get("generation")
        conditions = status.get("conditions", [])

        with trace_span("reconcile_bucket_migration", kind=KIND_BUCKET_MIGRATION, attributes={"migration.name": name}):
            try:
                request = create_migration_request_from_spec(spec, self.settings)
                settings = create_settings_from_spec(spec, self.settings)
                plan = build_plan(request)
            except (ValueError, MigrationConfigError) as e:
                message = sanitize_exception(e)
                conditions = set_config_invalid_condition(conditions, message, generation)
                conditions = set_ready_condition(conditions, False, "Migration configuration is invalid", generation)
                self.update_resource_status(patch, meta, False, {"phase": PHASE_FAILED, "conditions": conditions})
                self.handle_validation_error(meta, message)

            emit_validate_succeeded(meta)
            conditions = set_planned_condition(conditions, True, f"Planned {len(plan)} bucket(s)", generation)

            provider_ref = spec.get("providerRef", {})
            provider_name = provider_ref.get("name")
            if not provider_name:
                self.handle_validation_error(meta, "providerRef.name is required")
            provider_ns = provider_ref.get("namespace", namespace)

            try:
                provider_obj = get_provider_with_cache(get_k8s_client(), provider_name, provider_ns)
            except ApiException as e:
                if e.status != 404:
                    raise
                self.handle_provider_not_ready(
                    meta, status, patch, provider_name, f"Provider {provider_ns}/{provider_name} not found"
                )

            if not is_provider_ready(provider_obj):
                self.handle_provider_not_ready(
                    meta, status, patch, provider_name, f"Provider {provider_ns}/{provider_name} is not ready"
                )

            try:
                provider = create_provider_from_spec(
                    provider_obj.get("spec", {}),
                    provider_obj.get("metadata", {}),
                    max_pool_connections=max(10, settings.max_concurrency * 4),
                )
            except ValueError as e:
                self.handle_provider_not_ready(meta, status, patch, provider_name, sanitize_exception(e))

            runner = MigrationRunner(provider, settings, cancel_event=_shutdown)
            try:
                summary = runner.run(request)
            except CredentialError as e:
                self.handle_provider_not_ready(meta, status, patch, provider_name, sanitize_exception(e))

            self._record(summary, meta, conditions, patch)

    def _record(
        self,
        summary: RunSummary,
        meta: dict[str, Any],
        conditions: list[dict[str, Any]],
        patch: kopf.Patch,
    ) -> None:
        generation = meta.get("generation")
        phase = summary_phase(summary)
        failures = summary.failures

        if summary.applied:
            for outcome in summary.outcomes:
                if outcome.error is None:
                    emit_bucket_migrated(meta, outcome.mapping.source, outcome.mapping.target)
                else:
                    emit_bucket_failed(meta, outcome.mapping.source, sanitize_exception(outcome.error))
            conditions = set_partially_applied_condition(
                conditions,
                bool(failures),
                f"{len(failures)} of {len(summary.plan)} bucket(s) failed" if failures else "All buckets applied",
                generation,
            )
        else:
            emit_plan_ready(meta, len(summary.plan))

        ready = phase in (PHASE_PLANNED, PHASE_SUCCEEDED)
        conditions = set_ready_condition(conditions, ready, f"Migration {phase.lower()}", generation)
        status_data = {
            "phase": phase,
            "mapping": summary.plan.mapping,
            "buckets": summary.report.data.get("buckets", []),
            "lastRunTime": datetime.now(timezone.utc).isoformat(),
            "correlationId": summary.correlation_id,
            "conditions": conditions,
        }
        self.update_resource_status(patch, meta, ready, status_data)

        if summary.cancelled:
            raise kopf.TemporaryError("Migration cancelled by operator shutdown", delay=RETRY_DELAY_SECONDS)
        if failures and summary.applied:
            self.log_warning(
                meta,
                f"{len(failures)} bucket(s) failed, retrying",
                reason="PartiallyFailed",
                failed=sorted(failures),
            )
            raise kopf.TemporaryError(
                f"{len(failures)} of {len(summary.plan)} bucket migration(s) failed",
                delay=RETRY_DELAY_SECONDS,
            )
        if summary.applied:
            emit_migration_succeeded(meta, len(summary.plan))
            metrics.resource_status_total.labels(kind=self.kind, status="succeeded").inc()


# Global handler instance
_handler = BucketMigrationHandler()


@kopf.on.create(API_GROUP_VERSION, KIND_BUCKET_MIGRATION)
@kopf.on.update(API_GROUP_VERSION, KIND_BUCKET_MIGRATION)
@kopf.on.resume(API_GROUP_VERSION, KIND_BUCKET_MIGRATION)
def handle_bucket_migration(
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle BucketMigration resource reconciliation."""
    _handler.reconcile_with_metrics(meta, lambda: _handler.reconcile(spec, meta, status, patch))


@kopf.on.delete(API_GROUP_VERSION, KIND_BUCKET_MIGRATION, optional=True)
def handle_bucket_migration_delete(meta: dict[str, Any], **kwargs: Any) -> None:
    """Log deletion; migrated buckets are never deleted."""
    _handler.log_info(meta, "BucketMigration deleted, buckets left in place", event="deletion", reason="Deletion")


@kopf.on.cleanup()
def cancel_running_migrations(**kwargs: Any) -> None:
    """Stop running migrations at their next step boundary."""
    _shutdown.set()

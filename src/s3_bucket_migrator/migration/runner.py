"""Migration run orchestration."""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import contextmanager
from contextvars import copy_context
from dataclasses import dataclass, field
from typing import Iterator

from .. import metrics
from ..config import MigrationSettings
from ..exceptions import (
    CopyFailure,
    CredentialError,
    MigrationCancelledError,
    MigrationError,
    MigrationFailedError,
    SourceUnavailableError,
)
from ..logging import log_migration_event
from ..services.s3.base import StorageError, StorageProvider
from ..tracing import add_span_attribute, trace_span
from ..utils.context import get_correlation_id, with_correlation_id
from ..utils.errors import sanitize_exception
from .planner import MigrationPlan, MigrationRequest, PlanEntry, build_plan, with_snapshots
from .provisioner import BucketProvisioner
from .replicator import DataReplicator
from .reporting import STATUS_CANCELLED, BucketOutcome, RenderedReport, render_report
from .snapshot import SettingsSnapshotReader

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_PARTIAL_FAILURE = 2
EXIT_CANCELLED = 3


@dataclass
class RunSummary:
    """Result of a plan or apply run."""

    plan: MigrationPlan
    report: RenderedReport
    outcomes: list[BucketOutcome] = field(default_factory=list)
    plan_errors: dict[str, BaseException] = field(default_factory=dict)
    correlation_id: str | None = None

    @property
    def applied(self) -> bool:
        return self.report.mode == "applied"

    @property
    def failures(self) -> dict[str, BaseException]:
        """Source bucket name mapped to the error that ended its pipeline."""
        errors = dict(self.plan_errors)
        for outcome in self.outcomes:
            if outcome.error is not None:
                errors[outcome.mapping.source] = outcome.error
        return errors

    @property
    def cancelled(self) -> bool:
        return any(outcome.cancelled for outcome in self.outcomes)

    @property
    def exit_code(self) -> int:
        if self.cancelled:
            return EXIT_CANCELLED
        if self.failures:
            return EXIT_PARTIAL_FAILURE
        return EXIT_OK

    def raise_for_failures(self) -> None:
        """Raise MigrationFailedError carrying every per-bucket error, if any."""
        failures = self.failures
        if failures:
            raise MigrationFailedError(failures)


class MigrationRunner:
    """Runs per-bucket migration pipelines against one storage provider.

    Each source bucket goes through read, provision and (optionally) copy,
    strictly in that order. Pipelines of different buckets run concurrently
    on a bounded thread pool and share nothing but the provider. A per-bucket
    failure ends only that bucket's pipeline. The cancel event is checked
    between steps; nothing already applied or copied is rolled back.
    """

    def __init__(
        self,
        provider: StorageProvider,
        settings: MigrationSettings | None = None,
        cancel_event: threading.Event | None = None,
        reader: SettingsSnapshotReader | None = None,
        provisioner: BucketProvisioner | None = None,
        replicator: DataReplicator | None = None,
    ) -> None:
        self.provider = provider
        self.settings = settings or MigrationSettings()
        self.cancel_event = cancel_event or threading.Event()
        self.reader = reader or SettingsSnapshotReader(provider)
        self.provisioner = provisioner or BucketProvisioner(
            provider,
            consistency_timeout=self.settings.consistency_timeout,
            initial_delay=self.settings.initial_delay,
            max_delay=self.settings.max_delay,
        )
        self.replicator = replicator or DataReplicator(provider)

    def cancel(self) -> None:
        """Request cancellation of the current run."""
        self.cancel_event.set()

    def plan(self, request: MigrationRequest, inspect: bool = False) -> RunSummary:
        """Build and render a plan without mutating anything.

        Args:
            request: Migration request
            inspect: Read source snapshots so the plan shows concrete facets

        Raises:
            MigrationConfigError: If the request fails local validation
        """
        plan = build_plan(request)
        errors: dict[str, BaseException] = {}
        if inspect:
            snapshots = {}
            for entry in plan.entries:
                try:
                    snapshots[entry.mapping.source] = self.reader.read(entry.mapping.source)
                except SourceUnavailableError as e:
                    logger.warning(f"Cannot inspect {entry.mapping.source}: {sanitize_exception(e)}")
                    errors[entry.mapping.source] = e
            plan = with_snapshots(plan, snapshots)

        metrics.migration_runs_total.labels(mode="plan", result="failed" if errors else "success").inc()
        return RunSummary(
            plan=plan,
            report=render_report(plan),
            plan_errors=errors,
            correlation_id=get_correlation_id(),
        )

    def run(self, request: MigrationRequest) -> RunSummary:
        """Validate, then plan or apply a migration request.

        Raises:
            MigrationConfigError: If the request fails local validation
            CredentialError: If provider credentials cannot be verified
        """
        plan = build_plan(request)
        if plan.request.plan_only:
            return self.plan(request)

        with with_correlation_id(get_correlation_id()) as corr_id:
            with trace_span("migration.run", kind="BucketMigration", attributes={"buckets": len(plan)}):
                self._verify_credentials()
                logger.info(
                    f"Starting migration of {len(plan)} bucket(s) "
                    f"(copy_data={plan.request.copy_data}, correlation_id={corr_id})"
                )
                outcomes = self._execute(plan)

            summary = RunSummary(
                plan=plan,
                report=render_report(plan, outcomes),
                outcomes=outcomes,
                correlation_id=corr_id,
            )

        result = "cancelled" if summary.cancelled else ("partial" if summary.failures else "success")
        metrics.migration_runs_total.labels(mode="apply", result=result).inc()
        logger.info(f"Migration finished: {result} ({len(summary.failures)} failed of {len(plan)})")
        return summary

    def _verify_credentials(self) -> None:
        try:
            identity = self.provider.verify_credentials()
        except StorageError as e:
            raise CredentialError(f"Provider credentials could not be verified: {sanitize_exception(e)}") from e
        logger.info(f"Provider credentials verified for {identity}")

    def _execute(self, plan: MigrationPlan) -> list[BucketOutcome]:
        outcomes: dict[str, BucketOutcome] = {}
        workers = max(1, min(self.settings.max_concurrency, len(plan)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="migrate") as executor:
            futures = {
                executor.submit(copy_context().run, self._run_pipeline, entry, plan.request): entry
                for entry in plan.entries
            }
            for future in as_completed(futures):
                outcome = future.result()
                outcomes[outcome.mapping.source] = outcome
        return [outcomes[entry.mapping.source] for entry in plan.entries]

    def _check_cancelled(self, bucket: str, step: str) -> None:
        if self.cancel_event.is_set():
            raise MigrationCancelledError(bucket, step)

    @contextmanager
    def _step(self, step: str, entry: PlanEntry) -> Iterator[None]:
        start = time.monotonic()
        attributes = {"source": entry.mapping.source, "target": entry.mapping.target}
        try:
            with trace_span(f"migration.{step}", attributes=attributes):
                yield
        finally:
            metrics.pipeline_step_duration_seconds.labels(step=step).observe(time.monotonic() - start)

    def _run_pipeline(self, entry: PlanEntry, request: MigrationRequest) -> BucketOutcome:
        source, target = entry.mapping.source, entry.mapping.target
        outcome = BucketOutcome(mapping=entry.mapping, copy_requested=entry.copy_requested)

        try:
            self._check_cancelled(source, "read")
            with self._step("read", entry):
                outcome.snapshot = self.reader.read(source)

            self._check_cancelled(source, "provision")
            with self._step("provision", entry):
                outcome.provision = self.provisioner.ensure(
                    target,
                    outcome.snapshot,
                    tags=dict(request.tags),
                    region=request.region,
                )
            outcome.locator = self.provider.bucket_locator(target)
            log_migration_event(
                logger,
                "provisioned",
                source,
                target,
                created=outcome.provision.created,
                changed=outcome.provision.changed,
            )

            if entry.copy_requested:
                self._check_cancelled(source, "copy")
                with self._step("copy", entry):
                    outcome.copy_result = self.replicator.copy(
                        source, target, delete_extraneous=request.delete_extraneous
                    )
                add_span_attribute("objects_copied", outcome.copy_result.objects_copied)
                if not outcome.copy_result.succeeded:
                    raise CopyFailure(target, outcome.copy_result)
        except MigrationError as e:
            outcome.error = e
        except Exception as e:
            logger.exception(f"Unexpected error migrating {source} to {target}")
            outcome.error = e

        metrics.bucket_pipelines_total.labels(status=outcome.status).inc()
        if outcome.error is None:
            log_migration_event(logger, "succeeded", source, target, copy=outcome.copy_status)
        else:
            log_migration_event(
                logger,
                outcome.status,
                source,
                target,
                level=logging.INFO if outcome.status == STATUS_CANCELLED else logging.ERROR,
                error_type=type(outcome.error).__name__,
                error=sanitize_exception(outcome.error),
            )
        return outcome

"""Plan and run reporting."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Sequence

from ..exceptions import MigrationCancelledError, PreconditionError, SettingsApplyError
from ..services.s3.models import BucketSettingsSnapshot, CopyResult, ProvisionResult
from ..utils.errors import sanitize_exception
from .naming import NameMapping
from .planner import MigrationPlan
from .snapshot import describe_facets

STATUS_SUCCEEDED = "succeeded"
STATUS_PARTIAL = "partially applied"
STATUS_FAILED = "failed"
STATUS_CANCELLED = "cancelled"

COPY_NOT_REQUESTED = "not requested"
COPY_REQUESTED = "requested"
COPY_SUCCEEDED = "succeeded"
COPY_FAILED = "failed"
COPY_NOT_ATTEMPTED = "not attempted"


@dataclass
class BucketOutcome:
    """Terminal record of one bucket's pipeline."""

    mapping: NameMapping
    copy_requested: bool
    snapshot: BucketSettingsSnapshot | None = None
    provision: ProvisionResult | None = None
    locator: str | None = None
    copy_result: CopyResult | None = None
    error: BaseException | None = None

    @property
    def cancelled(self) -> bool:
        return isinstance(self.error, MigrationCancelledError)

    @property
    def applied_facets(self) -> list[str]:
        if self.provision is not None:
            return list(self.provision.applied)
        if isinstance(self.error, SettingsApplyError):
            return list(self.error.applied)
        return []

    @property
    def target_created(self) -> bool:
        if self.provision is not None:
            return self.provision.created
        return isinstance(self.error, SettingsApplyError) and self.error.created

    @property
    def status(self) -> str:
        if self.error is None:
            return STATUS_SUCCEEDED
        touched = (
            self.target_created
            or bool(self.applied_facets)
            or (self.copy_result is not None and self.copy_result.objects_copied > 0)
        )
        if self.cancelled and not touched:
            return STATUS_CANCELLED
        return STATUS_PARTIAL if touched else STATUS_FAILED

    @property
    def copy_status(self) -> str:
        if not self.copy_requested:
            return COPY_NOT_REQUESTED
        if self.copy_result is None:
            return COPY_FAILED if isinstance(self.error, PreconditionError) else COPY_NOT_ATTEMPTED
        return COPY_SUCCEEDED if self.copy_result.succeeded else COPY_FAILED

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "source": self.mapping.source,
            "target": self.mapping.target,
            "locator": self.locator,
            "status": self.status,
            "created": self.target_created,
            "appliedFacets": self.applied_facets,
            "changedFacets": list(self.provision.changed) if self.provision else [],
            "copy": self.copy_status,
            "copyResult": self.copy_result.to_dict() if self.copy_result else None,
            "error": None if self.error is None else sanitize_exception(self.error),
            "errorType": None if self.error is None else type(self.error).__name__,
        }


@dataclass
class RenderedReport:
    """Human-readable and structured rendering of a plan or run."""

    mode: str
    text: str
    data: dict[str, Any] = field(default_factory=dict)

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.data, indent=indent, sort_keys=False)


def _plan_rows(plan: MigrationPlan) -> list[dict[str, Any]]:
    return [
        {
            "source": entry.mapping.source,
            "target": entry.mapping.target,
            "facets": describe_facets(entry.snapshot),
            "copy": COPY_REQUESTED if entry.copy_requested else COPY_NOT_REQUESTED,
        }
        for entry in plan.entries
    ]


def render_report(plan: MigrationPlan, outcomes: Sequence[BucketOutcome] | None = None) -> RenderedReport:
    """Render a plan ("plan" mode) or the outcomes of a run ("applied" mode).

    Every mapping of the plan is rendered, including buckets whose pipeline
    never ran. Pure formatting; nothing is read from or written to a provider.
    """
    if outcomes is None:
        rows = _plan_rows(plan)
        lines = [f"Migration plan ({len(rows)} bucket(s)):"]
        for row in rows:
            lines.append(f"  {row['source']} -> {row['target']}")
            facets = ", ".join(f"{name}={value}" for name, value in row["facets"].items())
            lines.append(f"    settings: {facets}")
            lines.append(f"    copy data: {row['copy']}")
        data = {"mode": "plan", "mapping": plan.mapping, "buckets": rows}
        return RenderedReport(mode="plan", text="\n".join(lines), data=data)

    by_source = {outcome.mapping.source: outcome for outcome in outcomes}
    ordered = [
        by_source.get(entry.mapping.source)
        or BucketOutcome(
            mapping=entry.mapping,
            copy_requested=entry.copy_requested,
            error=MigrationCancelledError(entry.mapping.source, "start"),
        )
        for entry in plan.entries
    ]

    counts: dict[str, int] = {}
    lines = [f"Migration results ({len(ordered)} bucket(s)):"]
    for outcome in ordered:
        counts[outcome.status] = counts.get(outcome.status, 0) + 1
        lines.append(f"  {outcome.mapping.source} -> {outcome.mapping.target} [{outcome.status}]")
        if outcome.locator:
            lines.append(f"    locator: {outcome.locator}")
        lines.append(f"    settings applied: {', '.join(outcome.applied_facets) or 'none'}")
        copy_line = f"    copy data: {outcome.copy_status}"
        if outcome.copy_result is not None:
            copy_line += (
                f" ({outcome.copy_result.objects_copied} copied,"
                f" {outcome.copy_result.objects_skipped} unchanged)"
            )
        lines.append(copy_line)
        if outcome.error is not None:
            lines.append(f"    error: {type(outcome.error).__name__}: {sanitize_exception(outcome.error)}")

    summary = ", ".join(f"{count} {status}" for status, count in counts.items())
    lines.append(f"Summary: {summary}")
    data = {
        "mode": "applied",
        "mapping": plan.mapping,
        "buckets": [outcome.to_dict() for outcome in ordered],
        "summary": counts,
    }
    return RenderedReport(mode="applied", text="\n".join(lines), data=data)

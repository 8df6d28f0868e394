"""Migration planning."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Sequence

from ..services.s3.models import BucketSettingsSnapshot
from .naming import DEFAULT_SEPARATOR, DEFAULT_SUBSTITUTE, NameMapping, build_mappings


@dataclass(frozen=True)
class MigrationRequest:
    """Caller-supplied input of one migration run."""

    sources: tuple[str, ...]
    copy_data: bool = False
    plan_only: bool = False
    region: str | None = None
    tags: Mapping[str, str] = field(default_factory=dict)
    delete_extraneous: bool = False
    separator: str = DEFAULT_SEPARATOR
    substitute: str = DEFAULT_SUBSTITUTE


@dataclass(frozen=True)
class PlanEntry:
    """One bucket of a plan: mapping, source snapshot and copy intention."""

    mapping: NameMapping
    snapshot: BucketSettingsSnapshot | None
    copy_requested: bool


@dataclass(frozen=True)
class MigrationPlan:
    """Ordered, immutable plan of a migration run."""

    request: MigrationRequest
    entries: tuple[PlanEntry, ...]

    @property
    def mapping(self) -> dict[str, str]:
        """Structured {source: target} mapping."""
        return {entry.mapping.source: entry.mapping.target for entry in self.entries}

    def __len__(self) -> int:
        return len(self.entries)


def build_plan(
    request: MigrationRequest,
    snapshots: Mapping[str, BucketSettingsSnapshot] | None = None,
) -> MigrationPlan:
    """Build a plan from a request.

    Runs only local validation, so configuration errors surface before any
    provider call.

    Args:
        request: Migration request
        snapshots: Optional source snapshots already read, keyed by source name

    Raises:
        MigrationConfigError: If the request has no sources
        InvalidNameError: If a source name cannot be transformed
        DuplicateTargetError: If distinct sources share a target
    """
    mappings = build_mappings(request.sources, request.separator, request.substitute)
    snapshots = snapshots or {}
    entries = tuple(
        PlanEntry(
            mapping=mapping,
            snapshot=snapshots.get(mapping.source),
            copy_requested=request.copy_data,
        )
        for mapping in mappings
    )
    frozen_request = MigrationRequest(
        sources=tuple(mapping.source for mapping in mappings),
        copy_data=request.copy_data,
        plan_only=request.plan_only,
        region=request.region,
        tags=MappingProxyType(dict(request.tags)),
        delete_extraneous=request.delete_extraneous,
        separator=request.separator,
        substitute=request.substitute,
    )
    return MigrationPlan(request=frozen_request, entries=entries)


def with_snapshots(plan: MigrationPlan, snapshots: Mapping[str, BucketSettingsSnapshot]) -> MigrationPlan:
    """Return a copy of a plan with source snapshots filled in."""
    entries: Sequence[PlanEntry] = tuple(
        PlanEntry(
            mapping=entry.mapping,
            snapshot=snapshots.get(entry.mapping.source, entry.snapshot),
            copy_requested=entry.copy_requested,
        )
        for entry in plan.entries
    )
    return MigrationPlan(request=plan.request, entries=tuple(entries))

"""Bucket rename and migration engine."""

from .naming import NameMapping, build_mappings, transform
from .planner import MigrationPlan, MigrationRequest, PlanEntry, build_plan
from .provisioner import BucketProvisioner
from .replicator import DataReplicator
from .reporting import BucketOutcome, RenderedReport, render_report
from .runner import MigrationRunner, RunSummary
from .snapshot import SettingsSnapshotReader, describe_facets

__all__ = [
    "BucketOutcome",
    "BucketProvisioner",
    "DataReplicator",
    "MigrationPlan",
    "MigrationRequest",
    "MigrationRunner",
    "NameMapping",
    "PlanEntry",
    "RenderedReport",
    "RunSummary",
    "SettingsSnapshotReader",
    "build_mappings",
    "build_plan",
    "describe_facets",
    "render_report",
    "transform",
]

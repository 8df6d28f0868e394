"""Builder for migration requests from BucketMigration specs."""

from __future__ import annotations

from typing import Any

from ..config import MigrationSettings
from ..migration.planner import MigrationRequest


def create_migration_request_from_spec(
    spec: dict[str, Any],
    settings: MigrationSettings | None = None,
) -> MigrationRequest:
    """Create a migration request from a BucketMigration spec.

    Args:
        spec: BucketMigration CRD spec
        settings: Process settings supplying naming defaults

    Raises:
        ValueError: If the spec shape is invalid
    """
    settings = settings or MigrationSettings()

    sources = spec.get("sourceBuckets") or []
    if not isinstance(sources, list) or not all(isinstance(name, str) for name in sources):
        raise ValueError("sourceBuckets must be a list of bucket names")

    tags = spec.get("tags") or {}
    if not isinstance(tags, dict):
        raise ValueError("tags must be a map of strings")

    naming = spec.get("naming") or {}
    separator = naming.get("separator", settings.separator)
    substitute = naming.get("substitute", settings.substitute)
    for option, value in (("separator", separator), ("substitute", substitute)):
        if not isinstance(value, str) or len(value) != 1:
            raise ValueError(f"naming.{option} must be a single character")
    if separator == substitute:
        raise ValueError("naming.separator and naming.substitute must differ")

    return MigrationRequest(
        sources=tuple(sources),
        copy_data=bool(spec.get("copyData", False)),
        plan_only=bool(spec.get("planOnly", False)),
        region=spec.get("region"),
        tags={str(key): str(value) for key, value in tags.items()},
        delete_extraneous=bool(spec.get("deleteExtraneous", False)),
        separator=separator,
        substitute=substitute,
    )


def create_settings_from_spec(spec: dict[str, Any], settings: MigrationSettings) -> MigrationSettings:
    """Apply per-resource overrides to process settings."""
    return settings.override(max_concurrency=spec.get("maxConcurrency"))

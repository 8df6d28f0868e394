"""Exception taxonomy for bucket migrations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from .services.s3.models import CopyResult


class MigrationError(Exception):
    """Base class for all migration errors."""


class MigrationConfigError(MigrationError):
    """Invalid run configuration, detected before any provider call."""


class InvalidNameError(MigrationConfigError):
    """A source name cannot be transformed into a valid target name."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid bucket name '{name}': {reason}")


class DuplicateTargetError(MigrationConfigError):
    """Distinct source names transform to the same target name.

    Attributes:
        duplicates: Target name mapped to every source name producing it
    """

    def __init__(self, duplicates: dict[str, list[str]]) -> None:
        self.duplicates = duplicates
        details = "; ".join(
            f"{target} <- {', '.join(sources)}" for target, sources in sorted(duplicates.items())
        )
        super().__init__(f"Duplicate target bucket names: {details}")

    @property
    def source_names(self) -> list[str]:
        """All offending source names, in input order per target."""
        return [name for sources in self.duplicates.values() for name in sources]


class CredentialError(MigrationError):
    """Provider credentials could not be verified."""


class BucketMigrationError(MigrationError):
    """Error isolated to a single bucket's pipeline."""

    def __init__(self, bucket: str, message: str) -> None:
        self.bucket = bucket
        super().__init__(message)


class SourceUnavailableError(BucketMigrationError):
    """Source bucket is missing or not readable."""

    def __init__(self, bucket: str, cause: BaseException | str) -> None:
        self.cause = cause
        super().__init__(bucket, f"Source bucket {bucket} is unavailable: {cause}")


class SettingsApplyError(BucketMigrationError):
    """A settings facet could not be applied to the target bucket.

    Attributes:
        facet: Facet that failed ("bucket" when creation itself failed)
        applied: Facets applied before the failure, left in place
    """

    def __init__(
        self,
        bucket: str,
        facet: str,
        cause: BaseException | str,
        applied: Sequence[str] = (),
        created: bool = False,
    ) -> None:
        self.facet = facet
        self.cause = cause
        self.applied = tuple(applied)
        self.created = created
        super().__init__(bucket, f"Failed to apply {facet} to bucket {bucket}: {cause}")


class PreconditionError(BucketMigrationError):
    """Copy preconditions do not hold."""


class ConsistencyTimeoutError(BucketMigrationError):
    """A created bucket did not become visible before the deadline."""

    def __init__(self, bucket: str, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(bucket, f"Bucket {bucket} not visible after {timeout:.1f}s")


class CopyFailure(BucketMigrationError):
    """Object copy finished unsuccessfully."""

    def __init__(self, bucket: str, result: CopyResult) -> None:
        self.result = result
        super().__init__(
            bucket,
            f"Copy into {bucket} failed after {result.objects_copied} objects: {result.error_detail}",
        )


class MigrationCancelledError(BucketMigrationError):
    """The run was cancelled before this bucket's pipeline finished."""

    def __init__(self, bucket: str, step: str) -> None:
        self.step = step
        super().__init__(bucket, f"Migration of {bucket} cancelled before {step}")


class MigrationFailedError(MigrationError):
    """One or more bucket pipelines failed.

    Attributes:
        errors: Source bucket name mapped to its pipeline error
    """

    def __init__(self, errors: dict[str, BaseException]) -> None:
        self.errors = errors
        lines = [f"{name}: {error}" for name, error in errors.items()]
        super().__init__(f"{len(errors)} bucket migration(s) failed:\n" + "\n".join(lines))

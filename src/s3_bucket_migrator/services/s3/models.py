"""Provider-neutral models for bucket settings and object data."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class EncryptionRule:
    """Default server-side encryption of a bucket."""

    algorithm: str = "AES256"
    kms_key_id: str | None = None
    bucket_key_enabled: bool | None = None


@dataclass(frozen=True)
class PublicAccessBlockRule:
    """Public access block flags of a bucket."""

    block_public_acls: bool = True
    ignore_public_acls: bool = True
    block_public_policy: bool = True
    restrict_public_buckets: bool = True

    @classmethod
    def fail_safe(cls) -> PublicAccessBlockRule:
        """All four restrictions enabled."""
        return cls(True, True, True, True)


@dataclass(frozen=True)
class Transition:
    """Storage class transition of a lifecycle rule, after a number of days or on a date."""

    storage_class: str
    days: int | None = None
    date: str | None = None

    def to_spec(self) -> dict[str, Any]:
        transition: dict[str, Any] = {"storageClass": self.storage_class}
        if self.days is not None:
            transition["days"] = self.days
        if self.date is not None:
            transition["date"] = self.date
        return transition


@dataclass(frozen=True)
class NoncurrentTransition:
    """Storage class transition of noncurrent object versions."""

    noncurrent_days: int
    storage_class: str
    newer_noncurrent_versions: int | None = None

    def to_spec(self) -> dict[str, Any]:
        transition: dict[str, Any] = {"noncurrentDays": self.noncurrent_days, "storageClass": self.storage_class}
        if self.newer_noncurrent_versions is not None:
            transition["newerNoncurrentVersions"] = self.newer_noncurrent_versions
        return transition


@dataclass(frozen=True)
class LifecycleRule:
    """A single lifecycle rule.

    The filter is the conjunction of prefix, tags and object size bounds; a
    rule without any of them applies to every object. An empty prefix is
    stored as None.
    """

    id: str | None = None
    status: str = "Enabled"
    prefix: str | None = None
    tags: tuple[tuple[str, str], ...] = ()
    object_size_greater_than: int | None = None
    object_size_less_than: int | None = None
    expiration_days: int | None = None
    expiration_date: str | None = None
    expired_object_delete_marker: bool | None = None
    transitions: tuple[Transition, ...] = ()
    noncurrent_transitions: tuple[NoncurrentTransition, ...] = ()
    noncurrent_expiration_days: int | None = None
    noncurrent_newer_versions: int | None = None
    abort_incomplete_multipart_days: int | None = None

    def to_spec(self) -> dict[str, Any]:
        """Serialize to the camelCase rule format."""
        rule: dict[str, Any] = {"status": self.status}
        if self.id is not None:
            rule["id"] = self.id
        if self.prefix is not None:
            rule["prefix"] = self.prefix
        if self.tags:
            rule["tags"] = dict(self.tags)
        if self.object_size_greater_than is not None:
            rule["objectSizeGreaterThan"] = self.object_size_greater_than
        if self.object_size_less_than is not None:
            rule["objectSizeLessThan"] = self.object_size_less_than
        expiration: dict[str, Any] = {}
        if self.expiration_days is not None:
            expiration["days"] = self.expiration_days
        if self.expiration_date is not None:
            expiration["date"] = self.expiration_date
        if self.expired_object_delete_marker is not None:
            expiration["expiredObjectDeleteMarker"] = self.expired_object_delete_marker
        if expiration:
            rule["expiration"] = expiration
        if self.transitions:
            rule["transitions"] = [t.to_spec() for t in self.transitions]
        if self.noncurrent_transitions:
            rule["noncurrentVersionTransitions"] = [t.to_spec() for t in self.noncurrent_transitions]
        noncurrent_expiration: dict[str, Any] = {}
        if self.noncurrent_expiration_days is not None:
            noncurrent_expiration["noncurrentDays"] = self.noncurrent_expiration_days
        if self.noncurrent_newer_versions is not None:
            noncurrent_expiration["newerNoncurrentVersions"] = self.noncurrent_newer_versions
        if noncurrent_expiration:
            rule["noncurrentVersionExpiration"] = noncurrent_expiration
        if self.abort_incomplete_multipart_days is not None:
            rule["abortIncompleteMultipartUpload"] = {
                "daysAfterInitiation": self.abort_incomplete_multipart_days
            }
        return rule


@dataclass(frozen=True)
class CorsRule:
    """A single CORS rule."""

    allowed_methods: tuple[str, ...]
    allowed_origins: tuple[str, ...]
    allowed_headers: tuple[str, ...] = ()
    exposed_headers: tuple[str, ...] = ()
    max_age_seconds: int | None = None
    id: str | None = None

    def to_spec(self) -> dict[str, Any]:
        """Serialize to the camelCase rule format."""
        rule: dict[str, Any] = {
            "allowedMethods": list(self.allowed_methods),
            "allowedOrigins": list(self.allowed_origins),
        }
        if self.allowed_headers:
            rule["allowedHeaders"] = list(self.allowed_headers)
        if self.exposed_headers:
            rule["exposedHeaders"] = list(self.exposed_headers)
        if self.max_age_seconds is not None:
            rule["maxAgeSeconds"] = self.max_age_seconds
        if self.id is not None:
            rule["id"] = self.id
        return rule


@dataclass(frozen=True)
class BucketSettingsSnapshot:
    """Point-in-time read of every copied facet of one bucket.

    None on a field means the facet is not configured on the bucket and the
    provider default applies. An empty tuple is an explicitly empty facet.
    """

    versioning_enabled: bool | None = None
    encryption: EncryptionRule | None = None
    public_access_block: PublicAccessBlockRule | None = None
    lifecycle_rules: tuple[LifecycleRule, ...] | None = None
    cors_rules: tuple[CorsRule, ...] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "versioningEnabled": self.versioning_enabled,
            "encryption": None
            if self.encryption is None
            else {
                "algorithm": self.encryption.algorithm,
                "kmsKeyId": self.encryption.kms_key_id,
                "bucketKeyEnabled": self.encryption.bucket_key_enabled,
            },
            "publicAccessBlock": None
            if self.public_access_block is None
            else {
                "blockPublicAcls": self.public_access_block.block_public_acls,
                "ignorePublicAcls": self.public_access_block.ignore_public_acls,
                "blockPublicPolicy": self.public_access_block.block_public_policy,
                "restrictPublicBuckets": self.public_access_block.restrict_public_buckets,
            },
            "lifecycleRules": None
            if self.lifecycle_rules is None
            else [rule.to_spec() for rule in self.lifecycle_rules],
            "corsRules": None if self.cors_rules is None else [rule.to_spec() for rule in self.cors_rules],
        }


@dataclass(frozen=True)
class ObjectInfo:
    """Listing entry of a stored object."""

    key: str
    size: int
    etag: str | None = None


@dataclass
class CopyResult:
    """Outcome of copying one source bucket into its target."""

    succeeded: bool
    objects_copied: int = 0
    error_detail: str | None = None
    objects_skipped: int = 0
    objects_deleted: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "succeeded": self.succeeded,
            "objectsCopied": self.objects_copied,
            "objectsSkipped": self.objects_skipped,
            "objectsDeleted": self.objects_deleted,
            "errorDetail": self.error_detail,
        }


@dataclass
class ProvisionResult:
    """Outcome of ensuring one target bucket."""

    bucket: str
    created: bool = False
    applied: list[str] = field(default_factory=list)
    changed: list[str] = field(default_factory=list)

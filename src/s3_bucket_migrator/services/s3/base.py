"""Base storage provider interface."""

from __future__ import annotations

from typing import Iterator, Protocol, Sequence

from .models import CorsRule, EncryptionRule, LifecycleRule, ObjectInfo, PublicAccessBlockRule


class StorageError(Exception):
    """A storage provider call failed.

    Attributes:
        code: Provider error code, if any
        bucket: Bucket the call targeted, if any
    """

    def __init__(self, message: str, code: str | None = None, bucket: str | None = None) -> None:
        self.code = code
        self.bucket = bucket
        super().__init__(message)


class BucketNotFoundError(StorageError):
    """The bucket does not exist."""


class AccessDeniedError(StorageError):
    """The credentials are not authorized for the call."""


class BucketAlreadyExistsError(StorageError):
    """The bucket name is taken by another account."""


class UnsupportedSettingError(StorageError):
    """A bucket setting has a shape that cannot be reproduced on another bucket."""


class StorageProvider(Protocol):
    """Protocol defining the storage operations a migration needs.

    get_* methods return None when the facet is not configured on the bucket.
    """

    region: str

    def verify_credentials(self) -> str:
        """Verify the credentials and return the caller identity."""
        ...

    def bucket_exists(self, name: str) -> bool:
        """Check if a bucket exists."""
        ...

    def create_bucket(self, name: str, region: str | None = None) -> None:
        """Create an empty bucket."""
        ...

    def bucket_locator(self, name: str) -> str:
        """Fully-qualified resource locator of a bucket."""
        ...

    def get_bucket_versioning(self, name: str) -> bool | None:
        """Get bucket versioning state (None if never configured)."""
        ...

    def set_bucket_versioning(self, name: str, enabled: bool) -> None:
        """Enable or suspend bucket versioning."""
        ...

    def get_bucket_encryption(self, name: str) -> EncryptionRule | None:
        """Get default bucket encryption."""
        ...

    def set_bucket_encryption(self, name: str, rule: EncryptionRule) -> None:
        """Set default bucket encryption."""
        ...

    def delete_bucket_encryption(self, name: str) -> None:
        """Remove default bucket encryption."""
        ...

    def get_public_access_block(self, name: str) -> PublicAccessBlockRule | None:
        """Get bucket public access block."""
        ...

    def set_public_access_block(self, name: str, rule: PublicAccessBlockRule) -> None:
        """Set bucket public access block."""
        ...

    def get_bucket_lifecycle(self, name: str) -> list[LifecycleRule] | None:
        """Get bucket lifecycle rules."""
        ...

    def set_bucket_lifecycle(self, name: str, rules: Sequence[LifecycleRule]) -> None:
        """Set bucket lifecycle rules."""
        ...

    def delete_bucket_lifecycle(self, name: str) -> None:
        """Delete bucket lifecycle configuration."""
        ...

    def get_bucket_cors(self, name: str) -> list[CorsRule] | None:
        """Get bucket CORS rules."""
        ...

    def set_bucket_cors(self, name: str, rules: Sequence[CorsRule]) -> None:
        """Set bucket CORS rules."""
        ...

    def delete_bucket_cors(self, name: str) -> None:
        """Delete bucket CORS configuration."""
        ...

    def get_bucket_tags(self, name: str) -> dict[str, str]:
        """Get bucket tags."""
        ...

    def set_bucket_tags(self, name: str, tags: dict[str, str]) -> None:
        """Set bucket tags."""
        ...

    def check_bucket_listable(self, name: str) -> None:
        """Raise StorageError unless the bucket's objects can be listed."""
        ...

    def iter_objects(self, name: str) -> Iterator[ObjectInfo]:
        """Iterate over every object in a bucket."""
        ...

    def copy_object(self, source_bucket: str, key: str, target_bucket: str) -> None:
        """Copy one object, preserving its key and metadata."""
        ...

    def delete_object(self, name: str, key: str) -> None:
        """Delete one object."""
        ...

"""Shared fixtures for unit tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Sequence

import pytest

from s3_bucket_migrator.services.s3.base import AccessDeniedError, BucketNotFoundError, StorageError
from s3_bucket_migrator.services.s3.models import (
    CorsRule,
    EncryptionRule,
    LifecycleRule,
    ObjectInfo,
    PublicAccessBlockRule,
)


@dataclass
class FakeBucket:
    versioning: bool | None = None
    encryption: EncryptionRule | None = None
    public_access_block: PublicAccessBlockRule | None = None
    lifecycle: list[LifecycleRule] | None = None
    cors: list[CorsRule] | None = None
    tags: dict[str, str] = field(default_factory=dict)
    objects: dict[str, tuple[int, str]] = field(default_factory=dict)


class FakeStorageProvider:
    """In-memory StorageProvider.

    Failures are injected per (operation, name) through ``fail_on``; name is
    the bucket, or the object key for copy_object. Every mutating call is
    recorded in ``writes``.
    """

    def __init__(self, region: str = "us-east-1") -> None:
        self.region = region
        self.buckets: dict[str, FakeBucket] = {}
        self.writes: list[tuple[str, str]] = []
        self.fail_on: dict[tuple[str, str], StorageError] = {}
        self.visibility_lag: dict[str, int] = {}
        self.credentials_valid = True
        self.calls: list[tuple[str, str]] = []

    # helpers

    def add_bucket(self, name: str, objects: dict[str, tuple[int, str]] | None = None, **settings) -> FakeBucket:
        bucket = FakeBucket(objects=dict(objects or {}), **settings)
        self.buckets[name] = bucket
        return bucket

    def deny(self, operation: str, name: str) -> None:
        self.fail_on[(operation, name)] = AccessDeniedError(f"Access Denied on {operation}", code="AccessDenied", bucket=name)

    def writes_for(self, bucket: str) -> list[str]:
        return [operation for operation, name in self.writes if name == bucket]

    def _check(self, operation: str, name: str) -> None:
        self.calls.append((operation, name))
        error = self.fail_on.get((operation, name))
        if error is not None:
            raise error

    def _bucket(self, operation: str, name: str) -> FakeBucket:
        self._check(operation, name)
        if name not in self.buckets:
            raise BucketNotFoundError(f"NoSuchBucket: {name}", code="NoSuchBucket", bucket=name)
        return self.buckets[name]

    def _write(self, operation: str, name: str) -> FakeBucket:
        bucket = self._bucket(operation, name)
        self.writes.append((operation, name))
        return bucket

    # StorageProvider

    def verify_credentials(self) -> str:
        self._check("verify_credentials", "")
        if not self.credentials_valid:
            raise AccessDeniedError("InvalidAccessKeyId", code="InvalidAccessKeyId")
        return "test-owner"

    def bucket_exists(self, name: str) -> bool:
        self._check("bucket_exists", name)
        lag = self.visibility_lag.get(name, 0)
        if lag > 0 and name in self.buckets:
            self.visibility_lag[name] = lag - 1
            return False
        return name in self.buckets

    def create_bucket(self, name: str, region: str | None = None) -> None:
        self._check("create_bucket", name)
        self.writes.append(("create_bucket", name))
        self.buckets.setdefault(name, FakeBucket())

    def bucket_locator(self, name: str) -> str:
        return f"arn:aws:s3:::{name}"

    def get_bucket_versioning(self, name: str) -> bool | None:
        return self._bucket("get_bucket_versioning", name).versioning

    def set_bucket_versioning(self, name: str, enabled: bool) -> None:
        self._write("set_bucket_versioning", name).versioning = enabled

    def get_bucket_encryption(self, name: str) -> EncryptionRule | None:
        return self._bucket("get_bucket_encryption", name).encryption

    def set_bucket_encryption(self, name: str, rule: EncryptionRule) -> None:
        self._write("set_bucket_encryption", name).encryption = rule

    def delete_bucket_encryption(self, name: str) -> None:
        self._write("delete_bucket_encryption", name).encryption = None

    def get_public_access_block(self, name: str) -> PublicAccessBlockRule | None:
        return self._bucket("get_public_access_block", name).public_access_block

    def set_public_access_block(self, name: str, rule: PublicAccessBlockRule) -> None:
        self._write("set_public_access_block", name).public_access_block = rule

    def get_bucket_lifecycle(self, name: str) -> list[LifecycleRule] | None:
        rules = self._bucket("get_bucket_lifecycle", name).lifecycle
        return None if rules is None else list(rules)

    def set_bucket_lifecycle(self, name: str, rules: Sequence[LifecycleRule]) -> None:
        self._write("set_bucket_lifecycle", name).lifecycle = list(rules)

    def delete_bucket_lifecycle(self, name: str) -> None:
        self._write("delete_bucket_lifecycle", name).lifecycle = None

    def get_bucket_cors(self, name: str) -> list[CorsRule] | None:
        rules = self._bucket("get_bucket_cors", name).cors
        return None if rules is None else list(rules)

    def set_bucket_cors(self, name: str, rules: Sequence[CorsRule]) -> None:
        self._write("set_bucket_cors", name).cors = list(rules)

    def delete_bucket_cors(self, name: str) -> None:
        self._write("delete_bucket_cors", name).cors = None

    def get_bucket_tags(self, name: str) -> dict[str, str]:
        return dict(self._bucket("get_bucket_tags", name).tags)

    def set_bucket_tags(self, name: str, tags: dict[str, str]) -> None:
        self._write("set_bucket_tags", name).tags = dict(tags)

    def check_bucket_listable(self, name: str) -> None:
        self._bucket("check_bucket_listable", name)

    def iter_objects(self, name: str) -> Iterator[ObjectInfo]:
        bucket = self._bucket("iter_objects", name)
        for key in sorted(bucket.objects):
            size, etag = bucket.objects[key]
            yield ObjectInfo(key=key, size=size, etag=etag)

    def copy_object(self, source_bucket: str, key: str, target_bucket: str) -> None:
        self._check("copy_object", key)
        source = self._bucket("copy_object", source_bucket)
        target = self._write("copy_object", target_bucket)
        target.objects[key] = source.objects[key]

    def delete_object(self, name: str, key: str) -> None:
        self._write("delete_object", name).objects.pop(key, None)


@pytest.fixture
def fake_provider() -> FakeStorageProvider:
    return FakeStorageProvider()


@pytest.fixture
def full_snapshot_bucket() -> dict:
    """Settings of a fully configured source bucket."""
    return {
        "versioning": True,
        "encryption": EncryptionRule(algorithm="aws:kms", kms_key_id="alias/logs", bucket_key_enabled=True),
        "public_access_block": PublicAccessBlockRule(True, True, False, False),
        "lifecycle": [LifecycleRule(id="expire-logs", prefix="logs/", expiration_days=30)],
        "cors": [CorsRule(allowed_methods=("GET",), allowed_origins=("https://example.com",))],
    }

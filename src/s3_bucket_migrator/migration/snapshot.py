"""Settings snapshot reader."""

from __future__ import annotations

import logging

from ..exceptions import SourceUnavailableError
from ..services.s3.base import StorageError, StorageProvider
from ..services.s3.models import BucketSettingsSnapshot

logger = logging.getLogger(__name__)

FACETS = ("versioning", "encryption", "public_access_block", "lifecycle", "cors")


class SettingsSnapshotReader:
    """Reads the copied facets of a source bucket. Never writes."""

    def __init__(self, provider: StorageProvider) -> None:
        self.provider = provider

    def read(self, bucket: str) -> BucketSettingsSnapshot:
        """Read every facet of a bucket.

        Raises:
            SourceUnavailableError: If the bucket does not exist or a facet
                cannot be read
        """
        try:
            if not self.provider.bucket_exists(bucket):
                raise SourceUnavailableError(bucket, "bucket does not exist")

            lifecycle = self.provider.get_bucket_lifecycle(bucket)
            cors = self.provider.get_bucket_cors(bucket)
            snapshot = BucketSettingsSnapshot(
                versioning_enabled=self.provider.get_bucket_versioning(bucket),
                encryption=self.provider.get_bucket_encryption(bucket),
                public_access_block=self.provider.get_public_access_block(bucket),
                lifecycle_rules=None if lifecycle is None else tuple(lifecycle),
                cors_rules=None if cors is None else tuple(cors),
            )
        except StorageError as e:
            raise SourceUnavailableError(bucket, e) from e

        logger.debug(f"Read settings snapshot of {bucket}: {snapshot}")
        return snapshot


def describe_facets(snapshot: BucketSettingsSnapshot | None) -> dict[str, str]:
    """Summarize what each facet will become on the target."""
    if snapshot is None:
        return {facet: "from source" for facet in FACETS}

    facets: dict[str, str] = {}
    if snapshot.versioning_enabled is None:
        facets["versioning"] = "absent"
    else:
        facets["versioning"] = "enabled" if snapshot.versioning_enabled else "suspended"

    if snapshot.encryption is None:
        facets["encryption"] = "absent"
    else:
        facets["encryption"] = snapshot.encryption.algorithm

    if snapshot.public_access_block is None:
        facets["public_access_block"] = "absent (fail-safe: all blocked)"
    else:
        pab = snapshot.public_access_block
        blocked = sum(
            [pab.block_public_acls, pab.ignore_public_acls, pab.block_public_policy, pab.restrict_public_buckets]
        )
        facets["public_access_block"] = f"{blocked}/4 blocked"

    for facet, rules in (("lifecycle", snapshot.lifecycle_rules), ("cors", snapshot.cors_rules)):
        facets[facet] = "absent" if rules is None else f"{len(rules)} rule(s)"
    return facets

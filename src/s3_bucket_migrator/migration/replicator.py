"""Object data replication between buckets."""

from __future__ import annotations

import logging

from .. import metrics
from ..exceptions import PreconditionError
from ..services.s3.base import StorageError, StorageProvider
from ..services.s3.models import CopyResult, ObjectInfo
from ..utils.errors import sanitize_exception

logger = logging.getLogger(__name__)


class DataReplicator:
    """Copies every object of a source bucket into its target bucket.

    Objects whose target copy already has the same size and ETag are
    skipped, so repeated runs converge without re-transferring data.
    """

    def __init__(self, provider: StorageProvider) -> None:
        self.provider = provider

    def check_preconditions(self, source: str, target: str) -> None:
        """Fail fast unless both buckets exist and can be listed.

        Raises:
            PreconditionError: If a precondition does not hold
        """
        for role, bucket in (("source", source), ("target", target)):
            try:
                if not self.provider.bucket_exists(bucket):
                    raise PreconditionError(bucket, f"{role} bucket {bucket} does not exist")
                self.provider.check_bucket_listable(bucket)
            except StorageError as e:
                raise PreconditionError(bucket, f"{role} bucket {bucket} is not accessible: {e}") from e

    def copy(self, source: str, target: str, delete_extraneous: bool = False) -> CopyResult:
        """Copy all objects from source to target under identical keys.

        Args:
            source: Source bucket name
            target: Target bucket name
            delete_extraneous: Delete target objects missing from the source

        Returns:
            CopyResult; on a mid-transfer failure succeeded is False and the
            counts reflect the objects handled before it

        Raises:
            PreconditionError: If a precondition does not hold
        """
        self.check_preconditions(source, target)

        result = CopyResult(succeeded=False)
        try:
            existing: dict[str, ObjectInfo] = {obj.key: obj for obj in self.provider.iter_objects(target)}
            for obj in self.provider.iter_objects(source):
                current = existing.pop(obj.key, None)
                if current is not None and current.size == obj.size and current.etag == obj.etag:
                    result.objects_skipped += 1
                    continue
                self.provider.copy_object(source, obj.key, target)
                result.objects_copied += 1
                metrics.objects_copied_total.labels(result="success").inc()

            if delete_extraneous:
                for key in existing:
                    self.provider.delete_object(target, key)
                    result.objects_deleted += 1
        except StorageError as e:
            metrics.objects_copied_total.labels(result="failed").inc()
            result.error_detail = sanitize_exception(e)
            logger.error(
                f"Copy from {source} to {target} failed after {result.objects_copied} objects: {result.error_detail}"
            )
            return result

        result.succeeded = True
        logger.info(
            f"Copied {result.objects_copied} objects from {source} to {target} "
            f"({result.objects_skipped} already present, {result.objects_deleted} deleted)"
        )
        return result

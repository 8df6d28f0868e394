"""Target bucket provisioning."""

from __future__ import annotations

import logging
import time
from typing import Callable, Sequence, TypeVar

from .. import metrics
from ..exceptions import ConsistencyTimeoutError, SettingsApplyError
from ..services.s3.base import StorageError, StorageProvider
from ..services.s3.models import (
    BucketSettingsSnapshot,
    CorsRule,
    LifecycleRule,
    ProvisionResult,
    PublicAccessBlockRule,
)
from ..utils.rate_limit import wait_until

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


def _same_rules(current: Sequence[_T] | None, desired: Sequence[_T]) -> bool:
    return current is not None and list(current) == list(desired)


def _sorted_lifecycle(rules: Sequence[LifecycleRule]) -> list[LifecycleRule]:
    return sorted(rules, key=lambda rule: (rule.id or "", repr(rule)))


class BucketProvisioner:
    """Ensures a target bucket exists and matches a settings snapshot.

    Facets are applied in a fixed order: versioning, encryption, public
    access block, lifecycle, CORS, then tags. Each facet is read before it is
    written and only written on drift, so repeated calls converge without
    further writes. A failed facet leaves earlier facets in place.
    """

    def __init__(
        self,
        provider: StorageProvider,
        consistency_timeout: float = 60.0,
        initial_delay: float = 0.5,
        max_delay: float = 8.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.provider = provider
        self.consistency_timeout = consistency_timeout
        self.initial_delay = initial_delay
        self.max_delay = max_delay
        self._sleep = sleep
        self._clock = clock

    def ensure(
        self,
        target: str,
        snapshot: BucketSettingsSnapshot,
        tags: dict[str, str] | None = None,
        region: str | None = None,
    ) -> ProvisionResult:
        """Create or reconcile a target bucket.

        Raises:
            SettingsApplyError: If creation or a facet fails
            ConsistencyTimeoutError: If a created bucket never becomes visible
        """
        result = ProvisionResult(bucket=target)

        try:
            exists = self.provider.bucket_exists(target)
        except StorageError as e:
            raise SettingsApplyError(target, "bucket", e) from e

        if not exists:
            self._create(target, region, result)

        steps: list[tuple[str, Callable[[], bool]]] = [
            ("versioning", lambda: self._ensure_versioning(target, snapshot.versioning_enabled)),
            ("encryption", lambda: self._ensure_encryption(target, snapshot)),
            ("public_access_block", lambda: self._ensure_public_access_block(target, snapshot)),
            ("lifecycle", lambda: self._ensure_lifecycle(target, snapshot.lifecycle_rules)),
            ("cors", lambda: self._ensure_cors(target, snapshot.cors_rules)),
        ]
        if tags:
            steps.append(("tags", lambda: self._ensure_tags(target, tags)))

        for facet, apply in steps:
            try:
                changed = apply()
            except StorageError as e:
                metrics.bucket_operations_total.labels(operation=f"apply_{facet}", result="failed").inc()
                logger.error(f"Failed to apply {facet} to bucket {target}: {e}")
                raise SettingsApplyError(target, facet, e, applied=result.applied, created=result.created) from e
            result.applied.append(facet)
            if changed:
                result.changed.append(facet)
                metrics.bucket_operations_total.labels(operation=f"apply_{facet}", result="success").inc()
                if not result.created:
                    metrics.drift_detected_total.labels(facet=facet).inc()

        logger.info(
            f"Bucket {target} reconciled (created={result.created}, changed={result.changed or 'none'})"
        )
        return result

    def _create(self, target: str, region: str | None, result: ProvisionResult) -> None:
        try:
            self.provider.create_bucket(target, region)
        except StorageError as e:
            metrics.bucket_operations_total.labels(operation="create", result="failed").inc()
            raise SettingsApplyError(target, "bucket", e) from e
        result.created = True
        metrics.bucket_operations_total.labels(operation="create", result="success").inc()

        def visible() -> bool:
            try:
                return self.provider.bucket_exists(target)
            except StorageError as e:
                logger.debug(f"Bucket {target} not visible yet: {e}")
                return False

        if not wait_until(
            visible,
            timeout=self.consistency_timeout,
            initial_delay=self.initial_delay,
            max_delay=self.max_delay,
            sleep=self._sleep,
            clock=self._clock,
        ):
            raise ConsistencyTimeoutError(target, self.consistency_timeout)

    def _ensure_versioning(self, target: str, desired: bool | None) -> bool:
        current = self.provider.get_bucket_versioning(target)
        if desired is None or desired is False:
            # Unversioned is the provider default; an enabled bucket can only be suspended
            if current is True:
                self.provider.set_bucket_versioning(target, False)
                return True
            return False
        if current is not True:
            self.provider.set_bucket_versioning(target, True)
            return True
        return False

    def _ensure_encryption(self, target: str, snapshot: BucketSettingsSnapshot) -> bool:
        current = self.provider.get_bucket_encryption(target)
        desired = snapshot.encryption
        if desired is None:
            if current is not None:
                self.provider.delete_bucket_encryption(target)
                return True
            return False
        if current != desired:
            self.provider.set_bucket_encryption(target, desired)
            return True
        return False

    def _ensure_public_access_block(self, target: str, snapshot: BucketSettingsSnapshot) -> bool:
        desired = snapshot.public_access_block or PublicAccessBlockRule.fail_safe()
        current = self.provider.get_public_access_block(target)
        if current != desired:
            self.provider.set_public_access_block(target, desired)
            return True
        return False

    def _ensure_lifecycle(self, target: str, desired: Sequence[LifecycleRule] | None) -> bool:
        current = self.provider.get_bucket_lifecycle(target)
        if not desired:
            if current:
                self.provider.delete_bucket_lifecycle(target)
                return True
            return False
        if current is None or _sorted_lifecycle(current) != _sorted_lifecycle(desired):
            self.provider.set_bucket_lifecycle(target, desired)
            return True
        return False

    def _ensure_cors(self, target: str, desired: Sequence[CorsRule] | None) -> bool:
        current = self.provider.get_bucket_cors(target)
        if not desired:
            if current:
                self.provider.delete_bucket_cors(target)
                return True
            return False
        if not _same_rules(current, desired):
            self.provider.set_bucket_cors(target, desired)
            return True
        return False

    def _ensure_tags(self, target: str, tags: dict[str, str]) -> bool:
        current = self.provider.get_bucket_tags(target)
        merged = {**current, **tags}
        if merged != current:
            self.provider.set_bucket_tags(target, merged)
            return True
        return False

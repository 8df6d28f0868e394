"""Handler for Provider CRD."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import kopf

from .. import metrics
from ..builders.provider import create_provider_from_spec
from ..constants import API_GROUP_VERSION, KIND_PROVIDER
from ..services.s3.base import AccessDeniedError, StorageError
from ..tracing import trace_span
from ..utils.cache import invalidate_cache, make_cache_key
from ..utils.conditions import (
    set_auth_valid_condition,
    set_endpoint_reachable_condition,
    set_ready_condition,
)
from ..utils.errors import sanitize_exception
from ..utils.events import emit_validate_succeeded
from .base import BaseHandler


class ProviderHandler(BaseHandler):
    """Handler for Provider resources.

    A Provider is ready once its credentials can be read from their secrets
    and the storage endpoint accepts them.
    """

    def __init__(self) -> None:
        super().__init__(KIND_PROVIDER)

    def reconcile(
        self,
        spec: dict[str, Any],
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
    ) -> None:
        """Reconcile Provider resource."""
        name = meta.get("name", "unknown")
        namespace = meta.get("namespace", "default")
        generation = meta.get("generation")

        # Migrations must not keep using the previous spec
        invalidate_cache(make_cache_key(KIND_PROVIDER, namespace, name))

        with trace_span("reconcile_provider", kind=KIND_PROVIDER, attributes={"provider.name": name}):
            if not spec.get("region"):
                self.handle_validation_error(meta, "region is required")

            emit_validate_succeeded(meta)
            conditions = status.get("conditions", [])

            try:
                provider = create_provider_from_spec(spec, meta)
            except ValueError as e:
                sanitized_error = sanitize_exception(e)
                metrics.error_total.labels(kind=KIND_PROVIDER, error_type=type(e).__name__).inc()
                self.log_error(meta, f"Failed to create provider: {sanitized_error}", error=e, reason="AuthFailed")
                conditions = set_auth_valid_condition(conditions, False, f"Credentials unavailable: {sanitized_error}", generation)
                conditions = set_endpoint_reachable_condition(
                    conditions, False, "Cannot test connectivity without credentials", generation
                )
                conditions = set_ready_condition(conditions, False, "Provider is not ready", generation)
                self.update_resource_status(patch, meta, False, {"connected": False, "conditions": conditions})
                raise kopf.TemporaryError(f"Provider credentials unavailable: {sanitized_error}", delay=60)

            with trace_span("verify_credentials", kind=KIND_PROVIDER):
                try:
                    identity = provider.verify_credentials()
                    auth_valid, connected = True, True
                    auth_message = f"Authenticated as {identity}"
                    endpoint_message = "Endpoint is reachable"
                except AccessDeniedError as e:
                    auth_valid, connected = False, True
                    auth_message = f"Authentication failed: {sanitize_exception(e)}"
                    endpoint_message = "Endpoint is reachable"
                except StorageError as e:
                    auth_valid, connected = False, False
                    auth_message = "Cannot verify credentials while the endpoint is unreachable"
                    endpoint_message = f"Connectivity test failed: {sanitize_exception(e)}"

            metrics.provider_connectivity_total.labels(
                provider=name, status="connected" if connected else "disconnected"
            ).inc()
            if not auth_valid:
                self.log_warning(meta, auth_message, reason="AuthFailed", endpoint_message=endpoint_message)

            conditions = set_auth_valid_condition(conditions, auth_valid, auth_message, generation)
            conditions = set_endpoint_reachable_condition(conditions, connected, endpoint_message, generation)

            ready = auth_valid and connected
            conditions = set_ready_condition(
                conditions, ready, "Provider is ready" if ready else "Provider is not ready", generation
            )

            status_data = {
                "connected": connected,
                "lastConnectTime": datetime.now(timezone.utc).isoformat() if connected else None,
                "conditions": conditions,
            }
            self.update_resource_status(patch, meta, ready, status_data)


# Global handler instance
_handler = ProviderHandler()


@kopf.on.create(API_GROUP_VERSION, KIND_PROVIDER)
@kopf.on.update(API_GROUP_VERSION, KIND_PROVIDER)
@kopf.on.resume(API_GROUP_VERSION, KIND_PROVIDER)
def handle_provider(
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle Provider resource reconciliation."""
    _handler.reconcile_with_metrics(meta, lambda: _handler.reconcile(spec, meta, status, patch))

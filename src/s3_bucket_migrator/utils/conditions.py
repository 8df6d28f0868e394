"""Utilities for managing Kubernetes conditions."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from ..constants import (
    COND_AUTH_VALID,
    COND_CONFIG_INVALID,
    COND_ENDPOINT_REACHABLE,
    COND_PARTIALLY_APPLIED,
    COND_PLANNED,
    COND_PROVIDER_NOT_READY,
    COND_READY,
)


def update_condition(
    conditions: list[dict[str, Any]],
    condition_type: str,
    status: str,
    reason: str,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Update or add a condition to the conditions list.

    Args:
        conditions: List of existing conditions
        condition_type: Type of condition
        status: Status of condition ("True", "False", "Unknown")
        reason: Reason for the condition
        message: Human-readable message
        observed_generation: Generation when condition was observed

    Returns:
        Updated list of conditions
    """
    now = datetime.now(timezone.utc).isoformat()

    existing_idx = None
    for idx, cond in enumerate(conditions):
        if cond.get("type") == condition_type:
            existing_idx = idx
            break

    new_condition = {
        "type": condition_type,
        "status": status,
        "reason": reason,
        "message": message,
        "lastTransitionTime": now,
    }

    if observed_generation is not None:
        new_condition["observedGeneration"] = observed_generation

    if existing_idx is not None:
        existing = conditions[existing_idx]
        # lastTransitionTime only moves when the status flips
        if existing.get("status") == status:
            new_condition["lastTransitionTime"] = existing.get("lastTransitionTime", now)
        conditions[existing_idx] = new_condition
    else:
        conditions.append(new_condition)

    return conditions


def _set_bool_condition(
    conditions: list[dict[str, Any]],
    condition_type: str,
    status: bool,
    reasons: tuple[str, str],
    message: str,
    observed_generation: int | None,
) -> list[dict[str, Any]]:
    return update_condition(
        conditions,
        condition_type,
        "True" if status else "False",
        reasons[0] if status else reasons[1],
        message,
        observed_generation,
    )


def set_ready_condition(
    conditions: list[dict[str, Any]],
    status: bool,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the Ready condition."""
    return _set_bool_condition(conditions, COND_READY, status, ("Ready", "NotReady"), message, observed_generation)


def set_auth_valid_condition(
    conditions: list[dict[str, Any]],
    status: bool,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the AuthValid condition."""
    return _set_bool_condition(
        conditions, COND_AUTH_VALID, status, ("AuthValid", "AuthInvalid"), message, observed_generation
    )


def set_endpoint_reachable_condition(
    conditions: list[dict[str, Any]],
    status: bool,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the EndpointReachable condition."""
    return _set_bool_condition(
        conditions,
        COND_ENDPOINT_REACHABLE,
        status,
        ("EndpointReachable", "EndpointUnreachable"),
        message,
        observed_generation,
    )


def set_planned_condition(
    conditions: list[dict[str, Any]],
    status: bool,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the Planned condition."""
    return _set_bool_condition(
        conditions, COND_PLANNED, status, ("PlanReady", "PlanFailed"), message, observed_generation
    )


def set_partially_applied_condition(
    conditions: list[dict[str, Any]],
    status: bool,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the PartiallyApplied condition."""
    return _set_bool_condition(
        conditions,
        COND_PARTIALLY_APPLIED,
        status,
        ("BucketsFailed", "AllBucketsApplied"),
        message,
        observed_generation,
    )


def set_provider_not_ready_condition(
    conditions: list[dict[str, Any]],
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the ProviderNotReady condition."""
    return update_condition(
        conditions, COND_PROVIDER_NOT_READY, "True", "ProviderNotReady", message, observed_generation
    )


def set_config_invalid_condition(
    conditions: list[dict[str, Any]],
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the ConfigInvalid condition."""
    return update_condition(
        conditions, COND_CONFIG_INVALID, "True", "ConfigInvalid", message, observed_generation
    )

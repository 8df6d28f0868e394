"""Utilities for reading Kubernetes secrets."""

from __future__ import annotations

import base64
import binascii

from kubernetes import client


def get_secret_value(
    api: client.CoreV1Api,
    namespace: str,
    secret_name: str,
    key: str,
) -> str:
    """Get a value from a Kubernetes secret.

    Args:
        api: Kubernetes API client
        namespace: Namespace of the secret
        secret_name: Name of the secret
        key: Key in the secret

    Returns:
        Secret value

    Raises:
        ValueError: If secret or key not found
    """
    try:
        secret = api.read_namespaced_secret(name=secret_name, namespace=namespace)
    except client.exceptions.ApiException as e:
        if e.status == 404:
            raise ValueError(f"Secret '{secret_name}' not found in namespace '{namespace}'") from e
        raise

    if not secret.data or key not in secret.data:
        raise ValueError(f"Key '{key}' not found in secret '{secret_name}'")

    value = secret.data[key]
    # Different kubernetes client versions hand back str or bytes
    if isinstance(value, bytes):
        return value.decode("utf-8")
    try:
        return base64.b64decode(value, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return value

"""Builder for storage provider instances."""

from __future__ import annotations

from typing import Any

from botocore.exceptions import BotoCoreError
from kubernetes import client, config

from ..services.aws.client import AWSProvider
from ..utils.secrets import get_secret_value

DEFAULT_REGION = "us-east-1"


def create_provider(
    region: str | None = None,
    endpoint: str | None = None,
    profile: str | None = None,
    access_key: str | None = None,
    secret_key: str | None = None,
    session_token: str | None = None,
    path_style: bool = False,
    insecure_skip_verify: bool = False,
    max_pool_connections: int = 32,
) -> AWSProvider:
    """Create a provider from explicit settings.

    Without explicit keys the boto3 default credential chain (or the named
    profile) supplies credentials.
    """
    if (access_key is None) != (secret_key is None):
        raise ValueError("access_key and secret_key must be given together")
    try:
        return AWSProvider(
            region=region or DEFAULT_REGION,
            endpoint=endpoint,
            access_key=access_key,
            secret_key=secret_key,
            session_token=session_token,
            profile=profile,
            path_style=path_style,
            insecure_skip_verify=insecure_skip_verify,
            max_pool_connections=max_pool_connections,
        )
    except BotoCoreError as e:
        raise ValueError(f"Cannot configure storage client: {e}") from e


def _core_api() -> client.CoreV1Api:
    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()
    return client.CoreV1Api()


def create_provider_from_spec(
    spec: dict[str, Any],
    meta: dict[str, Any],
    api: client.CoreV1Api | None = None,
    max_pool_connections: int = 32,
) -> AWSProvider:
    """Create a storage provider instance from a Provider resource spec.

    Args:
        spec: Provider CRD spec
        meta: Resource metadata
        api: CoreV1Api used to read credential secrets
        max_pool_connections: HTTP pool size, sized to the migration's concurrency

    Returns:
        Configured storage provider instance

    Raises:
        ValueError: If configuration is invalid or a secret is missing
    """
    namespace = meta.get("namespace", "default")

    auth = spec.get("auth", {})
    access_key_ref = auth.get("accessKeySecretRef", {})
    secret_key_ref = auth.get("secretKeySecretRef", {})

    access_key_name = access_key_ref.get("name")
    secret_key_name = secret_key_ref.get("name")

    if not access_key_name or not secret_key_name:
        raise ValueError("accessKeySecretRef and secretKeySecretRef are required")

    region = spec.get("region")
    if not region:
        raise ValueError("region is required")

    provider_type = spec.get("type", "aws")
    if provider_type not in ("aws", "custom"):
        raise ValueError(f"Unsupported provider type: {provider_type}")

    api = api or _core_api()
    access_key = get_secret_value(api, namespace, access_key_name, access_key_ref.get("key", "access-key"))
    secret_key = get_secret_value(api, namespace, secret_key_name, secret_key_ref.get("key", "secret-key"))

    session_token = None
    session_token_ref = auth.get("sessionTokenSecretRef") or {}
    if session_token_ref.get("name"):
        session_token = get_secret_value(
            api, namespace, session_token_ref["name"], session_token_ref.get("key", "session-token")
        )

    tls_config = spec.get("tls", {})

    return create_provider(
        region=region,
        endpoint=spec.get("endpoint"),
        access_key=access_key,
        secret_key=secret_key,
        session_token=session_token,
        path_style=spec.get("pathStyle", False),
        insecure_skip_verify=tls_config.get("insecureSkipVerify", False),
        max_pool_connections=max_pool_connections,
    )

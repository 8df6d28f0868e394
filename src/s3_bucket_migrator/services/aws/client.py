"""AWS S3 client implementation."""

from __future__ import annotations

import logging
import time
from datetime import date, datetime
from functools import wraps
from typing import Any, Callable, Iterator, Sequence, TypeVar

import boto3
from boto3.s3.transfer import TransferConfig
from botocore.exceptions import BotoCoreError, ClientError

from ... import metrics
from ...utils.rate_limit import rate_limit_provider
from ..s3.base import (
    AccessDeniedError,
    BucketAlreadyExistsError,
    BucketNotFoundError,
    StorageError,
    UnsupportedSettingError,
)
from ..s3.models import (
    CorsRule,
    EncryptionRule,
    LifecycleRule,
    NoncurrentTransition,
    ObjectInfo,
    PublicAccessBlockRule,
    Transition,
)

logger = logging.getLogger(__name__)

_F = TypeVar("_F", bound=Callable[..., Any])

NOT_FOUND_CODES = {"NoSuchBucket", "NotFound", "404"}
ACCESS_DENIED_CODES = {
    "AccessDenied",
    "Forbidden",
    "403",
    "AllAccessDisabled",
    "InvalidAccessKeyId",
    "SignatureDoesNotMatch",
    "ExpiredToken",
}

# Error codes meaning "facet not configured"
ENCRYPTION_NOT_FOUND = "ServerSideEncryptionConfigurationNotFoundError"
PUBLIC_ACCESS_BLOCK_NOT_FOUND = "NoSuchPublicAccessBlockConfiguration"
LIFECYCLE_NOT_FOUND = "NoSuchLifecycleConfiguration"
CORS_NOT_FOUND = "NoSuchCORSConfiguration"
TAGS_NOT_FOUND = "NoSuchTagSet"

# Objects up to the CopyObject limit are copied in one request so the target
# ETag matches a single-part source ETag
MAX_SINGLE_COPY_BYTES = 5 * 1024**3
COPY_TRANSFER_CONFIG = TransferConfig(multipart_threshold=MAX_SINGLE_COPY_BYTES)


def _error_code(error: Exception) -> str:
    if not isinstance(error, ClientError):
        return ""
    return error.response.get("Error", {}).get("Code", "")


def translate_error(error: Exception, bucket: str | None = None) -> StorageError:
    """Translate a botocore error into a provider-neutral StorageError."""
    if isinstance(error, ClientError):
        code = _error_code(error)
        if code in NOT_FOUND_CODES:
            return BucketNotFoundError(str(error), code=code, bucket=bucket)
        if code in ACCESS_DENIED_CODES:
            return AccessDeniedError(str(error), code=code, bucket=bucket)
        if code == "BucketAlreadyExists":
            return BucketAlreadyExistsError(str(error), code=code, bucket=bucket)
        return StorageError(str(error), code=code, bucket=bucket)
    return StorageError(str(error), bucket=bucket)


def provider_call(operation: str) -> Callable[[_F], _F]:
    """Rate limit a provider call and record its API metrics."""

    def decorator(func: _F) -> _F:
        @wraps(func)
        @rate_limit_provider
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            start_time = time.time()
            try:
                result = func(*args, **kwargs)
                metrics.api_call_total.labels(api_type="provider", operation=operation, result="success").inc()
                return result
            except Exception:
                metrics.api_call_total.labels(api_type="provider", operation=operation, result="error").inc()
                raise
            finally:
                duration = time.time() - start_time
                metrics.api_call_duration_seconds.labels(api_type="provider", operation=operation).observe(duration)

        return wrapper  # type: ignore

    return decorator


def _format_date(value: Any) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


# Rule elements a LifecycleRule reproduces exactly
RULE_KEYS = {
    "ID",
    "Status",
    "Filter",
    "Prefix",
    "Expiration",
    "Transitions",
    "NoncurrentVersionTransitions",
    "NoncurrentVersionExpiration",
    "AbortIncompleteMultipartUpload",
}
FILTER_KEYS = {"Prefix", "Tag", "ObjectSizeGreaterThan", "ObjectSizeLessThan", "And"}
AND_KEYS = {"Prefix", "Tags", "ObjectSizeGreaterThan", "ObjectSizeLessThan"}
EXPIRATION_KEYS = {"Days", "Date", "ExpiredObjectDeleteMarker"}
TRANSITION_KEYS = {"Days", "Date", "StorageClass"}
NONCURRENT_TRANSITION_KEYS = {"NoncurrentDays", "StorageClass", "NewerNoncurrentVersions"}
NONCURRENT_EXPIRATION_KEYS = {"NoncurrentDays", "NewerNoncurrentVersions"}


def _check_keys(element: str, value: dict[str, Any], allowed: set[str], rule_id: Any, bucket: str | None) -> None:
    unknown = sorted(set(value) - allowed)
    if unknown:
        raise UnsupportedSettingError(
            f"Lifecycle rule {rule_id or '(unnamed)'} has unsupported {element} element(s): {', '.join(unknown)}",
            code="UnsupportedLifecycleRule",
            bucket=bucket,
        )


def lifecycle_rule_from_aws(rule: dict[str, Any], bucket: str | None = None) -> LifecycleRule:
    """Convert an AWS lifecycle rule into a LifecycleRule.

    Raises:
        UnsupportedSettingError: If the rule carries an element a LifecycleRule
            cannot hold; copying it without that element would widen the rule
    """
    rule_id = rule.get("ID")
    _check_keys("rule", rule, RULE_KEYS, rule_id, bucket)
    rule_filter = rule.get("Filter", {})
    _check_keys("filter", rule_filter, FILTER_KEYS, rule_id, bucket)

    conditions = dict(rule_filter)
    conjunction = conditions.pop("And", None)
    if conjunction is not None:
        _check_keys("filter", conjunction, AND_KEYS, rule_id, bucket)
        conditions.update(conjunction)
    tags = [conditions["Tag"]] if "Tag" in conditions else conditions.get("Tags", [])

    expiration = rule.get("Expiration", {})
    _check_keys("expiration", expiration, EXPIRATION_KEYS, rule_id, bucket)
    transitions = rule.get("Transitions", [])
    for transition in transitions:
        _check_keys("transition", transition, TRANSITION_KEYS, rule_id, bucket)
    noncurrent_transitions = rule.get("NoncurrentVersionTransitions", [])
    for transition in noncurrent_transitions:
        _check_keys("noncurrent transition", transition, NONCURRENT_TRANSITION_KEYS, rule_id, bucket)
    noncurrent_expiration = rule.get("NoncurrentVersionExpiration", {})
    _check_keys("noncurrent expiration", noncurrent_expiration, NONCURRENT_EXPIRATION_KEYS, rule_id, bucket)

    return LifecycleRule(
        id=rule_id,
        status=rule.get("Status", "Enabled"),
        # Filter {}, Filter {"Prefix": ""} and no filter all match every object
        prefix=conditions.get("Prefix", rule.get("Prefix")) or None,
        tags=tuple(sorted((tag["Key"], tag["Value"]) for tag in tags)),
        object_size_greater_than=conditions.get("ObjectSizeGreaterThan"),
        object_size_less_than=conditions.get("ObjectSizeLessThan"),
        expiration_days=expiration.get("Days"),
        expiration_date=_format_date(expiration["Date"]) if "Date" in expiration else None,
        expired_object_delete_marker=expiration.get("ExpiredObjectDeleteMarker"),
        transitions=tuple(
            Transition(
                storage_class=t["StorageClass"],
                days=t.get("Days"),
                date=_format_date(t["Date"]) if "Date" in t else None,
            )
            for t in transitions
        ),
        noncurrent_transitions=tuple(
            NoncurrentTransition(
                noncurrent_days=t["NoncurrentDays"],
                storage_class=t["StorageClass"],
                newer_noncurrent_versions=t.get("NewerNoncurrentVersions"),
            )
            for t in noncurrent_transitions
        ),
        noncurrent_expiration_days=noncurrent_expiration.get("NoncurrentDays"),
        noncurrent_newer_versions=noncurrent_expiration.get("NewerNoncurrentVersions"),
        abort_incomplete_multipart_days=rule.get("AbortIncompleteMultipartUpload", {}).get(
            "DaysAfterInitiation"
        ),
    )


def _lifecycle_filter_to_aws(rule: LifecycleRule) -> dict[str, Any]:
    conditions: dict[str, Any] = {}
    if rule.prefix:
        conditions["Prefix"] = rule.prefix
    if rule.object_size_greater_than is not None:
        conditions["ObjectSizeGreaterThan"] = rule.object_size_greater_than
    if rule.object_size_less_than is not None:
        conditions["ObjectSizeLessThan"] = rule.object_size_less_than
    tag_set = [{"Key": key, "Value": value} for key, value in rule.tags]

    if len(conditions) + len(tag_set) > 1:
        if tag_set:
            conditions["Tags"] = tag_set
        return {"And": conditions}
    if tag_set:
        return {"Tag": tag_set[0]}
    return conditions or {"Prefix": ""}


def lifecycle_rule_to_aws(rule: LifecycleRule) -> dict[str, Any]:
    """Convert a LifecycleRule into the AWS lifecycle rule format."""
    aws_rule: dict[str, Any] = {"Status": rule.status, "Filter": _lifecycle_filter_to_aws(rule)}
    if rule.id:
        aws_rule["ID"] = rule.id

    expiration: dict[str, Any] = {}
    if rule.expiration_days is not None:
        expiration["Days"] = rule.expiration_days
    if rule.expiration_date is not None:
        expiration["Date"] = rule.expiration_date
    if rule.expired_object_delete_marker is not None:
        expiration["ExpiredObjectDeleteMarker"] = rule.expired_object_delete_marker
    if expiration:
        aws_rule["Expiration"] = expiration

    if rule.transitions:
        aws_rule["Transitions"] = []
        for t in rule.transitions:
            transition: dict[str, Any] = {"StorageClass": t.storage_class}
            if t.days is not None:
                transition["Days"] = t.days
            if t.date is not None:
                transition["Date"] = t.date
            aws_rule["Transitions"].append(transition)
    if rule.noncurrent_transitions:
        aws_rule["NoncurrentVersionTransitions"] = []
        for t in rule.noncurrent_transitions:
            transition = {"NoncurrentDays": t.noncurrent_days, "StorageClass": t.storage_class}
            if t.newer_noncurrent_versions is not None:
                transition["NewerNoncurrentVersions"] = t.newer_noncurrent_versions
            aws_rule["NoncurrentVersionTransitions"].append(transition)

    noncurrent_expiration: dict[str, Any] = {}
    if rule.noncurrent_expiration_days is not None:
        noncurrent_expiration["NoncurrentDays"] = rule.noncurrent_expiration_days
    if rule.noncurrent_newer_versions is not None:
        noncurrent_expiration["NewerNoncurrentVersions"] = rule.noncurrent_newer_versions
    if noncurrent_expiration:
        aws_rule["NoncurrentVersionExpiration"] = noncurrent_expiration
    if rule.abort_incomplete_multipart_days is not None:
        aws_rule["AbortIncompleteMultipartUpload"] = {
            "DaysAfterInitiation": rule.abort_incomplete_multipart_days
        }
    return aws_rule


def cors_rule_from_aws(rule: dict[str, Any]) -> CorsRule:
    """Convert an AWS CORS rule into a CorsRule."""
    return CorsRule(
        allowed_methods=tuple(rule.get("AllowedMethods", [])),
        allowed_origins=tuple(rule.get("AllowedOrigins", [])),
        allowed_headers=tuple(rule.get("AllowedHeaders", [])),
        exposed_headers=tuple(rule.get("ExposeHeaders", [])),
        max_age_seconds=rule.get("MaxAgeSeconds"),
        id=rule.get("ID"),
    )


def cors_rule_to_aws(rule: CorsRule) -> dict[str, Any]:
    """Convert a CorsRule into the AWS CORS rule format."""
    aws_rule: dict[str, Any] = {
        "AllowedMethods": list(rule.allowed_methods),
        "AllowedOrigins": list(rule.allowed_origins),
    }
    if rule.allowed_headers:
        aws_rule["AllowedHeaders"] = list(rule.allowed_headers)
    if rule.exposed_headers:
        aws_rule["ExposeHeaders"] = list(rule.exposed_headers)
    if rule.max_age_seconds is not None:
        aws_rule["MaxAgeSeconds"] = rule.max_age_seconds
    if rule.id:
        aws_rule["ID"] = rule.id
    return aws_rule


class AWSProvider:
    """AWS S3 provider implementation.

    One client is shared by every pipeline thread; boto3 clients are
    thread-safe and the provider never mutates its own configuration after
    construction.
    """

    def __init__(
        self,
        region: str,
        endpoint: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        session_token: str | None = None,
        profile: str | None = None,
        path_style: bool = False,
        insecure_skip_verify: bool = False,
        max_pool_connections: int = 32,
    ) -> None:
        """Initialize AWS S3 provider.

        Args:
            region: AWS region
            endpoint: Optional S3 endpoint URL for S3-compatible services
            access_key: Access key ID (default credential chain when omitted)
            secret_key: Secret access key
            session_token: Optional session token for temporary credentials
            profile: Optional named profile for the default credential chain
            path_style: Use path-style addressing
            insecure_skip_verify: Skip TLS verification
            max_pool_connections: HTTP connection pool size shared by pipelines
        """
        self.endpoint = endpoint
        self.region = region
        self.path_style = path_style

        # Configure boto3 client
        config = boto3.session.Config(
            signature_version="s3v4",
            s3={"addressing_style": "path" if path_style else "auto"},
            max_pool_connections=max_pool_connections,
            retries={"max_attempts": 5, "mode": "standard"},
        )

        session = boto3.session.Session(profile_name=profile) if profile else boto3.session.Session()
        self.client = session.client(
            "s3",
            endpoint_url=endpoint,
            region_name=region,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            aws_session_token=session_token,
            config=config,
            verify=not insecure_skip_verify,
        )

    @provider_call("verify_credentials")
    def verify_credentials(self) -> str:
        """Verify credentials by listing buckets and return the owner identity."""
        try:
            response = self.client.list_buckets()
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Credential verification failed: {e}")
            raise translate_error(e) from e
        owner = response.get("Owner", {})
        return owner.get("DisplayName") or owner.get("ID") or "unknown"

    @provider_call("bucket_exists")
    def bucket_exists(self, name: str) -> bool:
        """Check if bucket exists.

        Raises:
            AccessDeniedError: If the bucket exists but is not accessible
        """
        try:
            self.client.head_bucket(Bucket=name)
            return True
        except (ClientError, BotoCoreError) as e:
            error = translate_error(e, name)
            if isinstance(error, BucketNotFoundError):
                return False
            logger.error(f"Failed to check bucket {name}: {e}")
            raise error from e

    @provider_call("create_bucket")
    def create_bucket(self, name: str, region: str | None = None) -> None:
        """Create an empty bucket.

        A bucket already owned by the caller counts as created.
        """
        create_params: dict[str, Any] = {"Bucket": name}
        region = region or self.region
        # us-east-1 rejects an explicit location constraint
        if region and region != "us-east-1":
            create_params["CreateBucketConfiguration"] = {"LocationConstraint": region}
        try:
            self.client.create_bucket(**create_params)
            logger.info(f"Created bucket {name} in {region}")
        except (ClientError, BotoCoreError) as e:
            if _error_code(e) == "BucketAlreadyOwnedByYou":
                logger.info(f"Bucket {name} already owned by caller")
                return
            logger.error(f"Failed to create bucket {name}: {e}")
            raise translate_error(e, name) from e

    def bucket_locator(self, name: str) -> str:
        """Return the ARN of a bucket."""
        partition = "aws"
        if self.region.startswith("cn-"):
            partition = "aws-cn"
        elif self.region.startswith("us-gov-"):
            partition = "aws-us-gov"
        return f"arn:{partition}:s3:::{name}"

    @provider_call("get_bucket_versioning")
    def get_bucket_versioning(self, name: str) -> bool | None:
        """Get bucket versioning state (None if never configured)."""
        try:
            response = self.client.get_bucket_versioning(Bucket=name)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to get versioning for bucket {name}: {e}")
            raise translate_error(e, name) from e
        status = response.get("Status")
        if status is None:
            return None
        return status == "Enabled"

    @provider_call("set_bucket_versioning")
    def set_bucket_versioning(self, name: str, enabled: bool) -> None:
        """Enable or suspend bucket versioning."""
        try:
            self.client.put_bucket_versioning(
                Bucket=name,
                VersioningConfiguration={"Status": "Enabled" if enabled else "Suspended"},
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to set versioning for bucket {name}: {e}")
            raise translate_error(e, name) from e

    @provider_call("get_bucket_encryption")
    def get_bucket_encryption(self, name: str) -> EncryptionRule | None:
        """Get bucket encryption configuration."""
        try:
            response = self.client.get_bucket_encryption(Bucket=name)
        except (ClientError, BotoCoreError) as e:
            # Encryption not configured
            if _error_code(e) == ENCRYPTION_NOT_FOUND:
                return None
            logger.error(f"Failed to get encryption for bucket {name}: {e}")
            raise translate_error(e, name) from e
        rules = response.get("ServerSideEncryptionConfiguration", {}).get("Rules", [])
        if not rules:
            return None
        sse_config = rules[0].get("ApplyServerSideEncryptionByDefault", {})
        return EncryptionRule(
            algorithm=sse_config.get("SSEAlgorithm", "AES256"),
            kms_key_id=sse_config.get("KMSMasterKeyID"),
            bucket_key_enabled=rules[0].get("BucketKeyEnabled"),
        )

    @provider_call("set_bucket_encryption")
    def set_bucket_encryption(self, name: str, rule: EncryptionRule) -> None:
        """Set bucket encryption configuration."""
        sse_default: dict[str, Any] = {"SSEAlgorithm": rule.algorithm}
        if rule.kms_key_id:
            sse_default["KMSMasterKeyID"] = rule.kms_key_id
        encryption_rule: dict[str, Any] = {"ApplyServerSideEncryptionByDefault": sse_default}
        if rule.bucket_key_enabled is not None:
            encryption_rule["BucketKeyEnabled"] = rule.bucket_key_enabled
        try:
            self.client.put_bucket_encryption(
                Bucket=name,
                ServerSideEncryptionConfiguration={"Rules": [encryption_rule]},
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to set encryption for bucket {name}: {e}")
            raise translate_error(e, name) from e

    @provider_call("delete_bucket_encryption")
    def delete_bucket_encryption(self, name: str) -> None:
        """Remove bucket encryption configuration."""
        try:
            self.client.delete_bucket_encryption(Bucket=name)
        except (ClientError, BotoCoreError) as e:
            if _error_code(e) == ENCRYPTION_NOT_FOUND:
                return
            logger.error(f"Failed to delete encryption for bucket {name}: {e}")
            raise translate_error(e, name) from e

    @provider_call("get_public_access_block")
    def get_public_access_block(self, name: str) -> PublicAccessBlockRule | None:
        """Get bucket public access block."""
        try:
            response = self.client.get_public_access_block(Bucket=name)
        except (ClientError, BotoCoreError) as e:
            if _error_code(e) == PUBLIC_ACCESS_BLOCK_NOT_FOUND:
                return None
            logger.error(f"Failed to get public access block for bucket {name}: {e}")
            raise translate_error(e, name) from e
        config = response.get("PublicAccessBlockConfiguration", {})
        return PublicAccessBlockRule(
            block_public_acls=config.get("BlockPublicAcls", False),
            ignore_public_acls=config.get("IgnorePublicAcls", False),
            block_public_policy=config.get("BlockPublicPolicy", False),
            restrict_public_buckets=config.get("RestrictPublicBuckets", False),
        )

    @provider_call("set_public_access_block")
    def set_public_access_block(self, name: str, rule: PublicAccessBlockRule) -> None:
        """Set bucket public access block."""
        try:
            self.client.put_public_access_block(
                Bucket=name,
                PublicAccessBlockConfiguration={
                    "BlockPublicAcls": rule.block_public_acls,
                    "IgnorePublicAcls": rule.ignore_public_acls,
                    "BlockPublicPolicy": rule.block_public_policy,
                    "RestrictPublicBuckets": rule.restrict_public_buckets,
                },
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to set public access block for bucket {name}: {e}")
            raise translate_error(e, name) from e

    @provider_call("get_bucket_lifecycle")
    def get_bucket_lifecycle(self, name: str) -> list[LifecycleRule] | None:
        """Get bucket lifecycle configuration."""
        try:
            response = self.client.get_bucket_lifecycle_configuration(Bucket=name)
        except (ClientError, BotoCoreError) as e:
            if _error_code(e) == LIFECYCLE_NOT_FOUND:
                return None
            logger.error(f"Failed to get lifecycle for bucket {name}: {e}")
            raise translate_error(e, name) from e
        return [lifecycle_rule_from_aws(rule, bucket=name) for rule in response.get("Rules", [])]

    @provider_call("set_bucket_lifecycle")
    def set_bucket_lifecycle(self, name: str, rules: Sequence[LifecycleRule]) -> None:
        """Set bucket lifecycle configuration."""
        try:
            self.client.put_bucket_lifecycle_configuration(
                Bucket=name,
                LifecycleConfiguration={"Rules": [lifecycle_rule_to_aws(rule) for rule in rules]},
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to set lifecycle for bucket {name}: {e}")
            raise translate_error(e, name) from e

    @provider_call("delete_bucket_lifecycle")
    def delete_bucket_lifecycle(self, name: str) -> None:
        """Delete bucket lifecycle configuration."""
        try:
            self.client.delete_bucket_lifecycle(Bucket=name)
        except (ClientError, BotoCoreError) as e:
            if _error_code(e) == LIFECYCLE_NOT_FOUND:
                return
            logger.error(f"Failed to delete lifecycle for bucket {name}: {e}")
            raise translate_error(e, name) from e

    @provider_call("get_bucket_cors")
    def get_bucket_cors(self, name: str) -> list[CorsRule] | None:
        """Get bucket CORS configuration."""
        try:
            response = self.client.get_bucket_cors(Bucket=name)
        except (ClientError, BotoCoreError) as e:
            if _error_code(e) == CORS_NOT_FOUND:
                return None
            logger.error(f"Failed to get CORS for bucket {name}: {e}")
            raise translate_error(e, name) from e
        return [cors_rule_from_aws(rule) for rule in response.get("CORSRules", [])]

    @provider_call("set_bucket_cors")
    def set_bucket_cors(self, name: str, rules: Sequence[CorsRule]) -> None:
        """Set bucket CORS configuration."""
        try:
            self.client.put_bucket_cors(
                Bucket=name,
                CORSConfiguration={"CORSRules": [cors_rule_to_aws(rule) for rule in rules]},
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to set CORS for bucket {name}: {e}")
            raise translate_error(e, name) from e

    @provider_call("delete_bucket_cors")
    def delete_bucket_cors(self, name: str) -> None:
        """Delete bucket CORS configuration."""
        try:
            self.client.delete_bucket_cors(Bucket=name)
        except (ClientError, BotoCoreError) as e:
            if _error_code(e) == CORS_NOT_FOUND:
                return
            logger.error(f"Failed to delete CORS for bucket {name}: {e}")
            raise translate_error(e, name) from e

    @provider_call("get_bucket_tags")
    def get_bucket_tags(self, name: str) -> dict[str, str]:
        """Get bucket tags."""
        try:
            response = self.client.get_bucket_tagging(Bucket=name)
        except (ClientError, BotoCoreError) as e:
            # Tags not configured - return empty dict
            if _error_code(e) == TAGS_NOT_FOUND:
                return {}
            logger.error(f"Failed to get tags for bucket {name}: {e}")
            raise translate_error(e, name) from e
        return {tag["Key"]: tag["Value"] for tag in response.get("TagSet", [])}

    @provider_call("set_bucket_tags")
    def set_bucket_tags(self, name: str, tags: dict[str, str]) -> None:
        """Set bucket tags."""
        try:
            tag_set = [{"Key": k, "Value": v} for k, v in tags.items()]
            self.client.put_bucket_tagging(
                Bucket=name,
                Tagging={"TagSet": tag_set},
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to set tags for bucket {name}: {e}")
            raise translate_error(e, name) from e

    @provider_call("check_bucket_listable")
    def check_bucket_listable(self, name: str) -> None:
        """Raise StorageError unless the bucket's objects can be listed."""
        try:
            self.client.list_objects_v2(Bucket=name, MaxKeys=1)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to list bucket {name}: {e}")
            raise translate_error(e, name) from e

    def iter_objects(self, name: str) -> Iterator[ObjectInfo]:
        """Iterate over every object in a bucket."""
        paginator = self.client.get_paginator("list_objects_v2")
        try:
            for page in paginator.paginate(Bucket=name):
                for obj in page.get("Contents", []):
                    yield ObjectInfo(key=obj["Key"], size=obj.get("Size", 0), etag=obj.get("ETag"))
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to list objects in bucket {name}: {e}")
            raise translate_error(e, name) from e

    @provider_call("copy_object")
    def copy_object(self, source_bucket: str, key: str, target_bucket: str) -> None:
        """Copy one object; multipart only above the 5 GiB CopyObject limit."""
        try:
            self.client.copy(
                {"Bucket": source_bucket, "Key": key}, target_bucket, key, Config=COPY_TRANSFER_CONFIG
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to copy {source_bucket}/{key} to {target_bucket}: {e}")
            raise translate_error(e, target_bucket) from e

    @provider_call("delete_object")
    def delete_object(self, name: str, key: str) -> None:
        """Delete one object."""
        try:
            self.client.delete_object(Bucket=name, Key=key)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to delete {name}/{key}: {e}")
            raise translate_error(e, name) from e

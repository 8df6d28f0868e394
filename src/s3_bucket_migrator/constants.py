"""Constants for the S3 Bucket Migrator."""

# API Group
API_GROUP = "s3-migrator.dev"
API_GROUP_VERSION = f"{API_GROUP}/v1alpha1"

# Resource Kinds
KIND_PROVIDER = "Provider"
KIND_BUCKET_MIGRATION = "BucketMigration"

# Field Manager
FIELD_MANAGER = "s3-bucket-migrator"

# Migration phases
PHASE_PLANNED = "Planned"
PHASE_SUCCEEDED = "Succeeded"
PHASE_PARTIALLY_FAILED = "PartiallyFailed"
PHASE_FAILED = "Failed"

# Condition Types
COND_READY = "Ready"
COND_PROVIDER_NOT_READY = "ProviderNotReady"
COND_AUTH_VALID = "AuthValid"
COND_ENDPOINT_REACHABLE = "EndpointReachable"
COND_PLANNED = "Planned"
COND_PARTIALLY_APPLIED = "PartiallyApplied"
COND_CONFIG_INVALID = "ConfigInvalid"

# Event Reasons
EVENT_REASON_RECONCILE_STARTED = "ReconcileStarted"
EVENT_REASON_RECONCILE_FAILED = "ReconcileFailed"
EVENT_REASON_VALIDATE_SUCCEEDED = "ValidateSucceeded"
EVENT_REASON_VALIDATE_FAILED = "ValidateFailed"
EVENT_REASON_PLAN_READY = "PlanReady"
EVENT_REASON_BUCKET_MIGRATED = "BucketMigrated"
EVENT_REASON_BUCKET_FAILED = "BucketMigrationFailed"
EVENT_REASON_MIGRATION_SUCCEEDED = "MigrationSucceeded"

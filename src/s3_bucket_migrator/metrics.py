"""Prometheus metrics for the S3 Bucket Migrator."""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "s3_bucket_migrator_reconcile_total",
    "Total number of reconciliations",
    ["kind", "result"],
)

reconcile_duration_seconds = Histogram(
    "s3_bucket_migrator_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    ["kind"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 300.0],
)

resource_status_total = Counter(
    "s3_bucket_migrator_resource_status_total",
    "Resource status transitions",
    ["kind", "status"],
)

error_total = Counter(
    "s3_bucket_migrator_error_total",
    "Total number of errors by type",
    ["kind", "error_type"],
)

# Migration run metrics
migration_runs_total = Counter(
    "s3_bucket_migrator_runs_total",
    "Total number of migration runs",
    ["mode", "result"],
)

bucket_pipelines_total = Counter(
    "s3_bucket_migrator_bucket_pipelines_total",
    "Per-bucket pipeline terminal statuses",
    ["status"],
)

pipeline_step_duration_seconds = Histogram(
    "s3_bucket_migrator_pipeline_step_duration_seconds",
    "Duration of per-bucket pipeline steps in seconds",
    ["step"],
    buckets=[0.1, 0.5, 1.0, 5.0, 30.0, 120.0, 600.0],
)

# S3 operation metrics
bucket_operations_total = Counter(
    "s3_bucket_migrator_bucket_operations_total",
    "Total number of S3 bucket operations",
    ["operation", "result"],
)

objects_copied_total = Counter(
    "s3_bucket_migrator_objects_copied_total",
    "Objects copied between buckets",
    ["result"],
)

# Provider connectivity metrics
provider_connectivity_total = Counter(
    "s3_bucket_migrator_provider_connectivity_total",
    "Provider connectivity status changes",
    ["provider", "status"],
)

# Configuration drift detection metrics
drift_detected_total = Counter(
    "s3_bucket_migrator_drift_detected_total",
    "Total number of configuration drift detections",
    ["facet"],
)

# API call metrics
api_call_total = Counter(
    "s3_bucket_migrator_api_call_total",
    "Total number of API calls",
    ["api_type", "operation", "result"],
)

api_call_duration_seconds = Histogram(
    "s3_bucket_migrator_api_call_duration_seconds",
    "Duration of API calls in seconds",
    ["api_type", "operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)

rate_limit_hits_total = Counter(
    "s3_bucket_migrator_rate_limit_hits_total",
    "Total number of rate limit hits",
    ["api_type"],
)

"""Tests for plan and run reporting."""

from __future__ import annotations

import json

from s3_bucket_migrator.exceptions import (
    MigrationCancelledError,
    PreconditionError,
    SettingsApplyError,
    SourceUnavailableError,
)
from s3_bucket_migrator.migration.naming import NameMapping
from s3_bucket_migrator.migration.planner import MigrationRequest, build_plan
from s3_bucket_migrator.migration.reporting import (
    COPY_FAILED,
    COPY_NOT_ATTEMPTED,
    COPY_NOT_REQUESTED,
    COPY_SUCCEEDED,
    STATUS_CANCELLED,
    STATUS_FAILED,
    STATUS_PARTIAL,
    STATUS_SUCCEEDED,
    BucketOutcome,
    render_report,
)
from s3_bucket_migrator.services.s3.models import CopyResult, ProvisionResult

LOGS = NameMapping("my.company.logs", "my-company-logs")
DATA = NameMapping("dev.application.data", "dev-application-data")


def _provisioned(target: str, created: bool = True) -> ProvisionResult:
    return ProvisionResult(bucket=target, created=created, applied=["versioning", "public_access_block"])


class TestBucketOutcome:
    """Test cases for BucketOutcome status derivation."""

    def test_succeeded(self) -> None:
        """Test an outcome without error succeeded."""
        outcome = BucketOutcome(mapping=LOGS, copy_requested=False, provision=_provisioned(LOGS.target))
        assert outcome.status == STATUS_SUCCEEDED
        assert outcome.copy_status == COPY_NOT_REQUESTED

    def test_failed_before_any_change(self) -> None:
        """Test an unreadable source is a plain failure."""
        outcome = BucketOutcome(
            mapping=LOGS, copy_requested=True, error=SourceUnavailableError(LOGS.source, "Access Denied")
        )
        assert outcome.status == STATUS_FAILED
        assert outcome.copy_status == COPY_NOT_ATTEMPTED
        assert outcome.applied_facets == []

    def test_partially_applied_settings(self) -> None:
        """Test a facet failure after earlier facets is partially applied."""
        error = SettingsApplyError(LOGS.target, "lifecycle", "denied", applied=["versioning"], created=True)
        outcome = BucketOutcome(mapping=LOGS, copy_requested=False, error=error)
        assert outcome.status == STATUS_PARTIAL
        assert outcome.applied_facets == ["versioning"]
        assert outcome.target_created is True

    def test_copy_failure_is_partial(self) -> None:
        """Test a failed copy after provisioning is partially applied."""
        result = CopyResult(succeeded=False, objects_copied=2, error_detail="SlowDown")
        outcome = BucketOutcome(
            mapping=LOGS,
            copy_requested=True,
            provision=_provisioned(LOGS.target),
            copy_result=result,
            error=RuntimeError("copy failed"),
        )
        assert outcome.status == STATUS_PARTIAL
        assert outcome.copy_status == COPY_FAILED

    def test_precondition_failure_marks_copy_failed(self) -> None:
        """Test a copy that failed its preconditions reports copy failed."""
        outcome = BucketOutcome(
            mapping=LOGS,
            copy_requested=True,
            provision=_provisioned(LOGS.target),
            error=PreconditionError(LOGS.target, "target bucket is not accessible"),
        )
        assert outcome.copy_status == COPY_FAILED

    def test_cancelled_untouched(self) -> None:
        """Test a bucket cancelled before any change is cancelled."""
        outcome = BucketOutcome(mapping=LOGS, copy_requested=True, error=MigrationCancelledError(LOGS.source, "read"))
        assert outcome.cancelled is True
        assert outcome.status == STATUS_CANCELLED

    def test_cancelled_after_provision(self) -> None:
        """Test a bucket cancelled after provisioning is partially applied."""
        outcome = BucketOutcome(
            mapping=LOGS,
            copy_requested=True,
            provision=_provisioned(LOGS.target),
            error=MigrationCancelledError(LOGS.source, "copy"),
        )
        assert outcome.status == STATUS_PARTIAL
        assert outcome.copy_status == COPY_NOT_ATTEMPTED

    def test_to_dict_sanitizes_errors(self) -> None:
        """Test credentials never reach the structured report."""
        error = SourceUnavailableError(LOGS.source, "secret_key=abc123 rejected")
        data = BucketOutcome(mapping=LOGS, copy_requested=False, error=error).to_dict()
        assert "abc123" not in data["error"]
        assert data["errorType"] == "SourceUnavailableError"


class TestRenderPlan:
    """Test cases for plan-mode rendering."""

    def test_plan_lists_every_mapping(self) -> None:
        """Test the plan names each mapping with copy not requested."""
        plan = build_plan(MigrationRequest(sources=("my.company.logs", "dev.application.data"), plan_only=True))

        report = render_report(plan)

        assert report.mode == "plan"
        assert "my.company.logs -> my-company-logs" in report.text
        assert "dev.application.data -> dev-application-data" in report.text
        assert report.text.count("copy data: not requested") == 2
        assert report.data["mapping"] == {
            "my.company.logs": "my-company-logs",
            "dev.application.data": "dev-application-data",
        }
        assert [row["copy"] for row in report.data["buckets"]] == ["not requested", "not requested"]

    def test_plan_shows_requested_copy(self) -> None:
        """Test a copy request is visible in the plan."""
        plan = build_plan(MigrationRequest(sources=("my.company.logs",), copy_data=True))

        assert "copy data: requested" in render_report(plan).text

    def test_plan_json(self) -> None:
        """Test the structured plan serializes to JSON."""
        plan = build_plan(MigrationRequest(sources=("my.company.logs",)))

        data = json.loads(render_report(plan).to_json())

        assert data["mode"] == "plan"
        assert data["buckets"][0]["facets"]["versioning"] == "from source"


class TestRenderApplied:
    """Test cases for applied-mode rendering."""

    def test_applied_report(self) -> None:
        """Test results are rendered per bucket with a summary."""
        plan = build_plan(MigrationRequest(sources=("my.company.logs", "dev.application.data"), copy_data=True))
        outcomes = [
            BucketOutcome(
                mapping=DATA,
                copy_requested=True,
                error=SourceUnavailableError(DATA.source, "bucket does not exist"),
            ),
            BucketOutcome(
                mapping=LOGS,
                copy_requested=True,
                provision=_provisioned(LOGS.target),
                locator="arn:aws:s3:::my-company-logs",
                copy_result=CopyResult(succeeded=True, objects_copied=3, objects_skipped=1),
            ),
        ]

        report = render_report(plan, outcomes)

        assert report.mode == "applied"
        lines = report.text.splitlines()
        assert lines[0] == "Migration results (2 bucket(s)):"
        assert lines[1] == "  my.company.logs -> my-company-logs [succeeded]"
        assert "    locator: arn:aws:s3:::my-company-logs" in lines
        assert "    copy data: succeeded (3 copied, 1 unchanged)" in lines
        assert "  dev.application.data -> dev-application-data [failed]" in lines
        assert lines[-1] == "Summary: 1 succeeded, 1 failed"
        assert [bucket["source"] for bucket in report.data["buckets"]] == ["my.company.logs", "dev.application.data"]
        assert report.data["buckets"][0]["copy"] == COPY_SUCCEEDED
        assert report.data["summary"] == {"succeeded": 1, "failed": 1}

    def test_missing_outcome_is_cancelled(self) -> None:
        """Test a mapping whose pipeline never ran is still reported."""
        plan = build_plan(MigrationRequest(sources=("my.company.logs", "dev.application.data")))
        outcomes = [BucketOutcome(mapping=LOGS, copy_requested=False, provision=_provisioned(LOGS.target))]

        report = render_report(plan, outcomes)

        assert report.data["buckets"][1]["status"] == STATUS_CANCELLED
        assert "dev.application.data -> dev-application-data [cancelled]" in report.text

"""Tests for base handler functionality."""

from __future__ import annotations

from unittest.mock import Mock, patch

import kopf
import pytest

from s3_bucket_migrator.handlers.base import BaseHandler


class TestBaseHandler:
    """Test cases for BaseHandler class."""

    def test_init(self):
        """Test handler initialization."""
        handler = BaseHandler(kind="TestKind")
        assert handler.kind == "TestKind"
        assert handler.logger is not None

    @patch("s3_bucket_migrator.handlers.base.emit_reconcile_started")
    @patch("s3_bucket_migrator.handlers.base.metrics")
    def test_reconcile_with_metrics_success(self, mock_metrics, mock_emit_started):
        """Test successful reconciliation with metrics."""
        handler = BaseHandler(kind="TestKind")
        meta = {"name": "test-resource", "namespace": "default"}
        reconcile_fn = Mock()

        handler.reconcile_with_metrics(meta, reconcile_fn)

        reconcile_fn.assert_called_once()
        mock_emit_started.assert_called_once_with(meta)
        mock_metrics.reconcile_total.labels.assert_any_call(kind="TestKind", result="started")
        mock_metrics.reconcile_total.labels.assert_any_call(kind="TestKind", result="success")
        assert mock_metrics.reconcile_duration_seconds.labels.called

    @patch("s3_bucket_migrator.handlers.base.emit_reconcile_failed")
    @patch("s3_bucket_migrator.handlers.base.emit_reconcile_started")
    @patch("s3_bucket_migrator.handlers.base.metrics")
    def test_reconcile_with_metrics_retry(self, mock_metrics, mock_emit_started, mock_emit_failed):
        """Test temporary errors are counted as retries and re-raised."""
        handler = BaseHandler(kind="TestKind")

        def retrying_fn():
            raise kopf.TemporaryError("later", delay=60)

        with pytest.raises(kopf.TemporaryError):
            handler.reconcile_with_metrics({"name": "test-resource"}, retrying_fn)

        mock_metrics.reconcile_total.labels.assert_any_call(kind="TestKind", result="retry")
        mock_emit_failed.assert_not_called()

    @patch("s3_bucket_migrator.handlers.base.emit_reconcile_failed")
    @patch("s3_bucket_migrator.handlers.base.emit_reconcile_started")
    @patch("s3_bucket_migrator.handlers.base.metrics")
    def test_reconcile_with_metrics_failure(self, mock_metrics, mock_emit_started, mock_emit_failed):
        """Test failed reconciliation is sanitized, counted and re-raised."""
        handler = BaseHandler(kind="TestKind")
        meta = {"name": "test-resource", "namespace": "default"}

        def failing_fn():
            raise ValueError("secret_key=hunter2 rejected")

        with pytest.raises(ValueError):
            handler.reconcile_with_metrics(meta, failing_fn)

        message = mock_emit_failed.call_args[0][1]
        assert message.startswith("Reconciliation failed: ")
        assert "hunter2" not in message
        mock_metrics.error_total.labels.assert_called_with(kind="TestKind", error_type="ValueError")
        mock_metrics.reconcile_total.labels.assert_any_call(kind="TestKind", result="error")

    @patch("s3_bucket_migrator.handlers.base.metrics")
    def test_update_resource_status(self, mock_metrics):
        """Test status updates carry the observed generation."""
        handler = BaseHandler(kind="TestKind")
        patch_obj = kopf.Patch()

        handler.update_resource_status(patch_obj, {"generation": 5}, ready=True, status_data={"phase": "Succeeded"})

        assert patch_obj.status["observedGeneration"] == 5
        assert patch_obj.status["phase"] == "Succeeded"
        mock_metrics.resource_status_total.labels.assert_called_with(kind="TestKind", status="ready")

    @patch("s3_bucket_migrator.handlers.base.metrics")
    def test_update_resource_status_minimal(self, mock_metrics):
        """Test updating resource status with minimal data."""
        handler = BaseHandler(kind="TestKind")
        patch_obj = kopf.Patch()

        handler.update_resource_status(patch_obj, {"name": "test-resource"}, ready=False)

        assert patch_obj.status["observedGeneration"] == 0
        mock_metrics.resource_status_total.labels.assert_called_with(kind="TestKind", status="not_ready")

    @patch("s3_bucket_migrator.handlers.base.emit_reconcile_failed")
    def test_handle_provider_not_ready(self, mock_emit_failed):
        """Test a missing provider is recorded and retried."""
        handler = BaseHandler(kind="BucketMigration")
        meta = {"name": "logs", "generation": 2}
        patch_obj = kopf.Patch()

        with pytest.raises(kopf.TemporaryError):
            handler.handle_provider_not_ready(meta, {}, patch_obj, "aws", "Provider default/aws not found")

        conditions = patch_obj.status["conditions"]
        assert conditions[0]["type"] == "ProviderNotReady"
        assert patch_obj.status["observedGeneration"] == 2
        mock_emit_failed.assert_called_once_with(meta, "Provider default/aws not found")

    @patch("s3_bucket_migrator.handlers.base.emit_validate_failed")
    def test_handle_validation_error(self, mock_emit_validate_failed):
        """Test validation errors are permanent."""
        handler = BaseHandler(kind="BucketMigration")

        with pytest.raises(kopf.PermanentError, match="sourceBuckets"):
            handler.handle_validation_error({"name": "logs"}, "sourceBuckets must be a list of bucket names")

        mock_emit_validate_failed.assert_called_once()

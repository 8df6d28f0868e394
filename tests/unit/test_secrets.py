"""Tests for Kubernetes secrets utilities."""

from __future__ import annotations

import base64
from unittest.mock import Mock

import pytest
from kubernetes import client

from s3_bucket_migrator.utils.secrets import get_secret_value


class TestGetSecretValue:
    """Test cases for get_secret_value function."""

    def _api(self, data):
        mock_api = Mock()
        mock_secret = Mock()
        mock_secret.data = data
        mock_api.read_namespaced_secret.return_value = mock_secret
        return mock_api

    def test_get_secret_value_success(self):
        """Test successfully getting a base64 encoded secret value."""
        mock_api = self._api({"access-key": base64.b64encode(b"AKIAEXAMPLE").decode("utf-8")})

        result = get_secret_value(mock_api, "default", "aws-credentials", "access-key")

        assert result == "AKIAEXAMPLE"
        mock_api.read_namespaced_secret.assert_called_once_with(name="aws-credentials", namespace="default")

    def test_get_secret_value_bytes(self):
        """Test getting secret value that's already bytes."""
        mock_api = self._api({"access-key": b"AKIAEXAMPLE"})

        assert get_secret_value(mock_api, "default", "aws-credentials", "access-key") == "AKIAEXAMPLE"

    def test_get_secret_value_plain_string(self):
        """Test a value that is not valid base64 is returned as is."""
        mock_api = self._api({"secret-key": "not-base64!"})

        assert get_secret_value(mock_api, "default", "aws-credentials", "secret-key") == "not-base64!"

    def test_get_secret_value_key_not_found(self):
        """Test error when key not found in secret."""
        mock_api = self._api({"other-key": "value"})

        with pytest.raises(ValueError, match="Key 'access-key' not found"):
            get_secret_value(mock_api, "default", "aws-credentials", "access-key")

    def test_get_secret_value_empty_secret(self):
        """Test error when the secret has no data."""
        mock_api = self._api(None)

        with pytest.raises(ValueError, match="not found in secret"):
            get_secret_value(mock_api, "default", "aws-credentials", "access-key")

    def test_get_secret_value_secret_not_found(self):
        """Test error when secret not found."""
        mock_api = Mock()
        mock_api.read_namespaced_secret.side_effect = client.exceptions.ApiException(status=404)

        with pytest.raises(ValueError, match="Secret 'aws-credentials' not found"):
            get_secret_value(mock_api, "default", "aws-credentials", "access-key")

    def test_get_secret_value_api_error(self):
        """Test other API errors propagate."""
        mock_api = Mock()
        mock_api.read_namespaced_secret.side_effect = client.exceptions.ApiException(status=500)

        with pytest.raises(client.exceptions.ApiException):
            get_secret_value(mock_api, "default", "aws-credentials", "access-key")

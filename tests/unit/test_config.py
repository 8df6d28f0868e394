"""Tests for run configuration."""

from __future__ import annotations

import pytest

from s3_bucket_migrator.config import MigrationSettings
from s3_bucket_migrator.exceptions import MigrationConfigError


class TestMigrationSettings:
    """Test cases for MigrationSettings."""

    def test_defaults(self):
        """Test default tunables."""
        settings = MigrationSettings()
        assert settings.max_concurrency == 4
        assert settings.consistency_timeout == 60.0
        assert (settings.separator, settings.substitute) == (".", "-")

    def test_from_env(self, monkeypatch):
        """Test settings are read from MIGRATOR_* variables."""
        monkeypatch.setenv("MIGRATOR_MAX_CONCURRENCY", "8")
        monkeypatch.setenv("MIGRATOR_CONSISTENCY_TIMEOUT_SECONDS", "120")
        monkeypatch.setenv("MIGRATOR_NAME_SUBSTITUTE", "0")

        settings = MigrationSettings.from_env()

        assert settings.max_concurrency == 8
        assert settings.consistency_timeout == 120.0
        assert settings.substitute == "0"
        assert settings.separator == "."

    def test_from_env_invalid_number(self, monkeypatch):
        """Test malformed numbers are configuration errors."""
        monkeypatch.setenv("MIGRATOR_MAX_CONCURRENCY", "many")

        with pytest.raises(MigrationConfigError, match="MIGRATOR_MAX_CONCURRENCY"):
            MigrationSettings.from_env()

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_concurrency": 0},
            {"consistency_timeout": 0},
            {"initial_delay": 2.0, "max_delay": 1.0},
            {"separator": "--"},
            {"separator": "-", "substitute": "-"},
        ],
    )
    def test_validation(self, kwargs):
        """Test out-of-range settings are rejected."""
        with pytest.raises(MigrationConfigError):
            MigrationSettings(**kwargs)

    def test_override_skips_none(self):
        """Test only given values are overridden."""
        settings = MigrationSettings(max_concurrency=2)

        overridden = settings.override(max_concurrency=None, separator="_")

        assert overridden.max_concurrency == 2
        assert overridden.separator == "_"
        assert settings.separator == "."

"""Builders turning resource specs and CLI input into engine objects."""

from .migration import create_migration_request_from_spec, create_settings_from_spec
from .provider import create_provider, create_provider_from_spec

__all__ = [
    "create_migration_request_from_spec",
    "create_provider",
    "create_provider_from_spec",
    "create_settings_from_spec",
]

"""Provider-neutral storage capability."""

from .base import (
    AccessDeniedError,
    BucketAlreadyExistsError,
    BucketNotFoundError,
    StorageError,
    StorageProvider,
    UnsupportedSettingError,
)

__all__ = [
    "AccessDeniedError",
    "BucketAlreadyExistsError",
    "BucketNotFoundError",
    "StorageError",
    "StorageProvider",
    "UnsupportedSettingError",
]

"""boto3-backed storage provider."""

from .client import AWSProvider

__all__ = ["AWSProvider"]

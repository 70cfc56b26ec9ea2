"""Object storage operations for S3-compatible services."""

from .clients import S3ClientConfig, S3ClientManager
from .s3_operations import (
    S3_MAX_LIST_OBJECTS,
    S3Bucket,
    S3PageRequester,
    list_objects_by_prefix,
)

__all__ = [
    "S3_MAX_LIST_OBJECTS",
    "S3Bucket",
    "S3ClientConfig",
    "S3ClientManager",
    "S3PageRequester",
    "list_objects_by_prefix",
]

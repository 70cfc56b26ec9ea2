"""Object store listing for S3-compatible buckets and local directories.

This package lists objects under a prefix, optionally recursing into virtual
directories, applying client-side filters and bounding the number of results.
Paginated responses and one-time region redirects are handled transparently.

Key Features:
    - Breadth-first recursive listing with a hard result cap
    - Client-side filters on name, size and modification time
    - Streaming delivery through a row callback
    - S3 and local filesystem backends behind one facade
    - CLI interface

Recommended Usage:
    >>> from lakelist import EnvironmentConfig, ObjectStore
    >>> store = ObjectStore.from_uri("s3://my-bucket", EnvironmentConfig.from_env())
    >>> table = store.list_files("data/", recursive=True, max_keys=100)
    >>> table.names()

Advanced Usage:
    >>> from lakelist.objectstorage.listing import list_files
    >>> from lakelist.filesystem import LocalFsBucket
"""

__version__ = "0.1.0"

from .models import BucketRecord, FileObjectFilter, ObjectRecord, Page
from .schemas import EnvironmentConfig
from .table import CallbackTable, ObjectTable, TableCallback

# Unified interface (recommended)
from .unified import ObjectStore, list_buckets, split_uri

__all__ = [
    # Records and filters
    "BucketRecord",
    "FileObjectFilter",
    "ObjectRecord",
    "Page",
    # Configuration
    "EnvironmentConfig",
    # Result tables
    "CallbackTable",
    "ObjectTable",
    "TableCallback",
    # Unified interface
    "ObjectStore",
    "list_buckets",
    "split_uri",
]

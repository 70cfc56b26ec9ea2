"""Unified object store facade over the S3 and local filesystem backends."""

from typing import Optional, Union

from lakelist.core import get_logger
from lakelist.core.exceptions import ValidationError
from lakelist.filesystem import LocalFsBucket
from lakelist.models import BucketRecord, FileObjectFilter
from lakelist.objectstorage import S3Bucket
from lakelist.schemas import EnvironmentConfig
from lakelist.table import CallbackTable, ObjectTable, TableCallback

logger = get_logger(__name__)

S3_SCHEME = "s3://"
LOCALFS_SCHEME = "localfs://"

Backend = Union[S3Bucket, LocalFsBucket]


def split_uri(uri: str) -> tuple[str, Optional[str]]:
    """Split a listing URI into the object store URI and a prefix.

    ``s3://bucket/some/prefix`` splits after the bucket name. A ``localfs://``
    URI names the root directory as a whole and has no prefix.

    Raises:
        ValidationError: If the scheme is not supported
    """
    if uri.startswith(S3_SCHEME):
        bucket, _, prefix = uri[len(S3_SCHEME) :].partition("/")
        return f"{S3_SCHEME}{bucket}", prefix or None
    if uri.startswith(LOCALFS_SCHEME):
        return uri, None
    raise ValidationError(f"Unsupported object store: {uri}")


class ObjectStore:
    """One listable store, backed by exactly one of the supported backends."""

    def __init__(self, backend: Backend):
        if not isinstance(backend, (S3Bucket, LocalFsBucket)):
            raise ValidationError(
                f"Unsupported object store backend: {type(backend).__name__}"
            )
        self.backend = backend

    @classmethod
    def from_uri(cls, uri: str, config: EnvironmentConfig) -> "ObjectStore":
        """Create an object store from ``s3://bucket`` or ``localfs://path``.

        Raises:
            ValidationError: If the URI is not supported
            ConfigError: If an S3 store lacks region or credentials
        """
        if uri.startswith(S3_SCHEME):
            return cls(S3Bucket(uri[len(S3_SCHEME) :].rstrip("/"), config))
        if uri.startswith(LOCALFS_SCHEME):
            return cls(LocalFsBucket(uri[len(LOCALFS_SCHEME) :], config))
        raise ValidationError(f"Unsupported object store: {uri}")

    @property
    def name(self) -> str:
        return self.backend.name

    @property
    def uri(self) -> str:
        return self.backend.uri

    def list_files(
        self,
        prefix: Optional[str] = None,
        recursive: bool = False,
        max_keys: Optional[int] = None,
        filter: Optional[FileObjectFilter] = None,
    ) -> ObjectTable:
        """List objects into a table.

        Args:
            prefix: Prefix to list, None for the root
            recursive: Whether to descend into virtual directories
            max_keys: Maximum number of rows; None means one backend page
            filter: Optional client-side filter

        Returns:
            ObjectTable with the listed entries in listing order

        Raises:
            ValidationError: If parameters are invalid
            ListError: If the listing fails; no partial result is returned
        """
        table = ObjectTable()
        self.backend.list_files(prefix, recursive, max_keys, filter, table)
        return table

    def list_files_with_callback(
        self,
        prefix: Optional[str],
        recursive: bool,
        max_keys: Optional[int],
        filter: Optional[FileObjectFilter],
        callback: TableCallback,
    ) -> int:
        """List objects, handing each one to ``callback`` as soon as it is accepted.

        Rows are delivered before the next page is requested and are not kept.
        If a later page fails, the rows delivered so far stay delivered and the
        error is raised.

        Returns:
            Number of rows delivered
        """
        table = CallbackTable(callback)
        self.backend.list_files(prefix, recursive, max_keys, filter, table)
        return len(table)

    def get_object(self, key: str) -> bytes:
        return self.backend.get_object(key)

    def head_object(self, key: str) -> tuple[int, dict[str, str]]:
        return self.backend.head_object(key)

    def __repr__(self) -> str:
        return f"ObjectStore({self.uri!r})"


def list_buckets(uri: str, config: EnvironmentConfig) -> list[BucketRecord]:
    """List the stores reachable from ``uri``.

    ``s3://`` lists the buckets of the configured account; ``localfs://path``
    lists the directories under ``path``. Request and parse failures are
    logged and yield an empty list, since bucket listings are advisory.

    Raises:
        ValidationError: If the scheme is not supported
        ConfigError: If S3 region or credentials are missing
    """
    logger.info("Listing buckets", uri=uri)

    if uri.startswith(S3_SCHEME):
        return S3Bucket.list_buckets(config)
    if uri.startswith(LOCALFS_SCHEME):
        return LocalFsBucket.list_buckets(uri[len(LOCALFS_SCHEME) :] or ".")
    raise ValidationError(f"Unsupported object store: {uri}")

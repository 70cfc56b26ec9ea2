"""Local filesystem backend.

A directory is exposed as if it were a bucket: keys are ``/``-separated paths
relative to the root, and subdirectories show up as virtual directories with a
trailing ``/``. Prefixes follow object store semantics, so ``data/2024`` lists
the entries of ``data/`` whose names start with ``2024``.
"""

import os
from datetime import datetime, timezone
from email.utils import formatdate
from typing import Optional

from lakelist.core import get_logger
from lakelist.core.exceptions import (
    ObjectNotFoundError,
    ParseError,
    TransportError,
    ValidationError,
)
from lakelist.models import BucketRecord, FileObjectFilter, ObjectRecord, Page
from lakelist.objectstorage.listing import list_files
from lakelist.schemas import EnvironmentConfig
from lakelist.table import RowSink

logger = get_logger(__name__)

LOCALFS_MAX_LIST_OBJECTS = 1000


class LocalFsPageRequester:
    """Serves listing pages for one traversal.

    The sorted entries of the prefix being paged are scanned once and kept
    until the traversal moves on to another prefix.
    """

    def __init__(self, bucket: "LocalFsBucket"):
        self.bucket = bucket
        self._prefix: Optional[str] = None
        self._records: Optional[list[ObjectRecord]] = None

    def fetch_page(
        self, prefix: Optional[str], max_keys: int, continuation_token: Optional[str]
    ) -> Page:
        """Return one page of the entries under ``prefix``.

        The continuation token is the offset of the next entry in name order.

        Raises:
            ParseError: If the continuation token is not a valid offset
            ValidationError: If the prefix escapes the root
        """
        offset = 0
        if continuation_token is not None:
            try:
                offset = int(continuation_token)
            except ValueError:
                raise ParseError(f"Invalid continuation token: '{continuation_token}'")
            if offset < 0:
                raise ParseError(f"Invalid continuation token: '{continuation_token}'")

        # A first page, or a page of another prefix, starts from a fresh scan
        if continuation_token is None or self._records is None or prefix != self._prefix:
            self._prefix = prefix
            self._records = self.bucket._scan(prefix)

        end = offset + max_keys
        next_token = str(end) if end < len(self._records) else None
        return Page(records=tuple(self._records[offset:end]), next_token=next_token)


class LocalFsBucket:
    """A local directory listed like a bucket."""

    max_page_size = LOCALFS_MAX_LIST_OBJECTS

    def __init__(self, name: str, config: Optional[EnvironmentConfig] = None):
        """Initialize the local filesystem backend.

        Args:
            name: Path of the root directory
            config: Environment configuration (unused by this backend)

        Raises:
            ValidationError: If the name is empty
        """
        if not name:
            raise ValidationError("Local filesystem root must not be empty")

        self.name = name
        self.config = config or EnvironmentConfig()
        self.root = os.path.abspath(os.path.expanduser(name))
        logger.info("Local filesystem backend initialized", root=self.root)

    @property
    def uri(self) -> str:
        return f"localfs://{self.name}"

    def _resolve(self, relative: str) -> str:
        path = os.path.normpath(os.path.join(self.root, relative.lstrip("/")))
        if path != self.root and not path.startswith(self.root + os.sep):
            raise ValidationError(f"Path escapes root '{self.root}': {relative}")
        return path

    def _scan(self, prefix: Optional[str]) -> list[ObjectRecord]:
        directory, _, fragment = (prefix or "").rpartition("/")
        path = self._resolve(directory)
        base = f"{directory}/" if directory else ""

        try:
            entries = list(os.scandir(path))
        except (FileNotFoundError, NotADirectoryError):
            logger.debug("Listed directory does not exist", path=path)
            return []
        except OSError as e:
            error_msg = f"Failed to list local directory '{path}': {e}"
            logger.error(error_msg, error=str(e))
            raise TransportError(error_msg)

        records = []
        for entry in entries:
            if not entry.name.startswith(fragment):
                continue
            try:
                if entry.is_dir(follow_symlinks=False):
                    records.append(ObjectRecord(name=f"{base}{entry.name}/"))
                elif entry.is_file():
                    stat = entry.stat()
                    records.append(
                        ObjectRecord(
                            name=f"{base}{entry.name}",
                            size=stat.st_size,
                            last_modified=datetime.fromtimestamp(
                                stat.st_mtime, tz=timezone.utc
                            ),
                        )
                    )
            except OSError as e:
                logger.warning(
                    "Skipping unreadable entry", path=entry.path, error=str(e)
                )

        records.sort(key=lambda record: record.name)
        return records

    def list_files(
        self,
        prefix: Optional[str],
        recursive: bool,
        max_keys: Optional[int],
        filter: Optional[FileObjectFilter],
        table: RowSink,
    ) -> None:
        logger.info(
            "Listing local files",
            root=self.root,
            prefix=prefix,
            recursive=recursive,
            max_keys=max_keys,
        )
        requester = LocalFsPageRequester(self)
        list_files(
            requester.fetch_page,
            prefix,
            recursive,
            max_keys,
            filter,
            table,
            self.max_page_size,
        )

    def get_object(self, key: str) -> bytes:
        """Read the content of one file.

        Raises:
            ObjectNotFoundError: If the file does not exist
            TransportError: If the file cannot be read
        """
        path = self._resolve(key)
        logger.info("Getting local object", path=path)
        try:
            with open(path, "rb") as f:
                return f.read()
        except (FileNotFoundError, IsADirectoryError):
            raise ObjectNotFoundError(f"Object not found: {key}")
        except OSError as e:
            error_msg = f"Failed to read local object '{path}': {e}"
            logger.error(error_msg, error=str(e))
            raise TransportError(error_msg)

    def head_object(self, key: str) -> tuple[int, dict[str, str]]:
        """Return an HTTP-like status and headers for one file."""
        path = self._resolve(key)
        if not os.path.isfile(path):
            return 404, {}

        stat = os.stat(path)
        return 200, {
            "content-length": str(stat.st_size),
            "last-modified": formatdate(stat.st_mtime, usegmt=True),
        }

    @staticmethod
    def list_buckets(root: str) -> list[BucketRecord]:
        """List the directories directly under ``root`` as buckets.

        Failures are logged and yield an empty list.
        """
        path = os.path.abspath(os.path.expanduser(root))
        try:
            names = sorted(
                entry.name
                for entry in os.scandir(path)
                if entry.is_dir(follow_symlinks=False)
            )
        except OSError as e:
            logger.error("Error listing local directories", path=path, error=str(e))
            return []

        logger.info("Local directories listed", path=path, bucket_count=len(names))
        return [
            BucketRecord(name=os.path.join(root, name), scheme="localfs")
            for name in names
        ]

"""Parsing and classification of listing responses.

Parsing turns a raw ``ListObjectsV2`` / ``ListBuckets`` response mapping into
records. Classification splits one parsed page into the objects the caller
gets to see and the virtual directories a recursive listing still has to
visit.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from lakelist.core import get_logger
from lakelist.core.exceptions import ParseError
from lakelist.models import BucketRecord, FileObjectFilter, ObjectRecord, Page

logger = get_logger(__name__)


@dataclass(frozen=True)
class ClassifiedPage:
    """Outcome of classifying one page."""

    accepted: list[ObjectRecord] = field(default_factory=list)
    directories: list[str] = field(default_factory=list)
    next_token: Optional[str] = None


def _entries(response: Mapping[str, Any], key: str) -> list[Any]:
    entries = response.get(key) or []
    if not isinstance(entries, list):
        raise ParseError(f"Malformed listing response: '{key}' is not a list")
    return entries


def _optional_datetime(value: Any, field_name: str) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            pass
    raise ParseError(f"Malformed listing response: bad {field_name} {value!r}")


def parse_file_objects(response: Optional[Mapping[str, Any]]) -> list[ObjectRecord]:
    """Parse object and common prefix entries of a listing response.

    Objects come first in response order, followed by common prefixes.

    Raises:
        ParseError: If the response or one of its entries is malformed
    """
    if not response:
        return []
    if not isinstance(response, Mapping):
        raise ParseError(f"Malformed listing response: {type(response).__name__}")

    records = []
    for entry in _entries(response, "Contents"):
        try:
            name = entry["Key"]
            size = int(entry.get("Size", 0))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ParseError(f"Malformed object entry {entry!r}: {e}")
        records.append(
            ObjectRecord(
                name=name,
                size=size,
                last_modified=_optional_datetime(
                    entry.get("LastModified"), "LastModified"
                ),
            )
        )

    for entry in _entries(response, "CommonPrefixes"):
        try:
            records.append(ObjectRecord(name=entry["Prefix"]))
        except (KeyError, TypeError) as e:
            raise ParseError(f"Malformed common prefix entry {entry!r}: {e}")

    return records


def extract_continuation_token(response: Optional[Mapping[str, Any]]) -> Optional[str]:
    """Return the token for the next page, or None when the prefix is exhausted."""
    if not response or not response.get("IsTruncated"):
        return None
    return response.get("NextContinuationToken") or None


def parse_bucket_objects(
    response: Optional[Mapping[str, Any]], scheme: str = "s3"
) -> list[BucketRecord]:
    """Parse the buckets of a ``ListBuckets`` response.

    Raises:
        ParseError: If the response or one of its entries is malformed
    """
    if not isinstance(response, Mapping):
        raise ParseError("Malformed bucket listing response")

    buckets = []
    for entry in _entries(response, "Buckets"):
        try:
            name = entry["Name"]
        except (KeyError, TypeError) as e:
            raise ParseError(f"Malformed bucket entry {entry!r}: {e}")
        buckets.append(
            BucketRecord(
                name=name,
                creation_date=_optional_datetime(
                    entry.get("CreationDate"), "CreationDate"
                ),
                scheme=scheme,
            )
        )
    return buckets


def classify(
    page: Page, recursive: bool, filter: Optional[FileObjectFilter]
) -> ClassifiedPage:
    """Split a page into accepted objects and virtual directories.

    Directory markers are collected for recursion when ``recursive`` is set.
    They are only returned as listable entries when no filter is configured,
    since a content filter never matches a directory. Regular objects are
    accepted when there is no filter or the filter matches them.
    """
    accepted = []
    directories = []

    for record in page.records:
        if record.is_directory:
            if recursive:
                directories.append(record.name)
            if filter is None:
                accepted.append(record)
        elif filter is None or filter.matches(record):
            accepted.append(record)

    return ClassifiedPage(
        accepted=accepted, directories=directories, next_token=page.next_token
    )

"""Tests for listing response parsing and page classification."""

from datetime import datetime, timezone

import pytest

from conftest import make_page
from lakelist.core.exceptions import ParseError
from lakelist.models import FileObjectFilter, ObjectRecord, Page
from lakelist.objectstorage.listing.response import (
    classify,
    extract_continuation_token,
    parse_bucket_objects,
    parse_file_objects,
)

MODIFIED = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class TestParseFileObjects:
    """Test parsing of ListObjectsV2 responses."""

    def test_objects_then_common_prefixes(self):
        response = {
            "Contents": [
                {"Key": "a/x", "Size": 10, "LastModified": MODIFIED},
                {"Key": "a/y", "Size": 20, "LastModified": MODIFIED},
            ],
            "CommonPrefixes": [{"Prefix": "a/sub/"}],
        }

        records = parse_file_objects(response)

        assert [r.name for r in records] == ["a/x", "a/y", "a/sub/"]
        assert records[0] == ObjectRecord(name="a/x", size=10, last_modified=MODIFIED)
        assert records[2].is_directory
        assert records[2].size == 0

    def test_empty_response(self):
        assert parse_file_objects({}) == []
        assert parse_file_objects(None) == []

    def test_iso_timestamp(self):
        records = parse_file_objects(
            {"Contents": [{"Key": "k", "Size": 1, "LastModified": "2024-05-01T12:00:00Z"}]}
        )
        assert records[0].last_modified == MODIFIED

    def test_missing_key_is_parse_error(self):
        with pytest.raises(ParseError, match="Malformed object entry"):
            parse_file_objects({"Contents": [{"Size": 1}]})

    def test_malformed_contents_is_parse_error(self):
        with pytest.raises(ParseError):
            parse_file_objects({"Contents": "not-a-list"})

    def test_bad_timestamp_is_parse_error(self):
        with pytest.raises(ParseError, match="LastModified"):
            parse_file_objects({"Contents": [{"Key": "k", "LastModified": "yesterday"}]})

    def test_malformed_body_is_parse_error(self):
        with pytest.raises(ParseError):
            parse_file_objects("<ListBucketResult>")


class TestExtractContinuationToken:
    """Test continuation token extraction."""

    def test_truncated_response(self):
        response = {"IsTruncated": True, "NextContinuationToken": "T1"}
        assert extract_continuation_token(response) == "T1"

    def test_complete_response(self):
        response = {"IsTruncated": False, "NextContinuationToken": "stale"}
        assert extract_continuation_token(response) is None

    def test_empty_response(self):
        assert extract_continuation_token({}) is None


class TestParseBucketObjects:
    """Test parsing of ListBuckets responses."""

    def test_buckets(self):
        response = {"Buckets": [{"Name": "one", "CreationDate": MODIFIED}, {"Name": "two"}]}

        buckets = parse_bucket_objects(response)

        assert [b.uri for b in buckets] == ["s3://one", "s3://two"]
        assert buckets[0].creation_date == MODIFIED

    def test_malformed(self):
        with pytest.raises(ParseError):
            parse_bucket_objects({"Buckets": [{"CreationDate": MODIFIED}]})
        with pytest.raises(ParseError):
            parse_bucket_objects(None)


class TestClassify:
    """Test splitting pages into accepted objects and directories."""

    def test_unfiltered_recursive(self):
        page = make_page("a/x", "a/sub/", token="T1")

        result = classify(page, recursive=True, filter=None)

        assert [r.name for r in result.accepted] == ["a/x", "a/sub/"]
        assert result.directories == ["a/sub/"]
        assert result.next_token == "T1"

    def test_unfiltered_non_recursive(self):
        result = classify(make_page("a/x", "a/sub/"), recursive=False, filter=None)

        assert [r.name for r in result.accepted] == ["a/x", "a/sub/"]
        assert result.directories == []
        assert result.next_token is None

    def test_filter_hides_directories(self):
        page = make_page("a/x", "a/sub/")

        result = classify(page, recursive=True, filter=FileObjectFilter(name="sub"))

        assert result.accepted == []
        assert result.directories == ["a/sub/"]

    def test_filter_selects_objects(self):
        page = Page(
            records=(
                ObjectRecord("a/small", size=5),
                ObjectRecord("a/large", size=5000),
            )
        )

        result = classify(page, recursive=False, filter=FileObjectFilter(min_size=100))

        assert [r.name for r in result.accepted] == ["a/large"]

    def test_empty_page(self):
        result = classify(Page(), recursive=True, filter=None)

        assert result.accepted == []
        assert result.directories == []
        assert result.next_token is None

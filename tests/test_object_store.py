"""Tests for the unified object store facade."""

from unittest.mock import patch

import pytest

from lakelist.core.exceptions import ConfigError, TransportError, ValidationError
from lakelist.filesystem import LocalFsBucket
from lakelist.models import BucketRecord, FileObjectFilter, ObjectRecord
from lakelist.objectstorage import S3Bucket
from lakelist.schemas import EnvironmentConfig
from lakelist.unified.storage_operations import ObjectStore, list_buckets, split_uri


class TestSplitUri:
    """Test splitting listing URIs into store and prefix."""

    def test_s3_with_prefix(self):
        assert split_uri("s3://bucket/data/2024/") == ("s3://bucket", "data/2024/")

    def test_s3_bucket_only(self):
        assert split_uri("s3://bucket") == ("s3://bucket", None)
        assert split_uri("s3://bucket/") == ("s3://bucket", None)

    def test_localfs(self):
        assert split_uri("localfs:///srv/data") == ("localfs:///srv/data", None)

    def test_unsupported(self):
        with pytest.raises(ValidationError, match="Unsupported object store"):
            split_uri("gs://bucket")


class TestObjectStoreFromUri:
    """Test backend selection."""

    def test_s3(self, s3_config):
        store = ObjectStore.from_uri("s3://bucket", s3_config)

        assert isinstance(store.backend, S3Bucket)
        assert store.name == "bucket"
        assert store.uri == "s3://bucket"

    def test_localfs(self, tmp_path):
        store = ObjectStore.from_uri(f"localfs://{tmp_path}", EnvironmentConfig())

        assert isinstance(store.backend, LocalFsBucket)
        assert store.uri == f"localfs://{tmp_path}"

    def test_s3_without_config(self):
        with pytest.raises(ConfigError):
            ObjectStore.from_uri("s3://bucket", EnvironmentConfig())

    def test_unsupported(self):
        with pytest.raises(ValidationError, match="Unsupported object store"):
            ObjectStore.from_uri("ftp://host/path", EnvironmentConfig())

    def test_unsupported_backend(self):
        with pytest.raises(ValidationError, match="Unsupported object store backend"):
            ObjectStore(object())


class TestObjectStoreListing:
    """Test listing through the facade."""

    def test_list_files(self, sample_file_structure):
        store = ObjectStore.from_uri(
            f"localfs://{sample_file_structure}", EnvironmentConfig()
        )

        table = store.list_files("subdir/", recursive=True)

        assert table.names() == [
            "subdir/file3.txt",
            "subdir/nested/",
            "subdir/nested/file4.csv",
        ]

    def test_list_files_with_callback(self, sample_file_structure):
        store = ObjectStore.from_uri(
            f"localfs://{sample_file_structure}", EnvironmentConfig()
        )
        received = []

        class Collector:
            def on_row_add(self, record: ObjectRecord) -> None:
                received.append(record.name)

        count = store.list_files_with_callback(
            None, True, 3, FileObjectFilter(name="file"), Collector()
        )

        assert count == 3
        assert received == ["file1.txt", "file2.csv", "subdir/file3.txt"]

    @patch.object(S3Bucket, "list_files")
    def test_list_files_delegates_to_backend(self, mock_list_files, s3_config):
        store = ObjectStore.from_uri("s3://bucket", s3_config)
        filter = FileObjectFilter(min_size=1)

        table = store.list_files("data/", True, 50, filter)

        mock_list_files.assert_called_once_with("data/", True, 50, filter, table)

    @patch.object(S3Bucket, "list_files")
    def test_list_files_propagates_errors(self, mock_list_files, s3_config):
        mock_list_files.side_effect = TransportError("boom")
        store = ObjectStore.from_uri("s3://bucket", s3_config)

        with pytest.raises(TransportError, match="boom"):
            store.list_files("data/")

    @patch.object(S3Bucket, "get_object")
    def test_get_object_delegates(self, mock_get_object, s3_config):
        mock_get_object.return_value = b"payload"
        store = ObjectStore.from_uri("s3://bucket", s3_config)

        assert store.get_object("data/file") == b"payload"
        mock_get_object.assert_called_once_with("data/file")

    def test_head_object(self, sample_file_structure):
        store = ObjectStore.from_uri(
            f"localfs://{sample_file_structure}", EnvironmentConfig()
        )

        status, headers = store.head_object("file1.txt")

        assert status == 200
        assert headers["content-length"] == "8"


class TestListBuckets:
    """Test bucket enumeration dispatch."""

    @patch("lakelist.unified.storage_operations.S3Bucket.list_buckets")
    def test_s3(self, mock_list_buckets, s3_config):
        mock_list_buckets.return_value = [BucketRecord(name="one")]

        assert list_buckets("s3://", s3_config) == [BucketRecord(name="one")]
        mock_list_buckets.assert_called_once_with(s3_config)

    def test_localfs(self, sample_file_structure):
        buckets = list_buckets(f"localfs://{sample_file_structure}", EnvironmentConfig())

        assert [b.name for b in buckets] == [f"{sample_file_structure}/subdir"]

    def test_unsupported(self):
        with pytest.raises(ValidationError):
            list_buckets("gs://", EnvironmentConfig())

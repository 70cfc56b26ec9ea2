"""Test configuration and fixtures for lakelist."""

from typing import Optional

import pytest

from lakelist.models import ObjectRecord, Page
from lakelist.schemas import EnvironmentConfig


class FakePageBackend:
    """Serves canned pages keyed by (prefix, continuation token) and records requests."""

    def __init__(self, pages: dict):
        self.pages = pages
        self.requests: list[tuple[Optional[str], int, Optional[str]]] = []

    def fetch_page(
        self, prefix: Optional[str], max_keys: int, continuation_token: Optional[str]
    ) -> Page:
        self.requests.append((prefix, max_keys, continuation_token))
        return self.pages.get((prefix, continuation_token), Page())

    @property
    def requested_prefixes(self) -> list[Optional[str]]:
        return [prefix for prefix, _, _ in self.requests]


def make_page(*names: str, token: Optional[str] = None, size: int = 1) -> Page:
    """Build a page of records; names ending in '/' become virtual directories."""
    return Page(
        records=tuple(
            ObjectRecord(name=name, size=0 if name.endswith("/") else size)
            for name in names
        ),
        next_token=token,
    )


@pytest.fixture
def scenario_backend():
    """Prefix 'a/' with two pages and one subdirectory."""
    return FakePageBackend(
        {
            ("a/", None): make_page("a/x", "a/sub/", token="T1"),
            ("a/", "T1"): make_page("a/y"),
            ("a/sub/", None): make_page("a/sub/z"),
        }
    )


@pytest.fixture
def aws_environment(monkeypatch):
    """Fake AWS credentials for moto-backed tests."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "test_key")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "test_secret")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.delenv("AWS_PROFILE", raising=False)
    monkeypatch.delenv("S3_ENDPOINT_URL", raising=False)


@pytest.fixture
def s3_config():
    """Environment configuration for the test account."""
    return EnvironmentConfig(
        settings={
            "AWS_REGION": "us-east-1",
            "AWS_ACCESS_KEY_ID": "test_key",
            "AWS_SECRET_ACCESS_KEY": "test_secret",
        }
    )


@pytest.fixture
def sample_file_structure(tmp_path):
    """Create a sample directory tree for local filesystem tests."""
    (tmp_path / "file1.txt").write_text("content1")
    (tmp_path / "file2.csv").write_text("content2" * 100)

    subdir = tmp_path / "subdir"
    subdir.mkdir()
    (subdir / "file3.txt").write_text("content3" * 50)

    nested = subdir / "nested"
    nested.mkdir()
    (nested / "file4.csv").write_text("content4")

    return tmp_path

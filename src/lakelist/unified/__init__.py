"""Unified interface for all object store backends."""

from .storage_operations import ObjectStore, list_buckets, split_uri

__all__ = ["ObjectStore", "list_buckets", "split_uri"]

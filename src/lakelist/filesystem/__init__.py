"""Local filesystem backend."""

from .operations import LOCALFS_MAX_LIST_OBJECTS, LocalFsBucket, LocalFsPageRequester

__all__ = ["LOCALFS_MAX_LIST_OBJECTS", "LocalFsBucket", "LocalFsPageRequester"]

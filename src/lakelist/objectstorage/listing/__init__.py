"""Object storage listing: request handling, response classification, traversal."""

from .request_handler import request_with_redirect_handling
from .response import (
    ClassifiedPage,
    classify,
    extract_continuation_token,
    parse_bucket_objects,
    parse_file_objects,
)
from .traversal import effective_max_keys, list_files

__all__ = [
    "ClassifiedPage",
    "classify",
    "effective_max_keys",
    "extract_continuation_token",
    "list_files",
    "parse_bucket_objects",
    "parse_file_objects",
    "request_with_redirect_handling",
]

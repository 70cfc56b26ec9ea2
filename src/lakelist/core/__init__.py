"""Core utilities and shared components for lakelist."""

from .config import settings
from .exceptions import LakelistError, ListError, ValidationError
from .observability import get_logger, get_tracer

__all__ = [
    "settings",
    "LakelistError",
    "ListError",
    "ValidationError",
    "get_logger",
    "get_tracer",
]

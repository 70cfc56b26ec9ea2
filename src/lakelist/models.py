"""Records exchanged between object store backends and their callers."""

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lakelist.core.exceptions import ValidationError

SIZE_UNITS = {"B": 1, "K": 1024, "M": 1024**2, "G": 1024**3, "T": 1024**4}

TIME_UNITS = {
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
    "w": timedelta(weeks=1),
    "y": timedelta(days=365),
}

_SIZE_EXPR = re.compile(r"^([+-]?)(\d+)([BKMGT]?)$", re.IGNORECASE)
_TIME_EXPR = re.compile(r"^([+-]?)(\d+)([smhdwy])$")


@dataclass(frozen=True)
class ObjectRecord:
    """A single listing entry.

    Names ending in ``/`` are virtual directories (common prefixes) rather
    than concrete objects.
    """

    name: str
    size: int = 0
    last_modified: Optional[datetime] = None

    @property
    def is_directory(self) -> bool:
        return self.name.endswith("/")

    @property
    def base_name(self) -> str:
        """Last path component, without the trailing directory separator."""
        return self.name.rstrip("/").rsplit("/", 1)[-1]


@dataclass(frozen=True)
class BucketRecord:
    """A bucket (or local root directory) that can be listed."""

    name: str
    creation_date: Optional[datetime] = None
    scheme: str = "s3"

    @property
    def uri(self) -> str:
        return f"{self.scheme}://{self.name}"


@dataclass(frozen=True)
class Page:
    """One parsed page of a listing response."""

    records: tuple[ObjectRecord, ...] = field(default_factory=tuple)
    next_token: Optional[str] = None


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class FileObjectFilter(BaseModel):
    """Client-side predicate applied to listed objects.

    All configured conditions must hold for a record to match. Evaluation
    never raises: a record without a modification time simply fails any
    time bound.

    Example:
        # Parquet files larger than 10 MiB touched in the last week
        FileObjectFilter.parse(name=r"\\.parquet$", size="+10M", mtime="-1w")
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: Optional[str] = Field(
        None, description="Regular expression searched in the object's base name"
    )
    min_size: Optional[int] = Field(None, ge=0, description="Minimum size in bytes")
    max_size: Optional[int] = Field(None, ge=0, description="Maximum size in bytes")
    modified_after: Optional[datetime] = Field(
        None, description="Only objects modified at or after this time"
    )
    modified_before: Optional[datetime] = Field(
        None, description="Only objects modified at or before this time"
    )

    @field_validator("name")
    @classmethod
    def _check_pattern(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            try:
                re.compile(value)
            except re.error as e:
                raise ValueError(f"invalid name pattern {value!r}: {e}") from e
        return value

    def matches(self, record: ObjectRecord) -> bool:
        if self.name is not None and not re.search(self.name, record.base_name):
            return False
        if self.min_size is not None and record.size < self.min_size:
            return False
        if self.max_size is not None and record.size > self.max_size:
            return False

        if self.modified_after is not None or self.modified_before is not None:
            if record.last_modified is None:
                return False
            modified = _as_utc(record.last_modified)
            if self.modified_after is not None and modified < _as_utc(
                self.modified_after
            ):
                return False
            if self.modified_before is not None and modified > _as_utc(
                self.modified_before
            ):
                return False

        return True

    @classmethod
    def parse(
        cls,
        name: Optional[str] = None,
        size: Optional[str] = None,
        mtime: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> "FileObjectFilter":
        """Build a filter from find-style expressions.

        Args:
            name: Regular expression for the object's base name
            size: ``+N[unit]`` larger than, ``-N[unit]`` smaller than, ``N[unit]``
                exactly; units are B, K, M, G, T (powers of 1024)
            mtime: ``-N<unit>`` modified within, ``+N<unit>`` older than;
                units are s, m, h, d, w, y. An unsigned value means "within".
            now: Reference time for mtime expressions (defaults to now, UTC)

        Returns:
            FileObjectFilter with the corresponding bounds

        Raises:
            ValidationError: If an expression is malformed
        """
        bounds: dict = {}

        if name is not None:
            try:
                re.compile(name)
            except re.error as e:
                raise ValidationError(f"Invalid name pattern '{name}': {e}")
            bounds["name"] = name

        if size is not None:
            match = _SIZE_EXPR.match(size.strip())
            if not match:
                raise ValidationError(f"Invalid size expression: '{size}'")
            sign, amount, unit = match.groups()
            value = int(amount) * SIZE_UNITS[(unit or "B").upper()]
            if sign == "+":
                bounds["min_size"] = value + 1
            elif sign == "-":
                if value == 0:
                    raise ValidationError(f"Size expression matches nothing: '{size}'")
                bounds["max_size"] = value - 1
            else:
                bounds["min_size"] = value
                bounds["max_size"] = value

        if mtime is not None:
            match = _TIME_EXPR.match(mtime.strip())
            if not match:
                raise ValidationError(f"Invalid mtime expression: '{mtime}'")
            sign, amount, unit = match.groups()
            reference = _as_utc(now) if now else datetime.now(timezone.utc)
            boundary = reference - int(amount) * TIME_UNITS[unit]
            if sign == "+":
                bounds["modified_before"] = boundary
            else:
                bounds["modified_after"] = boundary

        return cls(**bounds)

"""Result collections filled by a listing traversal."""

from typing import Any, Iterator, Protocol, runtime_checkable

from lakelist.core.exceptions import ValidationError
from lakelist.models import ObjectRecord

COLUMNS = ("name", "size", "last_modified", "is_directory")


@runtime_checkable
class TableCallback(Protocol):
    """Receives listed objects one by one as they are accepted."""

    def on_row_add(self, record: ObjectRecord) -> None:
        """Handle a newly listed object."""
        ...


class RowSink(Protocol):
    """What the traversal engine needs from a result collection."""

    def add_row(self, record: ObjectRecord) -> None: ...

    def __len__(self) -> int: ...


class ObjectTable:
    """Ordered, column-accessible collection of listed objects."""

    def __init__(self) -> None:
        self._rows: list[ObjectRecord] = []

    def add_row(self, record: ObjectRecord) -> None:
        self._rows.append(record)

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[ObjectRecord]:
        return iter(self._rows)

    def __getitem__(self, index: int) -> ObjectRecord:
        return self._rows[index]

    @property
    def columns(self) -> tuple[str, ...]:
        return COLUMNS

    def column(self, name: str) -> list[Any]:
        """Return all values of one column, in row order.

        Raises:
            ValidationError: If the column does not exist
        """
        if name not in COLUMNS:
            raise ValidationError(f"Column not found: {name}")
        return [getattr(row, name) for row in self._rows]

    def names(self) -> list[str]:
        return self.column("name")

    def to_dicts(self) -> list[dict[str, Any]]:
        return [{name: getattr(row, name) for name in COLUMNS} for row in self._rows]

    def __repr__(self) -> str:
        return f"ObjectTable(rows={len(self._rows)})"


class CallbackTable:
    """Forwards rows to a callback without keeping them.

    Only the number of delivered rows is tracked, so the result cap can be
    enforced while the listing streams.
    """

    def __init__(self, callback: TableCallback) -> None:
        self.callback = callback
        self._count = 0

    def add_row(self, record: ObjectRecord) -> None:
        self.callback.on_row_add(record)
        self._count += 1

    def __len__(self) -> int:
        return self._count

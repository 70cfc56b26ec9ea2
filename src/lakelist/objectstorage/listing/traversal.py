"""Breadth-first listing traversal over paginated backends.

The engine is backend agnostic: it drives a ``fetch_page`` callable that issues
exactly one page request for ``(prefix, max_keys, continuation_token)`` and
returns the parsed ``Page``. Pages of one prefix are requested strictly in
sequence, since each request needs the previous page's token. Virtual
directories found under a prefix are queued once that prefix is exhausted and
visited in discovery order.

The result cap is hard: rows beyond ``max_keys`` are dropped and no request is
issued once the cap is reached. A failed page request aborts the traversal
with the backend's error.
"""

from collections import deque
from typing import Callable, Optional

from lakelist.core import get_logger, get_tracer
from lakelist.core.exceptions import ValidationError
from lakelist.models import FileObjectFilter, ObjectRecord, Page
from lakelist.objectstorage.listing.response import classify
from lakelist.table import RowSink

logger = get_logger(__name__)
tracer = get_tracer(__name__)

FetchPage = Callable[[Optional[str], int, Optional[str]], Page]


def effective_max_keys(
    filter: Optional[FileObjectFilter], max_keys: Optional[int], max_page_size: int
) -> int:
    """Page size to request from the backend.

    With a filter every page is requested at full size, because filtering
    happens client-side and a smaller page would under-fetch.
    """
    if filter is not None or max_keys is None:
        return max_page_size
    return min(max_keys, max_page_size)


def _commit(table: RowSink, accepted: list[ObjectRecord], cap: int) -> None:
    remaining = cap - len(table)
    for record in accepted[:remaining]:
        table.add_row(record)
    if len(accepted) > remaining:
        logger.debug(
            "Dropping listed entries beyond max_keys",
            dropped=len(accepted) - remaining,
            max_keys=cap,
        )


def list_files(
    fetch_page: FetchPage,
    prefix: Optional[str],
    recursive: bool,
    max_keys: Optional[int],
    filter: Optional[FileObjectFilter],
    table: RowSink,
    max_page_size: int,
) -> None:
    """List objects under ``prefix`` into ``table``.

    Args:
        fetch_page: Backend request for one page of one prefix
        prefix: Starting prefix, None for the root
        recursive: Whether to descend into virtual directories
        max_keys: Maximum number of rows to add; None means ``max_page_size``
        filter: Optional client-side filter
        table: Collection receiving accepted rows in listing order
        max_page_size: Largest page the backend serves

    Raises:
        ValidationError: If max_keys is not positive
        ListError: If a page request fails
    """
    if max_keys is not None and max_keys <= 0:
        raise ValidationError(f"max_keys must be positive, got: {max_keys}")

    cap = max_keys if max_keys is not None else max_page_size
    page_size = effective_max_keys(filter, max_keys, max_page_size)

    directory_queue: deque[Optional[str]] = deque([prefix])
    visited = {prefix}
    page_count = 0

    while directory_queue and len(table) < cap:
        current_prefix = directory_queue.popleft()
        continuation_token: Optional[str] = None
        virtual_directories: list[str] = []

        while True:
            with tracer.start_as_current_span("lakelist.list_page") as span:
                span.set_attribute("lakelist.prefix", current_prefix or "")
                span.set_attribute("lakelist.max_keys", page_size)
                page = fetch_page(current_prefix, page_size, continuation_token)
            page_count += 1

            classified = classify(page, recursive, filter)
            _commit(table, classified.accepted, cap)
            virtual_directories.extend(classified.directories)

            continuation_token = classified.next_token
            if continuation_token is None or len(table) >= cap:
                break

        if recursive:
            for directory in virtual_directories:
                if len(table) >= cap:
                    break
                if directory in visited:
                    continue
                visited.add(directory)
                directory_queue.append(directory)

    logger.info(
        "Listing traversal completed",
        prefix=prefix,
        recursive=recursive,
        rows=len(table),
        pages=page_count,
        capped=len(table) >= cap,
    )

"""Fetch both inventories before reconciliation.

The two fetches are independent and run in parallel. Reconciling against a
partial inventory would report phantom missing tracks, so any failure aborts
the whole fetch: the other task is told to stop, awaited, and a single
``FetchError`` is raised.
"""

import logging
import threading
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import List, Optional, Protocol, Tuple

from ..models import InventoryRecord
from ..utils.progress import ProgressPhase, ProgressTracker

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Raised when an inventory could not be fully enumerated."""

    pass


class FetchCancelledError(FetchError):
    """Raised by a source that stopped because the other fetch failed."""

    pass


class InventorySource(Protocol):
    """A library that can enumerate all of its tracks."""

    name: str

    def fetch_all(
        self,
        progress: Optional[ProgressTracker] = None,
        stop: Optional[threading.Event] = None,
    ) -> List[InventoryRecord]:
        """Return every track in the library.

        Implementations that page through a remote API check ``stop`` between
        pages and raise ``FetchCancelledError`` once it is set.
        """
        ...


class StaticLibrary:
    """Inventory that is already in memory, e.g. an unconfigured destination."""

    def __init__(self, name: str, records: Optional[List[InventoryRecord]] = None):
        """Initialize the library.

        Args:
            name: Name used in logs and reports
            records: Tracks of the library
        """
        self.name = name
        self.records = list(records or [])

    def fetch_all(
        self,
        progress: Optional[ProgressTracker] = None,
        stop: Optional[threading.Event] = None,
    ) -> List[InventoryRecord]:
        """Return a copy of the stored records."""
        if progress:
            progress.advance(len(self.records))
        return list(self.records)


def check_stop(stop: Optional[threading.Event], name: str) -> None:
    """Raise if the fetch of ``name`` should be abandoned."""
    if stop is not None and stop.is_set():
        raise FetchCancelledError(f"Fetching {name} was cancelled")


def fetch_libraries(
    src: InventorySource,
    dst: InventorySource,
    progress: Optional[ProgressTracker] = None,
) -> Tuple[List[InventoryRecord], List[InventoryRecord]]:
    """Fetch source and destination inventories in parallel.

    Args:
        src: Source library
        dst: Destination library
        progress: Shared progress tracker for both fetches

    Returns:
        Tuple of (source records, destination records)

    Raises:
        FetchError: If either fetch fails
    """
    stop = threading.Event()
    if progress:
        progress.start(ProgressPhase.FETCHING)

    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="fetch") as pool:
        src_future = pool.submit(src.fetch_all, progress, stop)
        dst_future = pool.submit(dst.fetch_all, progress, stop)

        done, _ = wait([src_future, dst_future], return_when=FIRST_EXCEPTION)
        failed = [f for f in (src_future, dst_future) if f in done and f.exception()]
        if failed:
            stop.set()
            dst_future.cancel()
            src_future.cancel()
            # Wait for the other task before reporting anything
            wait([src_future, dst_future])

            future = failed[0]
            source = src if future is src_future else dst
            error = future.exception()
            logger.error("Failed fetching %s: %s", source.name, error)
            if progress:
                progress.error(f"fetching {source.name} failed")
            if isinstance(error, FetchError):
                raise error
            raise FetchError(f"Failed fetching {source.name}: {error}") from error

        src_records = src_future.result()
        dst_records = dst_future.result()

    if progress:
        progress.complete()
    logger.info(
        "%s track count %d, %s track count %d",
        src.name,
        len(src_records),
        dst.name,
        len(dst_records),
    )
    return src_records, dst_records

"""Progress tracking for fetches and writes.

Both library fetches may report into the same tracker from different threads,
so every counter update happens under a lock.
"""

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from tqdm import tqdm

logger = logging.getLogger(__name__)


class ProgressPhase(str, Enum):
    """Phases of a reconciliation run."""

    FETCHING = "fetching"
    SETTING_RATINGS = "set rating"
    SETTING_PLAY_DATES = "set play time"
    ERROR = "error"


@dataclass
class ProgressUpdate:
    """Progress update information.

    ``total`` is ``None`` while the size of the phase is unknown, e.g. while
    paging through a remote library.
    """

    phase: ProgressPhase
    current: int
    total: Optional[int]
    message: str = ""
    elapsed_time: float = 0.0

    @property
    def percentage(self) -> float:
        """Calculate progress percentage."""
        if not self.total:
            return 0.0
        return (self.current / self.total) * 100.0

    @property
    def is_complete(self) -> bool:
        """Check if phase is complete."""
        return self.total is not None and self.current >= self.total

    def __str__(self) -> str:
        """String representation of progress."""
        total = "?" if self.total is None else str(self.total)
        parts = [f"[{self.phase.value}]", f"{self.current}/{total}"]
        if self.total:
            parts.append(f"({self.percentage:.1f}%)")
        if self.message:
            parts.append(f"- {self.message}")
        return " ".join(parts)


ProgressCallback = Callable[[ProgressUpdate], None]


class ProgressTracker:
    """Thread-safe progress counter that forwards updates to a callback."""

    def __init__(self, callback: Optional[ProgressCallback] = None) -> None:
        """Initialize progress tracker.

        Args:
            callback: Function to call with progress updates
        """
        self.callback = callback
        self._lock = threading.Lock()
        self._phase: Optional[ProgressPhase] = None
        self._phase_start_time = 0.0
        self._current = 0
        self._total: Optional[int] = None

    @property
    def current(self) -> int:
        """Items processed in the current phase."""
        with self._lock:
            return self._current

    def start(
        self, phase: ProgressPhase, total: Optional[int] = None, message: str = ""
    ) -> None:
        """Start tracking a new phase."""
        with self._lock:
            self._phase = phase
            self._phase_start_time = time.time()
            self._current = 0
            self._total = total
            update = self._snapshot(message)
        self._notify(update)

    def advance(self, count: int = 1, message: str = "") -> None:
        """Add ``count`` processed items; safe to call from several threads."""
        with self._lock:
            self._current += count
            update = self._snapshot(message)
        self._notify(update)

    def complete(self, message: str = "") -> None:
        """Mark the current phase as complete."""
        with self._lock:
            if self._total is None:
                self._total = self._current
            self._current = self._total
            update = self._snapshot(message)
        self._notify(update)

    def error(self, message: str) -> None:
        """Report an error in the current phase."""
        with self._lock:
            update = self._snapshot(message, phase=ProgressPhase.ERROR)
        self._notify(update)

    def _snapshot(
        self, message: str, phase: Optional[ProgressPhase] = None
    ) -> ProgressUpdate:
        return ProgressUpdate(
            phase=phase or self._phase or ProgressPhase.FETCHING,
            current=self._current,
            total=self._total,
            message=message,
            elapsed_time=time.time() - self._phase_start_time,
        )

    def _notify(self, update: ProgressUpdate) -> None:
        if not self.callback:
            return
        try:
            self.callback(update)
        except Exception as e:
            logger.error("Error in progress callback: %s", e)

    def get_summary(self) -> Dict[str, Any]:
        """Get summary of progress tracking."""
        with self._lock:
            return {
                "phase": self._phase.value if self._phase else None,
                "current": self._current,
                "total": self._total,
            }


class TqdmProgressReporter:
    """Progress reporter that renders one tqdm bar per phase."""

    def __init__(self, disable: bool = False) -> None:
        """Initialize tqdm reporter.

        Args:
            disable: Suppress all output, e.g. when not attached to a terminal
        """
        self.disable = disable
        self._bars: Dict[ProgressPhase, Any] = {}
        self._lock = threading.Lock()

    def __call__(self, update: ProgressUpdate) -> None:
        """Handle progress update."""
        with self._lock:
            if update.phase == ProgressPhase.ERROR:
                self.close_all()
                return

            bar = self._bars.get(update.phase)
            if bar is None:
                bar = self._bars[update.phase] = tqdm(
                    total=update.total,
                    desc=update.phase.value,
                    unit="track",
                    ascii=" =",
                    disable=self.disable,
                )

            if update.total is not None and bar.total != update.total:
                bar.total = update.total
            bar.n = update.current
            if update.message:
                bar.set_postfix_str(update.message)
            bar.refresh()

            if update.is_complete:
                bar.close()
                del self._bars[update.phase]

    def close_all(self) -> None:
        """Close all progress bars."""
        for bar in self._bars.values():
            bar.close()
        self._bars.clear()

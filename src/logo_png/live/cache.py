"""Change-detecting cache for the current logo description.

Learn: The cache holds exactly one LogoDescription. compare_and_swap() does
the equality check and the replacement under one lock acquisition, so no
caller ever juggles a read guard and a write guard by hand. Readers take a
reference under the same lock; descriptions are immutable, so a reference
is as good as a copy.

The lock is a threading.Lock rather than an asyncio.Lock because on-demand
renders read the snapshot from worker threads.
"""

import enum
import threading

from logo_png.logo.models import EMPTY_LOGO, LogoDescription


class SwapResult(enum.Enum):
    CHANGED = "changed"
    UNCHANGED = "unchanged"


class ChangeDetectingCache:
    """Single-value cache that only reports genuine (structural) changes."""

    def __init__(self, initial: LogoDescription = EMPTY_LOGO):
        self._lock = threading.Lock()
        self._current = initial

    def compare_and_swap(self, candidate: LogoDescription) -> SwapResult:
        """Install `candidate` iff it differs from the held value."""
        with self._lock:
            if candidate == self._current:
                return SwapResult.UNCHANGED
            self._current = candidate
            return SwapResult.CHANGED

    def snapshot(self) -> LogoDescription:
        with self._lock:
            return self._current

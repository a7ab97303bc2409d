"""Process-wide single-flight gate keyed by source id.

Every code path that crawls a source in this process (the per-source API
endpoint, crawl-all) claims the source here first, so two crawls of the same
source never overlap.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator


class SingleFlight:
    """A set of claimed keys guarded by a lock."""

    def __init__(self) -> None:
        self._held: set[int] = set()
        self._lock = threading.Lock()

    def acquire(self, key: int) -> bool:
        """Claim *key*; return ``False`` if it is already held."""
        with self._lock:
            if key in self._held:
                return False
            self._held.add(key)
            return True

    def release(self, key: int) -> None:
        with self._lock:
            self._held.discard(key)

    @contextmanager
    def hold(self, key: int) -> Iterator[bool]:
        """Yield whether *key* was claimed; release it on exit if it was."""
        acquired = self.acquire(key)
        try:
            yield acquired
        finally:
            if acquired:
                self.release(key)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._held


crawl_gate = SingleFlight()

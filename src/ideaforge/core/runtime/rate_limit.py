from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(slots=True)
class _Window:
    started_at: float
    count: int = 0


class FixedWindowLimiter:
    """Per-key request budget over a fixed time window.

    Expired windows are swept whenever a key opens a new one, so the map
    only holds clients seen within the last window.
    """

    def __init__(
        self,
        *,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max(1, max_requests)
        self.window_seconds = max(1.0, float(window_seconds))
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()

    def _expired(self, window: _Window, now: float) -> bool:
        return now - window.started_at >= self.window_seconds

    def _sweep(self, now: float) -> None:
        stale = [key for key, window in self._windows.items() if self._expired(window, now)]
        for key in stale:
            del self._windows[key]

    def allow(self, key: str) -> bool:
        now = self._clock()
        with self._lock:
            window = self._windows.get(key)
            if window is None or self._expired(window, now):
                self._sweep(now)
                window = _Window(started_at=now)
                self._windows[key] = window
            if window.count >= self.max_requests:
                return False
            window.count += 1
            return True

    def remaining(self, key: str) -> int:
        with self._lock:
            window = self._windows.get(key)
            if window is None or self._expired(window, self._clock()):
                return self.max_requests
            return max(0, self.max_requests - window.count)

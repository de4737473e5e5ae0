"""In-memory rate limiter for lightweight endpoint protection."""

from __future__ import annotations

import logging
import threading
import time
from collections import defaultdict, deque
from typing import Callable

_LOGGER = logging.getLogger("portfolio.rate_limit")


class InMemoryRateLimiter:
    """Sliding-window limiter per key (one timestamp log per client/endpoint)."""

    def __init__(self):
        self._hits = defaultdict(deque)
        self._lock = threading.Lock()

    def allow(self, key: str, max_requests: int, window_seconds: int) -> tuple[bool, int]:
        now = time.monotonic()
        retry_after = 0
        with self._lock:
            q = self._hits[key]
            cutoff = now - window_seconds
            while q and q[0] < cutoff:
                q.popleft()
            if len(q) >= max_requests:
                retry_after = max(1, int(window_seconds - (now - q[0])))
                return False, retry_after
            q.append(now)
        return True, retry_after

    def cleanup(self, max_window_seconds: int) -> int:
        """Drop keys with no hits inside `max_window_seconds`; return how many went."""
        cutoff = time.monotonic() - max_window_seconds
        with self._lock:
            stale = [key for key, q in self._hits.items() if not q or q[-1] < cutoff]
            for key in stale:
                del self._hits[key]
        return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._hits)


class RateLimitJanitor:
    """Daemon thread that runs `cleanup` every `interval_seconds`."""

    def __init__(self, cleanup: Callable[[], int], interval_seconds: float = 120.0):
        self._cleanup = cleanup
        self._interval = interval_seconds
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="rate-limit-janitor", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout=timeout)
            self._thread = None

    def run_once(self) -> int:
        try:
            removed = self._cleanup()
        except Exception:
            _LOGGER.exception("Error during rate limit cleanup")
            return 0
        if removed:
            _LOGGER.debug("Cleaned up %s expired rate limit entries", removed)
        return removed

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            self.run_once()

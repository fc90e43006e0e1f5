from time import time
from typing import Callable, Dict, List
from threading import Lock

from fastapi import HTTPException, status

WINDOW_SECONDS = 60


class SlidingWindowRateLimiter:
    """Per-key limiter: at most ``max_requests`` hits per ``window`` seconds."""

    def __init__(self, max_requests: int, window: float = WINDOW_SECONDS,
                 clock: Callable[[], float] = time):
        self.max_requests = max_requests
        self.window = window
        self._clock = clock
        self._requests: Dict[str, List[float]] = {}
        self._lock = Lock()
        self._last_sweep = clock()

    def hit(self, key: str) -> None:
        if self.max_requests <= 0:
            return
        now = self._clock()
        with self._lock:
            cutoff = now - self.window
            if now - self._last_sweep >= self.window:
                self._sweep(cutoff)
                self._last_sweep = now
            timestamps = [ts for ts in self._requests.get(key, []) if ts > cutoff]
            if len(timestamps) >= self.max_requests:
                retry_after = int(timestamps[0] + self.window - now) + 1
                raise HTTPException(
                    status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                    detail="Too many requests. Please slow down.",
                    headers={"Retry-After": str(retry_after)},
                )
            timestamps.append(now)
            self._requests[key] = timestamps

    def _sweep(self, cutoff: float) -> None:
        """Drop keys whose newest hit has left the window."""
        stale = [key for key, timestamps in self._requests.items() if timestamps[-1] <= cutoff]
        for key in stale:
            del self._requests[key]

    def __len__(self) -> int:
        return len(self._requests)

    def reset(self) -> None:
        with self._lock:
            self._requests.clear()

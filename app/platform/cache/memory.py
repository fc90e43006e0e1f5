import asyncio
import time
from typing import Callable, Dict, Optional, Tuple


class InMemoryKeyValueBackend:
    """Dict-backed store used for local runs and tests.

    Entries map ``key -> (value, expires_at)``; expired entries are dropped
    lazily on access.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._data: Dict[str, Tuple[str, Optional[float]]] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at is not None and self._clock() > expires_at:
                del self._data[key]
                return None
            return value

    async def set(self, key: str, value: str, ttl: Optional[float] = None) -> None:
        expires_at = self._clock() + ttl if ttl is not None else None
        async with self._lock:
            self._data[key] = (value, expires_at)

    async def incr(self, key: str, ttl: Optional[float] = None) -> int:
        """Add one to an integer counter; ``ttl`` applies only when the counter is created."""
        async with self._lock:
            now = self._clock()
            entry = self._data.get(key)
            if entry is None or (entry[1] is not None and now > entry[1]):
                count, expires_at = 1, (now + ttl if ttl is not None else None)
            else:
                count, expires_at = int(entry[0]) + 1, entry[1]
            self._data[key] = (str(count), expires_at)
            return count

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._data.pop(key, None)

    async def close(self) -> None:
        async with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        return len(self._data)

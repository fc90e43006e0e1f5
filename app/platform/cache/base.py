from typing import Optional, Protocol


class KeyValueBackend(Protocol):
    """Async, fallible key-value store the credential store persists through.

    Every call reads or writes one whole value, so a reader never observes a
    half-written record. ``ttl`` is in seconds; ``None`` means no expiry.
    """

    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str, ttl: Optional[float] = None) -> None: ...

    async def incr(self, key: str, ttl: Optional[float] = None) -> int: ...

    async def delete(self, key: str) -> None: ...

    async def close(self) -> None: ...

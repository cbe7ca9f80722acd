"""
Key/value cache for resolved titles.

Entries are ``{"title": ..., "author": ...}`` dicts. TTL expiry is the only
eviction; concurrent writers for the same key simply overwrite each other.
"""

import logging
import time
from typing import Callable, Optional, Protocol
from urllib.parse import urlsplit, urlunsplit

logger = logging.getLogger("zapkit")


class Cache(Protocol):
    async def get(self, key: str) -> Optional[dict]:
        ...

    async def put(self, key: str, value: dict, ttl: int) -> None:
        ...


class MemoryCache:
    """In-process TTL cache."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[float, dict]] = {}

    async def get(self, key: str) -> Optional[dict]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            self._entries.pop(key, None)
            return None
        return dict(value)

    async def put(self, key: str, value: dict, ttl: int) -> None:
        self._entries[key] = (self._clock() + ttl, dict(value))

    def snapshot(self) -> list[dict]:
        now = self._clock()
        return [
            {"key": k, "ttl_left": round(exp - now, 1)}
            for k, (exp, _) in self._entries.items()
            if exp > now
        ]

    def __len__(self) -> int:
        return len(self._entries)


def normalize_url(url: str) -> str:
    """Lower-case scheme/host, drop the fragment and a trailing slash."""
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return url.strip()
    path = parts.path.rstrip("/")
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), path, parts.query, ""))


def cache_key(platform: str, url: str, native_id: Optional[str] = None) -> str:
    """``platform:native_id`` when a native ID is known, else ``platform:normalized_url``."""
    if native_id:
        return f"{platform}:{native_id}"
    return f"{platform}:{normalize_url(url)}"

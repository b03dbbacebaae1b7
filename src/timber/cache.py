# src/timber/cache.py
"""Self-expiring key/value cache.

ExpiringCache is a staging area for values that only live for a short,
caller-chosen time. Each put() schedules one deletion on the asyncio event
loop; a get(remove=True) that wins the race cancels that deletion. There is
no capacity bound and no LRU eviction.

Inserting into an occupied key is rejected rather than overwritten.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from timber.core.config import CacheSettings

logger = structlog.get_logger(__name__)


class DuplicateKeyError(KeyError):
    """Raised when put() targets a key that is already cached."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Insertion rejected because cache already has key '{key}'")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


@dataclass(slots=True)
class _Entry:
    value: Any
    timer: asyncio.TimerHandle | None = None


class ExpiringCache:
    """Mapping of string keys to values that expire after a TTL.

    Must be used from a single event loop. put() needs a running loop unless
    one is passed to the constructor.

    Example:
        cache = ExpiringCache()
        cache.put("join-session", session, ttl_ms=5_000)
        session = cache.get("join-session", remove=True)
    """

    def __init__(
        self,
        default_ttl_ms: int | None = None,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        """Initialize an empty cache.

        Args:
            default_ttl_ms: TTL used when put() is called without one
            loop: Event loop used to schedule expiry. Defaults to the loop
                running when put() is called.
        """
        if default_ttl_ms is not None and default_ttl_ms < 0:
            raise ValueError(f"default_ttl_ms must be >= 0, got {default_ttl_ms}")
        self._default_ttl_ms = default_ttl_ms
        self._loop = loop
        self._entries: dict[str, _Entry] = {}

    @classmethod
    def from_settings(
        cls,
        settings: CacheSettings,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> ExpiringCache:
        return cls(settings.default_ttl_ms, loop=loop)

    def get(self, key: str, remove: bool = False) -> Any | None:
        """Return the value for key, or None if absent or expired.

        Args:
            key: Cache key
            remove: Delete the entry (and cancel its expiry) if it was found
        """
        entry = self._entries.get(key)
        if entry is None:
            return None
        if remove:
            del self._entries[key]
            if entry.timer is not None:
                entry.timer.cancel()
        return entry.value

    def put(self, key: str, value: Any, ttl_ms: int | None = None) -> None:
        """Insert a new entry that is deleted after ttl_ms milliseconds.

        Raises:
            DuplicateKeyError: If key is already present
            ValueError: If no TTL is given and there is no default, or the
                TTL is negative
            RuntimeError: If no loop was configured and none is running
        """
        if ttl_ms is None:
            ttl_ms = self._default_ttl_ms
        if ttl_ms is None:
            raise ValueError("ttl_ms is required when the cache has no default TTL")
        if ttl_ms < 0:
            raise ValueError(f"ttl_ms must be >= 0, got {ttl_ms}")
        if key in self._entries:
            raise DuplicateKeyError(key)

        loop = self._loop if self._loop is not None else asyncio.get_running_loop()
        entry = _Entry(value=value)
        entry.timer = loop.call_later(ttl_ms / 1000.0, self._expire, key, entry)
        self._entries[key] = entry

    def _expire(self, key: str, entry: _Entry) -> None:
        # A newer entry under the same key keeps its own timer
        if self._entries.get(key) is not entry:
            return
        del self._entries[key]
        logger.debug("Cache entry expired", key=key)

    def clear(self) -> None:
        """Remove every entry and cancel all pending expiries."""
        for entry in self._entries.values():
            if entry.timer is not None:
                entry.timer.cancel()
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

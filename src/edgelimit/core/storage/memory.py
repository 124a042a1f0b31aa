"""
In-memory KV namespace for testing and development.

This store keeps everything in a Python dictionary, making it:
- Fast: No network calls
- Simple: No external dependencies
- Isolated: Each instance is independent

WARNING: Not suitable for production!
- No persistence (data lost on restart)
- No distribution (single process only)

Use RedisKVStore for production deployments.
"""

import time
from collections.abc import Callable

from edgelimit.core.storage.base import KVStore


class InMemoryKVStore(KVStore):
    """
    In-memory implementation of KVStore.

    Stores values in a dictionary with TTL checked on access.

    Example:
        >>> store = InMemoryKVStore()
        >>> await store.put("key", "42", expiration_ttl=60)
        >>> await store.get("key")
        '42'
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._data: dict[str, str] = {}
        # key -> unix timestamp when key expires
        self._expiry: dict[str, float] = {}

    def _is_expired(self, key: str) -> bool:
        if key in self._expiry:
            return self._clock() >= self._expiry[key]
        return False

    def _cleanup_if_expired(self, key: str) -> bool:
        """Remove key if expired. Returns True if it was removed."""
        if self._is_expired(key):
            self._data.pop(key, None)
            self._expiry.pop(key, None)
            return True
        return False

    async def get(self, key: str) -> str | None:
        if self._cleanup_if_expired(key):
            return None
        return self._data.get(key)

    async def put(self, key: str, value: str, expiration_ttl: int) -> None:
        self._data[key] = value
        self._expiry[key] = self._clock() + expiration_ttl

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)
        self._expiry.pop(key, None)

    # =========================================================================
    # Utility Methods (not part of interface, useful for testing)
    # =========================================================================

    def clear(self) -> None:
        """Clear all stored data."""
        self._data.clear()
        self._expiry.clear()

    def keys(self) -> list[str]:
        """Get all non-expired keys."""
        return [k for k in self._data if not self._is_expired(k)]

"""
Abstract base class for KV namespaces.

The window-counter strategy only needs a small key-value surface: read a
value, write a value with an expiration, and delete it. Anything exposing
`get()` and `put()` with these shapes can be used as a binding; this class
documents the contract and is what the bundled stores implement.

Available implementations:
- InMemoryKVStore: for testing and development (no persistence)
- RedisKVStore: for production (shared between processes)
"""

from abc import ABC, abstractmethod


class KVStore(ABC):
    """
    Contract for a KV namespace usable as a window-counter binding.

    Values are strings. Expiration is expressed in seconds from now and is
    enforced by the store itself.

    Example:
        >>> store = InMemoryKVStore()
        >>> await store.put("ratelimit:ip:1.2.3.4", '{"count": 1}', expiration_ttl=60)
        >>> await store.get("ratelimit:ip:1.2.3.4")
        '{"count": 1}'
    """

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """
        Retrieve a value by key.

        Args:
            key: The key to retrieve.

        Returns:
            The stored string, or None if the key doesn't exist or expired.
        """

    @abstractmethod
    async def put(self, key: str, value: str, expiration_ttl: int) -> None:
        """
        Store a value with expiration time.

        Args:
            key: The key to store under.
            value: String to store.
            expiration_ttl: Time-to-live in seconds. Key auto-deletes after this.
        """

    @abstractmethod
    async def delete(self, key: str) -> None:
        """
        Delete a key from storage.

        Args:
            key: The key to delete. No error if key doesn't exist.
        """

"""Abstract base class for cache backends.

Caches store values under string keys with optional TTL (time-to-live)
support. Expired values are treated as missing.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import Any

from fscache.storage.expiration import TTL


class Cache(ABC):
    """Abstract base class for cache implementations.

    Keyed methods raise InvalidKeyError for an empty key. Storage failures
    never raise; they show up as misses or False results.
    """

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Get a value from the cache.

        Args:
            key: Unique identifier for the cached value.
            default: Returned when the value is missing, unreadable or expired.

        Returns:
            Cached value if found and not expired, default otherwise.
        """
        ...

    @abstractmethod
    def set(self, key: str, value: Any, ttl: TTL | None = None) -> bool:
        """Store a value in the cache.

        Args:
            key: Unique identifier for the cached value.
            value: Value to cache.
            ttl: Time-to-live. None uses the cache's default TTL.

        Returns:
            True if the value was stored, False otherwise.
        """
        ...

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete a value from the cache.

        Returns:
            True if the value was deleted or was not present, False on error.
        """
        ...

    @abstractmethod
    def has(self, key: str) -> bool:
        """Check if a key is present in the cache.

        Only a probe: another process may set or delete the key right after.
        """
        ...

    @abstractmethod
    def clear(self) -> bool:
        """Remove every cached value.

        Returns:
            True on success, False on failure.
        """
        ...

    def get_multiple(self, keys: Iterable[str], default: Any = None) -> dict[str, Any]:
        """Get several values. Misses are reported as default, never abort the batch."""
        return {key: self.get(key, default) for key in keys}

    def set_multiple(
        self,
        values: Mapping[str, Any] | Iterable[tuple[str, Any]],
        ttl: TTL | None = None,
    ) -> bool:
        """Store several values, stopping at the first failure.

        Values stored before the failure are kept.

        Returns:
            True if every value was stored, False otherwise.
        """
        items = values.items() if isinstance(values, Mapping) else values
        for key, value in items:
            if not self.set(key, value, ttl):
                return False
        return True

    def delete_multiple(self, keys: Iterable[str]) -> bool:
        """Delete several values, stopping at the first failure.

        Returns:
            True if every value was deleted or absent, False otherwise.
        """
        for key in keys:
            if not self.delete(key):
                return False
        return True

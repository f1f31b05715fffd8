"""Durable key-value storage port (abstract interface).

The cart is mirrored into a single slot of this store on every mutation.
Adapters exist for process memory (tests, ephemeral sessions) and for a
directory of JSON files (a browser profile's local storage, on disk).
"""

from abc import ABC, abstractmethod


class StorageError(Exception):
    """Raised by adapters when the backing medium cannot be written."""


class KeyValueStorage(ABC):
    """Abstract string key-value store."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value, or None when the key is absent."""
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``. Removing an absent key is not an error."""
        ...

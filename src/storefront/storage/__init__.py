"""Durable storage factory.

Provides get_storage() / set_storage() to swap implementations:
- FileStorage (default) keeps slots as JSON files under CART_STORAGE_DIR
- MemoryStorage for tests and throwaway sessions
"""

from storefront.config import get_settings
from storefront.storage.port import KeyValueStorage

_current_storage: KeyValueStorage | None = None


def get_storage() -> KeyValueStorage:
    """Return the configured storage (singleton), selected by CART_STORAGE."""
    global _current_storage
    if _current_storage is None:
        settings = get_settings()
        if settings.cart_storage == "file":
            from storefront.storage.file_adapter import FileStorage

            _current_storage = FileStorage(settings.cart_storage_dir)
        elif settings.cart_storage == "memory":
            from storefront.storage.memory_adapter import MemoryStorage

            _current_storage = MemoryStorage()
        else:
            raise ValueError(f"Unknown cart storage: {settings.cart_storage}")
    return _current_storage


def set_storage(storage: KeyValueStorage) -> None:
    """Override the active storage (useful for tests)."""
    global _current_storage
    _current_storage = storage


def reset_storage() -> None:
    """Reset to the configured default."""
    global _current_storage
    _current_storage = None

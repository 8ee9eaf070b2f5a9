"""Storage abstraction for delivered archives."""

from .interface import StorageBackend
from .local import LocalStorageBackend

__all__ = ["StorageBackend", "LocalStorageBackend"]

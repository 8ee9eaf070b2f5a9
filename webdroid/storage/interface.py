"""
Storage backend interface.

Defines the abstract interface used to deliver finished project archives,
enabling pluggable backends.
"""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from pydantic import BaseModel


class StorageBackend(ABC):
    """Abstract storage backend interface."""

    @abstractmethod
    async def store_bytes(self, key: str, data: bytes, metadata: dict[str, Any] | None = None) -> str:
        """Store raw bytes and return the storage key.

        The content must never be observable half-written under ``key``.

        Args:
            key: Storage key/path
            data: Raw bytes to store
            metadata: Optional metadata to associate

        Returns:
            The final storage key
        """
        ...

    @abstractmethod
    async def store_model(self, key: str, model: BaseModel, metadata: dict[str, Any] | None = None) -> str:
        """Store a Pydantic model as JSON.

        Args:
            key: Storage key/path.
            model: Pydantic model instance to store.
            metadata: Optional metadata to associate.

        Returns:
            The final storage key.
        """
        ...

    @abstractmethod
    async def load_bytes(self, key: str) -> bytes:
        """Load raw bytes from storage.

        Raises:
            FileNotFoundError: If the key does not exist.
        """
        ...

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check if a key exists in storage."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete a key from storage.

        Returns:
            True if the key was deleted, False if it did not exist.
        """
        ...

    @abstractmethod
    async def list_keys(self, prefix: str = "") -> list[str]:
        """List all keys with the given prefix, sorted."""
        ...

    @abstractmethod
    async def get_metadata(self, key: str) -> dict[str, Any]:
        """Get metadata for a key, or an empty dict if none was stored."""
        ...

    @staticmethod
    def compute_hash(data: bytes) -> str:
        """Compute SHA-256 hash of data."""
        return hashlib.sha256(data).hexdigest()

    @abstractmethod
    def get_local_path(self, key: str) -> Path | None:
        """Get local filesystem path if available.

        Args:
            key: Storage key/path to get the local path for.

        Returns:
            Local filesystem Path if the key exists, None otherwise.
        """
        ...

"""
Local filesystem storage backend.

Writes delivered archives and build reports under an output directory.
Files are written to a temporary sibling and renamed into place so a failed
write never leaves a partial archive behind.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os
from pydantic import BaseModel

from ..core.logging import get_logger
from .interface import StorageBackend

logger = get_logger(__name__)


class LocalStorageBackend(StorageBackend):
    """Local filesystem storage backend."""

    def __init__(self, base_path: Path) -> None:
        """Initialize local storage.

        Args:
            base_path: Base directory for all storage operations
        """
        self.base_path = base_path.resolve()
        self._metadata_suffix = ".meta.json"

    def _get_full_path(self, key: str) -> Path:
        """Get full filesystem path for a key.

        Keys that would resolve outside the base directory are flattened into
        a single file name inside it.
        """
        clean_key = key.lstrip("/\\").replace(":", "")
        full_path = (self.base_path / clean_key).resolve()

        try:
            full_path.relative_to(self.base_path)
        except ValueError:
            clean_key = clean_key.replace("..", "").replace("/", "_").replace("\\", "_")
            full_path = self.base_path / clean_key

        return full_path

    def _get_metadata_path(self, key: str) -> Path:
        return self._get_full_path(key + self._metadata_suffix)

    async def _write_atomic(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex[:8]}.tmp")
        try:
            async with aiofiles.open(tmp_path, "wb") as f:
                await f.write(data)
            await aiofiles.os.replace(tmp_path, path)
        except BaseException:
            if tmp_path.exists():
                await aiofiles.os.remove(tmp_path)
            raise

    async def _store_metadata(self, key: str, metadata: dict[str, Any]) -> None:
        metadata["_stored_at"] = datetime.now(timezone.utc).isoformat()
        metadata["_key"] = key
        content = json.dumps(metadata, indent=2, default=str)
        await self._write_atomic(self._get_metadata_path(key), content.encode("utf-8"))

    async def store_bytes(self, key: str, data: bytes, metadata: dict[str, Any] | None = None) -> str:
        full_path = self._get_full_path(key)
        await self._write_atomic(full_path, data)

        meta = dict(metadata or {})
        meta["size_bytes"] = len(data)
        meta["hash"] = self.compute_hash(data)
        await self._store_metadata(key, meta)

        logger.info("Stored file", key=key, size_bytes=len(data))
        return key

    async def store_model(self, key: str, model: BaseModel, metadata: dict[str, Any] | None = None) -> str:
        json_content = model.model_dump_json(indent=2, by_alias=True)

        meta = dict(metadata or {})
        meta["model_type"] = type(model).__name__

        return await self.store_bytes(key, json_content.encode("utf-8"), meta)

    async def load_bytes(self, key: str) -> bytes:
        full_path = self._get_full_path(key)

        if not full_path.exists():
            raise FileNotFoundError(f"Key not found: {key}")

        async with aiofiles.open(full_path, "rb") as f:
            return await f.read()

    async def exists(self, key: str) -> bool:
        return self._get_full_path(key).exists()

    async def delete(self, key: str) -> bool:
        full_path = self._get_full_path(key)
        meta_path = self._get_metadata_path(key)

        deleted = False

        if full_path.exists():
            await aiofiles.os.remove(full_path)
            deleted = True

        if meta_path.exists():
            await aiofiles.os.remove(meta_path)

        return deleted

    async def list_keys(self, prefix: str = "") -> list[str]:
        search_path = self._get_full_path(prefix) if prefix else self.base_path

        if not search_path.exists():
            return []

        keys = []
        for path in search_path.rglob("*"):
            if (
                path.is_file()
                and not path.name.endswith(self._metadata_suffix)
                and not path.name.endswith(".tmp")
            ):
                keys.append(path.relative_to(self.base_path).as_posix())

        return sorted(keys)

    async def get_metadata(self, key: str) -> dict[str, Any]:
        meta_path = self._get_metadata_path(key)

        if not meta_path.exists():
            return {}

        async with aiofiles.open(meta_path, "r", encoding="utf-8") as f:
            content = await f.read()
            return json.loads(content)

    def get_local_path(self, key: str) -> Path | None:
        full_path = self._get_full_path(key)
        if full_path.exists():
            return full_path
        return None

"""
Zip archive codec.

Reads uploads and writes generated projects with the standard ``zipfile``
module. Uploaded bytes stay in memory; each lazy entry read opens and closes
its own handle on them.
"""

from __future__ import annotations

import io
import zipfile

from ..core.exceptions import ArchiveError
from ..core.logging import get_logger
from .interface import ArchiveCodec, ArchiveEntry

logger = get_logger(__name__)

# Fixed timestamp so identical trees serialize identically
_EPOCH = (1980, 1, 1, 0, 0, 0)


class ZipArchiveCodec(ArchiveCodec):
    """Zip implementation of the archive codec."""

    def __init__(self, compression: int = zipfile.ZIP_DEFLATED) -> None:
        """Initialize the codec.

        Args:
            compression: ``zipfile`` compression method for written archives.
        """
        self.compression = compression

    @property
    def extension(self) -> str:
        return ".zip"

    def read_archive(self, data: bytes) -> dict[str, ArchiveEntry]:
        try:
            with zipfile.ZipFile(io.BytesIO(data), "r") as archive:
                infos = archive.infolist()
        except (zipfile.BadZipFile, zipfile.LargeZipFile) as e:
            raise ArchiveError(
                message="Not a readable zip archive",
                operation="read_archive",
                context={"size_bytes": len(data)},
                cause=e,
            )

        entries: dict[str, ArchiveEntry] = {}
        for info in infos:
            entries[info.filename] = ArchiveEntry(
                info.filename,
                info.is_dir(),
                None if info.is_dir() else self._make_loader(data, info),
            )

        logger.debug("Zip archive read", entries=len(entries), size_bytes=len(data))
        return entries

    @staticmethod
    def _make_loader(data: bytes, info: zipfile.ZipInfo):
        def load() -> bytes:
            with zipfile.ZipFile(io.BytesIO(data), "r") as archive:
                return archive.read(info)

        return load

    def write_archive(self, files: dict[str, bytes]) -> bytes:
        buffer = io.BytesIO()
        try:
            with zipfile.ZipFile(buffer, "w", compression=self.compression) as zf:
                for path in sorted(files):
                    info = zipfile.ZipInfo(path, date_time=_EPOCH)
                    info.compress_type = self.compression
                    info.external_attr = 0o644 << 16
                    zf.writestr(info, files[path])
        except (OSError, ValueError, zipfile.LargeZipFile) as e:
            raise ArchiveError(
                message="Failed to write zip archive",
                operation="write_archive",
                context={"files": len(files)},
                cause=e,
            )

        data = buffer.getvalue()
        logger.debug("Zip archive written", files=len(files), size_bytes=len(data))
        return data

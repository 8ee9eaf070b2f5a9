"""
Archive codec interface.

Defines the abstract interface for reading and writing compressed file trees,
so services receive the codec at construction time instead of probing for
an archive library at runtime.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from posixpath import normpath


class ArchiveEntry:
    """A single entry of a decoded archive.

    Content is loaded on demand through ``loader`` so that an archive parsed
    at upload time can be copied at assembly time without decoding it again.
    """

    __slots__ = ("path", "is_dir", "_loader")

    def __init__(self, path: str, is_dir: bool, loader: Callable[[], bytes] | None = None) -> None:
        self.path = path
        self.is_dir = is_dir
        self._loader = loader

    def __repr__(self) -> str:
        kind = "dir" if self.is_dir else "file"
        return f"ArchiveEntry({self.path!r}, {kind})"

    @classmethod
    def from_bytes(cls, path: str, data: bytes) -> ArchiveEntry:
        """Create a file entry backed by in-memory bytes."""
        return cls(path, False, lambda: data)

    def read_bytes(self) -> bytes:
        """Read the entry content.

        Raises:
            IsADirectoryError: If the entry is a directory marker.
        """
        if self.is_dir or self._loader is None:
            raise IsADirectoryError(self.path)
        return self._loader()

    def read_text(self, encoding: str = "utf-8") -> str:
        """Read the entry content as text, replacing undecodable bytes."""
        return self.read_bytes().decode(encoding, errors="replace")

    @property
    def is_safe(self) -> bool:
        """Whether the path stays inside the folder it is extracted into."""
        if not self.path or self.path.startswith(("/", "\\")):
            return False
        normalized = normpath(self.path.replace("\\", "/"))
        return normalized != ".." and not normalized.startswith("../")


class ArchiveCodec(ABC):
    """Abstract archive codec."""

    @property
    @abstractmethod
    def extension(self) -> str:
        """File extension of archives this codec handles, e.g. ``.zip``."""
        ...

    @abstractmethod
    def read_archive(self, data: bytes) -> dict[str, ArchiveEntry]:
        """Decode archive bytes.

        Args:
            data: Raw archive bytes.

        Returns:
            Entries keyed by path, in archive order.

        Raises:
            ArchiveError: If the bytes are not a readable archive.
        """
        ...

    @abstractmethod
    def write_archive(self, files: dict[str, bytes]) -> bytes:
        """Encode a file tree.

        Args:
            files: File contents keyed by slash-separated path.

        Returns:
            Raw archive bytes.

        Raises:
            ArchiveError: If the archive cannot be written.
        """
        ...

"""
In-memory file tree.

A small builder for the generated project: nested folders are views onto one
shared ``{path -> bytes}`` mapping that is handed to an ``ArchiveCodec``.
"""

from __future__ import annotations


class FileTree:
    """A folder view onto a shared file mapping."""

    def __init__(self, prefix: str = "", files: dict[str, bytes] | None = None) -> None:
        self.prefix = prefix.strip("/")
        self._files: dict[str, bytes] = files if files is not None else {}

    def _join(self, name: str) -> str:
        name = name.strip("/")
        if not name:
            raise ValueError("empty path")
        return f"{self.prefix}/{name}" if self.prefix else name

    def folder(self, name: str) -> FileTree:
        """Return a view of a nested folder; intermediate folders are implied."""
        return FileTree(self._join(name), self._files)

    def file(self, name: str, content: str | bytes) -> str:
        """Write a file and return its full path. Text is encoded as UTF-8."""
        path = self._join(name)
        self._files[path] = content.encode("utf-8") if isinstance(content, str) else content
        return path

    def clear(self) -> int:
        """Remove every file under this folder and return how many were removed."""
        stale = [path for path in self._files if self._contains(path)]
        for path in stale:
            del self._files[path]
        return len(stale)

    def _contains(self, path: str) -> bool:
        return not self.prefix or path.startswith(self.prefix + "/")

    @property
    def paths(self) -> list[str]:
        """Sorted paths of the files under this folder."""
        return sorted(path for path in self._files if self._contains(path))

    def to_dict(self) -> dict[str, bytes]:
        return {path: self._files[path] for path in self.paths}

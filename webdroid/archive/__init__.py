"""Archive access for webdroid."""

from .interface import ArchiveCodec, ArchiveEntry
from .tree import FileTree
from .zip import ZipArchiveCodec

__all__ = ["ArchiveCodec", "ArchiveEntry", "FileTree", "ZipArchiveCodec"]

"""
Ingestion Service.

Normalizes an upload (a single markup file or a zip of a multi-file site)
into a ``ProjectSource``: markup text for analysis plus, for archives, the
full entry tree for packaging.
"""

from __future__ import annotations

import asyncio
import re
import time
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from ...archive import ArchiveCodec, ArchiveEntry
from ...core.exceptions import UnsupportedFileTypeError
from ...core.logging import get_logger
from ...core.types import ServiceResult
from ...models.project import ProjectSource

logger = get_logger(__name__)

MARKUP_EXTENSIONS = (".html", ".htm")
ENTRY_POINT_NAME = "index.html"
DEFAULT_MARKUP_APP_NAME = "MyWebApp"
DEFAULT_ARCHIVE_APP_NAME = "MyZipApp"
MISSING_ENTRY_POINT_MARKUP = "<!-- No index.html found in ZIP, default permissions will be applied -->"
MISSING_ENTRY_POINT_WARNING = (
    "No 'index.html' found in the archive. Default permissions will be applied "
    "unless the main markup is supplied separately."
)


class IngestionOutput(BaseModel):
    """Output from the ingestion service."""

    model_config = ConfigDict(frozen=True)

    source: ProjectSource
    suggested_app_name: str = Field(description="App name derived from the file name")


def derive_app_name(file_name: str, default: str) -> str:
    """Strip a file stem down to its alphanumeric characters."""
    stem = Path(file_name).stem
    return re.sub(r"[^A-Za-z0-9]", "", stem) or default


def find_entry_point(entries: dict[str, ArchiveEntry]) -> str | None:
    """Locate the archive entry a WebView should load.

    A root-level ``index.html`` wins; otherwise the first file entry, in
    archive order, whose last path segment is ``index.html``.
    """
    root = entries.get(ENTRY_POINT_NAME)
    if root is not None and not root.is_dir:
        return ENTRY_POINT_NAME
    for path, entry in entries.items():
        if not entry.is_dir and path.endswith(f"/{ENTRY_POINT_NAME}"):
            return path
    return None


class IngestionService:
    """Service for turning uploads into project sources.

    This service:
    1. Rejects anything that is not a markup file or an archive
    2. Decodes markup files as text
    3. Parses archives once and keeps their entries for packaging
    4. Locates the entry point used for permission analysis
    """

    def __init__(self, codec: ArchiveCodec) -> None:
        """Initialize the ingestion service.

        Args:
            codec: Archive codec used to read uploaded archives
        """
        self.codec = codec

    def _classify(self, file_name: str) -> str:
        suffix = Path(file_name).suffix.lower()
        if suffix in MARKUP_EXTENSIONS:
            return "markup"
        if suffix == self.codec.extension:
            return "archive"
        raise UnsupportedFileTypeError(
            message=f"Unsupported file type '{suffix or file_name}': upload a "
            f"{', '.join(MARKUP_EXTENSIONS)} or {self.codec.extension} file",
            file_name=file_name,
            extension=suffix,
        )

    def ingest_text(self, markup: str) -> ProjectSource:
        """Use pasted markup as the whole project; clears any archive."""
        return ProjectSource(markup_text=markup)

    async def ingest(self, file_name: str, data: bytes) -> ServiceResult[IngestionOutput]:
        """Ingest an uploaded file.

        Args:
            file_name: Name of the uploaded file; its extension selects the mode
            data: File content

        Returns:
            ServiceResult containing IngestionOutput. A missing entry point in
            an archive is reported as a warning, not a failure.

        Raises:
            UnsupportedFileTypeError: If the extension is not supported.
            ArchiveError: If an archive upload cannot be read.
        """
        start_time = time.perf_counter()
        kind = self._classify(file_name)

        logger.info("Starting ingestion", file_name=file_name, kind=kind, size_bytes=len(data))

        if kind == "markup":
            output = IngestionOutput(
                source=ProjectSource(
                    markup_text=data.decode("utf-8", errors="replace"),
                    origin_name=file_name,
                ),
                suggested_app_name=derive_app_name(file_name, DEFAULT_MARKUP_APP_NAME),
            )
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info("Markup ingested", chars=len(output.source.markup_text), duration_ms=duration_ms)
            return ServiceResult.ok(output, duration_ms=duration_ms)

        entries = await asyncio.to_thread(self.codec.read_archive, data)
        entry_point = find_entry_point(entries)
        warnings: list[str] = []

        if entry_point is not None:
            markup_text = await asyncio.to_thread(entries[entry_point].read_text)
            logger.info("Entry point found", entry_point=entry_point)
        else:
            markup_text = MISSING_ENTRY_POINT_MARKUP
            warnings.append(MISSING_ENTRY_POINT_WARNING)
            logger.warning("No entry point in archive", file_name=file_name, entries=len(entries))

        output = IngestionOutput(
            source=ProjectSource(
                markup_text=markup_text,
                asset_tree=entries,
                entry_point=entry_point,
                origin_name=file_name,
            ),
            suggested_app_name=derive_app_name(file_name, DEFAULT_ARCHIVE_APP_NAME),
        )

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "Archive ingested",
            files=output.source.file_count,
            duration_ms=duration_ms,
        )
        return ServiceResult.with_warnings(output, warnings, duration_ms=duration_ms)

    async def ingest_path(self, path: Path) -> ServiceResult[IngestionOutput]:
        """Read a file from disk and ingest it."""
        self._classify(path.name)
        data = await asyncio.to_thread(path.read_bytes)
        return await self.ingest(path.name, data)

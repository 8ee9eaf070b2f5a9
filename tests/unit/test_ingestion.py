"""Unit tests for the ingestion service."""

import pytest

from webdroid.archive import ArchiveEntry
from webdroid.core.exceptions import ArchiveError, UnsupportedFileTypeError
from webdroid.services.ingestion import IngestionService
from webdroid.services.ingestion.service import (
    MISSING_ENTRY_POINT_MARKUP,
    derive_app_name,
    find_entry_point,
)


class TestHelpers:
    """Tests for the ingestion helper functions."""

    @pytest.mark.parametrize("file_name,expected", [
        ("my-cool_app.html", "mycoolapp"),
        ("Game 2.zip", "Game2"),
        ("---.html", "MyWebApp"),
    ])
    def test_derive_app_name(self, file_name, expected):
        assert derive_app_name(file_name, "MyWebApp") == expected

    def test_root_entry_point_wins(self):
        entries = {
            "docs/index.html": ArchiveEntry.from_bytes("docs/index.html", b"docs"),
            "index.html": ArchiveEntry.from_bytes("index.html", b"root"),
        }
        assert find_entry_point(entries) == "index.html"

    def test_nested_entry_point_in_archive_order(self):
        entries = {
            "site/": ArchiveEntry("site/", True),
            "site/index.html": ArchiveEntry.from_bytes("site/index.html", b""),
            "other/index.html": ArchiveEntry.from_bytes("other/index.html", b""),
        }
        assert find_entry_point(entries) == "site/index.html"

    def test_entry_point_matches_whole_file_name(self):
        entries = {
            "notindex.html": ArchiveEntry.from_bytes("notindex.html", b""),
            "__MACOSX/site/._index.html": ArchiveEntry.from_bytes("__MACOSX/site/._index.html", b""),
            "site/myindex.html": ArchiveEntry.from_bytes("site/myindex.html", b""),
            "site/index.html": ArchiveEntry.from_bytes("site/index.html", b""),
        }
        assert find_entry_point(entries) == "site/index.html"

    def test_lookalike_names_are_not_entry_points(self):
        entries = {"notindex.html": ArchiveEntry.from_bytes("notindex.html", b"")}
        assert find_entry_point(entries) is None

    def test_no_entry_point(self):
        assert find_entry_point({"a.js": ArchiveEntry.from_bytes("a.js", b"")}) is None

    def test_ingest_text(self, codec):
        source = IngestionService(codec).ingest_text("<b>pasted</b>")
        assert source.packaging_mode == "markup"
        assert source.markup_text == "<b>pasted</b>"


@pytest.mark.asyncio
class TestIngestionService:
    """Tests for IngestionService."""

    async def test_markup_upload(self, codec):
        service = IngestionService(codec)
        result = await service.ingest("landing-page.html", b"<h1>Hello</h1>")

        assert result.success
        assert not result.warnings
        output = result.data
        assert output.source.markup_text == "<h1>Hello</h1>"
        assert output.source.asset_tree is None
        assert output.source.packaging_mode == "markup"
        assert output.suggested_app_name == "landingpage"

    async def test_htm_extension_is_case_insensitive(self, codec):
        result = await IngestionService(codec).ingest("PAGE.HTM", b"<p/>")
        assert result.data.source.packaging_mode == "markup"

    async def test_archive_upload(self, codec, site_zip_bytes):
        service = IngestionService(codec)
        result = await service.ingest("My Site.zip", site_zip_bytes)

        assert result.success
        assert not result.warnings
        source = result.data.source
        assert source.packaging_mode == "archive"
        assert source.entry_point == "index.html"
        assert "app.js" in source.markup_text
        assert source.file_count == 3
        assert result.data.suggested_app_name == "MySite"

    async def test_archive_without_entry_point(self, codec, make_zip):
        """Test a missing index.html is a warning with placeholder markup."""
        data = make_zip({"main.js": "console.log(1)"})
        result = await IngestionService(codec).ingest("bundle.zip", data)

        assert result.success
        assert len(result.warnings) == 1
        assert "index.html" in result.warnings[0]
        source = result.data.source
        assert source.missing_entry_point
        assert source.markup_text == MISSING_ENTRY_POINT_MARKUP

    async def test_archive_name_default(self, codec, make_zip):
        result = await IngestionService(codec).ingest("__.zip", make_zip({"index.html": ""}))
        assert result.data.suggested_app_name == "MyZipApp"

    async def test_unsupported_extension(self, codec):
        with pytest.raises(UnsupportedFileTypeError) as exc_info:
            await IngestionService(codec).ingest("app.apk", b"PK")
        assert exc_info.value.extension == ".apk"
        assert exc_info.value.field_name == "file_name"

    async def test_corrupt_archive(self, codec):
        with pytest.raises(ArchiveError):
            await IngestionService(codec).ingest("broken.zip", b"not a zip")

    async def test_ingest_path(self, codec, temp_dir):
        path = temp_dir / "hello.html"
        path.write_text("<p>hi</p>", encoding="utf-8")
        result = await IngestionService(codec).ingest_path(path)
        assert result.data.source.markup_text == "<p>hi</p>"
        assert result.data.source.origin_name == "hello.html"

    async def test_ingest_path_rejects_before_reading(self, codec, temp_dir):
        with pytest.raises(UnsupportedFileTypeError):
            await IngestionService(codec).ingest_path(temp_dir / "missing.txt")


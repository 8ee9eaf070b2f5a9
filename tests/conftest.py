"""Test configuration for webdroid."""

import io
import tempfile
import zipfile
from pathlib import Path

import pytest
import structlog
from PIL import Image

from webdroid.archive import ZipArchiveCodec
from webdroid.core.config import AnalysisConfig, AssemblyConfig
from webdroid.models.project import PermissionProfile, ProjectConfig


def build_zip(files):
    """Build zip bytes from a ``{path: content}`` mapping.

    Paths ending with '/' are written as directory entries. Entries are
    written in mapping order.
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for path, content in files.items():
            if path.endswith("/"):
                zf.writestr(zipfile.ZipInfo(path), b"")
            else:
                zf.writestr(path, content)
    return buffer.getvalue()


def read_zip(data):
    """Decode zip bytes into a ``{path: bytes}`` mapping."""
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        return {name: zf.read(name) for name in zf.namelist()}


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo logging configuration done by CLI commands under test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests.

    Yields:
        Path: A Path object pointing to the temporary directory.
            The directory is automatically cleaned up after the test.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def codec():
    return ZipArchiveCodec()


@pytest.fixture
def analysis_config():
    return AnalysisConfig()


@pytest.fixture
def assembly_config():
    return AssemblyConfig()


@pytest.fixture
def site_zip_bytes():
    """A small multi-file site with a root index.html."""
    return build_zip({
        "index.html": "<html><script src='js/app.js'></script></html>",
        "css/": "",
        "css/style.css": "body { margin: 0; }",
        "js/app.js": "navigator.geolocation.getCurrentPosition(console.log);",
    })


@pytest.fixture
def png_bytes():
    """A 512x512 PNG, the shape image models return."""
    buffer = io.BytesIO()
    Image.new("RGB", (512, 512), (30, 120, 200)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def demo_config():
    return ProjectConfig(app_name="DemoApp", package_name="com.demo.app", version_name="1.0.0")


@pytest.fixture
def basic_permissions():
    """Network access only."""
    return PermissionProfile(
        uses_internet=True,
        uses_camera=False,
        reasoning="Static page that only loads remote content.",
    )


@pytest.fixture
def location_permissions():
    """Network and location."""
    return PermissionProfile(
        uses_internet=True,
        uses_camera=False,
        uses_location=True,
        reasoning="Calls navigator.geolocation.",
    )


@pytest.fixture
def make_zip():
    return build_zip


@pytest.fixture
def unzip():
    return read_zip

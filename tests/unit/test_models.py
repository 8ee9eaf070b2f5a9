"""Unit tests for data models."""

import base64

import pytest
from pydantic import ValidationError

from webdroid.archive import ArchiveEntry
from webdroid.models.project import (
    FALLBACK_PERMISSIONS,
    IconAsset,
    PermissionProfile,
    ProjectConfig,
    ProjectSource,
    placeholder_icon,
)


class TestProjectConfig:
    """Tests for ProjectConfig model."""

    def test_defaults(self):
        config = ProjectConfig()
        assert config.app_name == "MyApp"
        assert config.package_name == "com.example.myapp"
        assert config.version_name == "1.0.0"
        assert config.description == ""

    def test_folder_name_replaces_whitespace(self):
        """Test whitespace runs in the app name become a single underscore."""
        config = ProjectConfig(app_name="My  Cool App")
        assert config.folder_name == "My_Cool_App"
        assert config.archive_name() == "My_Cool_App_AndroidProject.zip"

    def test_java_package_path(self):
        config = ProjectConfig(package_name="com.demo.app")
        assert config.java_package_path == "com/demo/app"

    @pytest.mark.parametrize("name", ["", "My/App", "../evil", "App<script>", " _hidden"])
    def test_rejects_unsafe_app_names(self, name):
        """Test names that would break paths or markup are rejected."""
        with pytest.raises(ValidationError):
            ProjectConfig(app_name=name)

    @pytest.mark.parametrize("package", ["demo", "com..demo", "com.1demo", "com.demo.", "com.de-mo"])
    def test_rejects_invalid_package_names(self, package):
        with pytest.raises(ValidationError):
            ProjectConfig(package_name=package)

    def test_rejects_invalid_version_name(self):
        with pytest.raises(ValidationError):
            ProjectConfig(version_name='1.0"')

    def test_is_frozen(self):
        config = ProjectConfig()
        with pytest.raises(ValidationError):
            config.app_name = "Other"


class TestPermissionProfile:
    """Tests for PermissionProfile model."""

    def test_parses_wire_format(self):
        """Test the camelCase JSON shape returned by the model is accepted."""
        profile = PermissionProfile.model_validate({
            "usesInternet": True,
            "usesCamera": True,
            "usesMicrophone": True,
            "customPermissions": ["VIBRATE"],
            "reasoning": "Video chat.",
        })
        assert profile.uses_camera is True
        assert profile.uses_location is False
        assert profile.custom_permissions == ("VIBRATE",)

    @pytest.mark.parametrize("missing", ["usesInternet", "usesCamera", "reasoning"])
    def test_required_fields(self, missing):
        data = {"usesInternet": True, "usesCamera": False, "reasoning": "x"}
        del data[missing]
        with pytest.raises(ValidationError):
            PermissionProfile.model_validate(data)

    def test_rejects_non_boolean_flags(self):
        """Test strings are not coerced into flags."""
        with pytest.raises(ValidationError):
            PermissionProfile.model_validate({
                "usesInternet": "yes",
                "usesCamera": False,
                "reasoning": "x",
            })

    def test_rejects_markup_in_custom_permissions(self):
        with pytest.raises(ValidationError):
            PermissionProfile.model_validate({
                "usesInternet": True,
                "usesCamera": False,
                "customPermissions": ['BLUETOOTH" /><evil'],
                "reasoning": "x",
            })

    def test_declared_permissions_order(self):
        """Test INTERNET comes first, then flags, then custom permissions in order."""
        profile = PermissionProfile(
            uses_internet=True,
            uses_camera=True,
            uses_location=True,
            uses_microphone=True,
            uses_storage=True,
            custom_permissions=("VIBRATE", "com.vendor.permission.PUSH"),
            reasoning="Everything.",
        )
        assert profile.declared_permissions() == [
            "android.permission.INTERNET",
            "android.permission.CAMERA",
            "android.permission.ACCESS_FINE_LOCATION",
            "android.permission.RECORD_AUDIO",
            "android.permission.READ_EXTERNAL_STORAGE",
            "android.permission.VIBRATE",
            "com.vendor.permission.PUSH",
        ]

    def test_internet_declared_even_when_disabled(self):
        profile = PermissionProfile(uses_internet=False, uses_camera=False, reasoning="Offline.")
        assert profile.declared_permissions() == ["android.permission.INTERNET"]

    def test_fallback_profile(self):
        assert FALLBACK_PERMISSIONS.declared_permissions() == ["android.permission.INTERNET"]
        assert FALLBACK_PERMISSIONS.reasoning == (
            "Automatic analysis failed. Basic permissions have been applied."
        )

    def test_dump_by_alias(self, basic_permissions):
        dumped = basic_permissions.model_dump(by_alias=True)
        assert dumped["usesInternet"] is True
        assert "uses_internet" not in dumped


class TestIconAsset:
    """Tests for IconAsset model."""

    def test_data_uri_roundtrip(self, png_bytes):
        icon = IconAsset(data=png_bytes)
        uri = icon.to_data_uri()
        assert uri.startswith("data:image/png;base64,")
        assert IconAsset.from_data_uri(uri).data == png_bytes

    def test_from_data_uri_rejects_garbage(self):
        assert IconAsset.from_data_uri("https://example.com/icon.png") is None
        assert IconAsset.from_data_uri("data:image/png;base64,!!!") is None

    def test_placeholder_is_not_embedded(self):
        icon = placeholder_icon("https://picsum.photos/512/512")
        assert not icon.is_embedded
        assert icon.reference == "https://picsum.photos/512/512"
        with pytest.raises(ValueError):
            icon.to_data_uri()

    def test_reference_of_embedded_icon(self):
        icon = IconAsset(data=b"abc", mime_type="image/webp")
        assert icon.reference == "data:image/webp;base64," + base64.b64encode(b"abc").decode()


class TestProjectSource:
    """Tests for ProjectSource model."""

    def test_markup_mode(self):
        source = ProjectSource(markup_text="<h1>Hi</h1>")
        assert source.packaging_mode == "markup"
        assert not source.missing_entry_point
        assert source.file_count == 1

    def test_archive_mode_counts_files_only(self):
        tree = {
            "css/": ArchiveEntry("css/", True),
            "css/a.css": ArchiveEntry.from_bytes("css/a.css", b""),
            "index.html": ArchiveEntry.from_bytes("index.html", b"<html/>"),
        }
        source = ProjectSource(markup_text="<html/>", asset_tree=tree, entry_point="index.html")
        assert source.packaging_mode == "archive"
        assert source.file_count == 2
        assert not source.missing_entry_point

    def test_missing_entry_point(self):
        source = ProjectSource(asset_tree={"a.js": ArchiveEntry.from_bytes("a.js", b"")})
        assert source.missing_entry_point

"""
Project data models.

These models describe what flows through the build pipeline: the user's
project settings, the uploaded web source, the inferred permission profile,
the launcher icon and the assembled archive.
"""

from __future__ import annotations

import base64
import binascii
import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..archive.interface import ArchiveEntry

APP_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9 _-]*$")
PACKAGE_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]*(\.[A-Za-z][A-Za-z0-9_]*)+$")
VERSION_NAME_PATTERN = re.compile(r"^[0-9A-Za-z._-]+$")
PERMISSION_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_.]*$")

ANDROID_PERMISSION_PREFIX = "android.permission."
DATA_URI_PATTERN = re.compile(r"^data:(?P<mime>image/[A-Za-z0-9.+-]+);base64,(?P<payload>.+)$", re.DOTALL)


class ProjectConfig(BaseModel):
    """User-facing settings of the Android project being generated.

    Names are validated on construction because they are interpolated
    verbatim into file paths, XML and Java source.
    """

    model_config = ConfigDict(frozen=True)

    app_name: str = Field(default="MyApp", description="Launcher label and root folder name")
    package_name: str = Field(default="com.example.myapp", description="Reverse-DNS application id")
    version_name: str = Field(default="1.0.0", description="Human readable version")
    description: str = Field(default="", description="Free-text description used for the icon prompt")

    @field_validator("app_name")
    @classmethod
    def _check_app_name(cls, value: str) -> str:
        value = value.strip()
        if not APP_NAME_PATTERN.match(value):
            raise ValueError(
                "app name must start with a letter or digit and contain only "
                "letters, digits, spaces, '_' or '-'"
            )
        return value

    @field_validator("package_name")
    @classmethod
    def _check_package_name(cls, value: str) -> str:
        value = value.strip()
        if not PACKAGE_NAME_PATTERN.match(value):
            raise ValueError(
                "package name must be dot-separated identifiers such as com.example.app"
            )
        return value

    @field_validator("version_name")
    @classmethod
    def _check_version_name(cls, value: str) -> str:
        value = value.strip()
        if not VERSION_NAME_PATTERN.match(value):
            raise ValueError("version name may only contain letters, digits, '.', '_' or '-'")
        return value

    @property
    def folder_name(self) -> str:
        """Root folder of the generated project (whitespace runs become '_')."""
        return re.sub(r"\s+", "_", self.app_name)

    @property
    def java_package_path(self) -> str:
        """Source directory of the package, e.g. ``com/example/app``."""
        return self.package_name.replace(".", "/")

    def archive_name(self, suffix: str = "_AndroidProject.zip") -> str:
        """File name of the delivered archive."""
        return f"{self.folder_name}{suffix}"


class PermissionProfile(BaseModel):
    """Device capabilities a web codebase appears to require.

    Field names follow the camelCase wire format of the inference response.
    ``usesInternet``, ``usesCamera`` and ``reasoning`` are required; the rest
    default to off. Types are strict so that ``"yes"`` is not read as true.
    """

    model_config = ConfigDict(frozen=True, strict=True, populate_by_name=True)

    uses_internet: bool = Field(alias="usesInternet")
    uses_camera: bool = Field(alias="usesCamera")
    uses_location: bool = Field(default=False, alias="usesLocation")
    uses_microphone: bool = Field(default=False, alias="usesMicrophone")
    uses_storage: bool = Field(default=False, alias="usesStorage")
    custom_permissions: tuple[str, ...] = Field(
        default=(),
        alias="customPermissions",
        description="Other permissions such as BLUETOOTH or VIBRATE",
    )
    reasoning: str = Field(description="Why these permissions were chosen")

    @field_validator("custom_permissions", mode="before")
    @classmethod
    def _coerce_permission_list(cls, value: object) -> object:
        # JSON arrays arrive as lists; strict mode only accepts tuples
        if isinstance(value, list):
            return tuple(value)
        return value

    @field_validator("custom_permissions")
    @classmethod
    def _check_permission_names(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        for name in value:
            if not PERMISSION_NAME_PATTERN.match(name):
                raise ValueError(f"invalid permission identifier: {name!r}")
        return value

    def declared_permissions(self) -> list[str]:
        """Fully-qualified permission names in manifest order.

        Returns:
            INTERNET first, then the flagged capabilities, then every custom
            permission in its original order. Bare custom names are
            qualified with ``android.permission.``. A permission is declared
            at most once.
        """
        declared = [f"{ANDROID_PERMISSION_PREFIX}INTERNET"]
        if self.uses_camera:
            declared.append(f"{ANDROID_PERMISSION_PREFIX}CAMERA")
        if self.uses_location:
            declared.append(f"{ANDROID_PERMISSION_PREFIX}ACCESS_FINE_LOCATION")
        if self.uses_microphone:
            declared.append(f"{ANDROID_PERMISSION_PREFIX}RECORD_AUDIO")
        if self.uses_storage:
            declared.append(f"{ANDROID_PERMISSION_PREFIX}READ_EXTERNAL_STORAGE")
        for name in self.custom_permissions:
            qualified = name if "." in name else f"{ANDROID_PERMISSION_PREFIX}{name}"
            if qualified not in declared:
                declared.append(qualified)
        return declared


FALLBACK_PERMISSIONS = PermissionProfile(
    uses_internet=True,
    uses_camera=False,
    uses_location=False,
    uses_microphone=False,
    uses_storage=False,
    custom_permissions=(),
    reasoning="Automatic analysis failed. Basic permissions have been applied.",
)


class IconAsset(BaseModel):
    """Launcher icon image.

    A generated icon carries its encoded bytes. The placeholder used when
    generation fails only references a remote image and is never written
    into the project.
    """

    model_config = ConfigDict(frozen=True)

    data: bytes | None = Field(default=None, description="Encoded image bytes")
    mime_type: str = Field(default="image/png")
    source_url: str | None = Field(default=None, description="Remote image reference")

    @property
    def is_embedded(self) -> bool:
        return bool(self.data)

    @property
    def reference(self) -> str:
        """A displayable reference: a data URI or the remote URL."""
        if self.is_embedded:
            return self.to_data_uri()
        return self.source_url or ""

    def to_data_uri(self) -> str:
        if not self.data:
            raise ValueError("icon has no embedded data")
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"

    @classmethod
    def from_data_uri(cls, uri: str) -> IconAsset | None:
        """Decode a ``data:image/...;base64,`` URI; None if not recognizable."""
        match = DATA_URI_PATTERN.match(uri.strip())
        if not match:
            return None
        try:
            data = base64.b64decode(match.group("payload"), validate=True)
        except (binascii.Error, ValueError):
            return None
        return cls(data=data, mime_type=match.group("mime"))


def placeholder_icon(url: str) -> IconAsset:
    """Icon used when generation fails."""
    return IconAsset(source_url=url)


class ProjectSource(BaseModel):
    """Normalized upload.

    At most one packaging mode is active: with an asset tree the archive is
    packaged and ``markup_text`` is used for analysis only; without one,
    ``markup_text`` is packaged as ``index.html``.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    markup_text: str = Field(default="", description="Markup sent for permission analysis")
    asset_tree: dict[str, ArchiveEntry] | None = Field(
        default=None, description="Uploaded archive entries keyed by relative path"
    )
    entry_point: str | None = Field(default=None, description="Archive path the markup was read from")
    origin_name: str | None = Field(default=None, description="Uploaded file name")

    @property
    def packaging_mode(self) -> Literal["archive", "markup"]:
        return "archive" if self.asset_tree is not None else "markup"

    @property
    def missing_entry_point(self) -> bool:
        return self.asset_tree is not None and self.entry_point is None

    @property
    def file_count(self) -> int:
        if self.asset_tree is None:
            return 1
        return sum(1 for entry in self.asset_tree.values() if not entry.is_dir)


class AssembledProject(BaseModel):
    """A serialized Android project ready for delivery."""

    archive_name: str
    root_folder: str
    data: bytes = Field(repr=False)
    paths: list[str] = Field(default_factory=list)
    asset_count: int = 0
    asset_fallback_used: bool = False
    icon_written: bool = False

    @property
    def size_bytes(self) -> int:
        return len(self.data)

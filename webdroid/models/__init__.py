"""Data models for webdroid."""

from .project import (
    FALLBACK_PERMISSIONS,
    AssembledProject,
    IconAsset,
    PermissionProfile,
    ProjectConfig,
    ProjectSource,
    placeholder_icon,
)
from .session import BuildSession, Stage

__all__ = [
    "FALLBACK_PERMISSIONS",
    "AssembledProject",
    "IconAsset",
    "PermissionProfile",
    "ProjectConfig",
    "ProjectSource",
    "placeholder_icon",
    "BuildSession",
    "Stage",
]

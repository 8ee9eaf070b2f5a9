"""Permission inference service."""

from .service import PermissionInferenceService

__all__ = ["PermissionInferenceService"]

"""Services package for webdroid."""

from .assembly import ProjectAssembler
from .icon import IconGenerationService
from .ingestion import IngestionService
from .permissions import PermissionInferenceService

__all__ = [
    "IngestionService",
    "PermissionInferenceService",
    "IconGenerationService",
    "ProjectAssembler",
]

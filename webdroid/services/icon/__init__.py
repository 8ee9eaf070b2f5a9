"""Icon generation service."""

from .service import IconGenerationService

__all__ = ["IconGenerationService"]

"""Source ingestion service."""

from .service import IngestionOutput, IngestionService

__all__ = ["IngestionOutput", "IngestionService"]

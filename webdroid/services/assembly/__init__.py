"""Project assembly service."""

from .service import ProjectAssembler

__all__ = ["ProjectAssembler"]

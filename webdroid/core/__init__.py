"""Core infrastructure components for webdroid."""

from .config import Config, get_config
from .exceptions import (
    AgentError,
    ArchiveError,
    AssemblyError,
    PipelineError,
    ServiceError,
    UnsupportedFileTypeError,
    ValidationError,
    WebdroidError,
)
from .logging import get_logger, setup_logging
from .types import ServiceResult

__all__ = [
    "Config",
    "get_config",
    "AgentError",
    "ArchiveError",
    "AssemblyError",
    "PipelineError",
    "ServiceError",
    "UnsupportedFileTypeError",
    "ValidationError",
    "WebdroidError",
    "get_logger",
    "setup_logging",
    "ServiceResult",
]

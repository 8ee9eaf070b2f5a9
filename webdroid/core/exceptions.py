"""
Custom exception hierarchy for webdroid.

All exceptions inherit from WebdroidError to enable consistent error handling
across the pipeline. Each exception type includes context for debugging and logging.

Failures of the AI-backed stages are not represented here: the inference and
icon services recover from them locally and report the cause through
``ServiceResult.degraded``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class WebdroidError(Exception):
    """Base exception for all webdroid errors."""

    message: str
    context: dict[str, Any] = field(default_factory=dict)
    cause: Exception | None = None

    def __str__(self) -> str:
        ctx = f" | context: {self.context}" if self.context else ""
        cause = f" | caused by: {self.cause}" if self.cause else ""
        return f"{self.message}{ctx}{cause}"


@dataclass
class ValidationError(WebdroidError):
    """Raised when input validation fails."""

    field_name: str | None = None
    expected_type: str | None = None
    actual_value: Any = None

    def __str__(self) -> str:
        base = super().__str__()
        if self.field_name:
            return f"Validation failed for '{self.field_name}': {base}"
        return f"Validation failed: {base}"


@dataclass
class UnsupportedFileTypeError(ValidationError):
    """Raised when an upload is neither a markup file nor a zip archive."""

    file_name: str = ""
    extension: str = ""

    def __post_init__(self) -> None:
        self.field_name = "file_name"
        self.actual_value = self.file_name


@dataclass
class ServiceError(WebdroidError):
    """Raised when a service operation fails."""

    service_name: str = ""
    operation: str = ""
    retryable: bool = False

    def __str__(self) -> str:
        base = super().__str__()
        retry_hint = " (retryable)" if self.retryable else " (non-retryable)"
        return f"[{self.service_name}.{self.operation}]{retry_hint}: {base}"


@dataclass
class ArchiveError(ServiceError):
    """Raised when archive bytes cannot be read or written."""

    def __post_init__(self) -> None:
        self.service_name = "archive"


@dataclass
class AssemblyError(ServiceError):
    """Raised when a project cannot be assembled.

    Fatal for the build attempt: no archive is produced.
    """

    app_name: str = ""

    def __post_init__(self) -> None:
        self.service_name = "assembly"


@dataclass
class AssetMergeError(ServiceError):
    """Raised when a single uploaded asset cannot be copied into the project."""

    entry_path: str = ""

    def __post_init__(self) -> None:
        self.service_name = "assembly"
        self.operation = "merge_assets"


@dataclass
class PipelineError(WebdroidError):
    """Raised when pipeline orchestration fails."""

    stage: str = ""
    session_id: str = ""

    def __str__(self) -> str:
        base = super().__str__()
        return f"Pipeline error at stage '{self.stage}' (session: {self.session_id}): {base}"


@dataclass
class StageTransitionError(PipelineError):
    """Raised when a wizard transition is attempted without the data it needs."""

    target_stage: str = ""

    def __str__(self) -> str:
        return f"Cannot move from '{self.stage}' to '{self.target_stage}': {self.message}"


@dataclass
class AgentError(ServiceError):
    """Raised when an LLM agent operation fails."""

    agent_name: str = ""
    prompt_hash: str = ""

    def __post_init__(self) -> None:
        self.service_name = "agent"

    def __str__(self) -> str:
        base = super().__str__()
        return f"[Agent: {self.agent_name}] {base}"

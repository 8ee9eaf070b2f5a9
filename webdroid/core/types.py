"""
Core type definitions for webdroid.

Provides the result type returned by every service so callers can tell a
genuine result from a fallback without inspecting logs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """Result wrapper for service operations.

    Provides a consistent return type that includes success/failure status,
    the result data, and any errors or warnings. A degraded result is a
    success whose data is a fixed fallback; ``error`` then holds the cause.
    """

    success: bool
    data: T | None = None
    error: str | None = None
    warnings: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    fallback_used: bool = False
    duration_ms: float = 0.0

    @classmethod
    def ok(cls, data: T, **metadata: Any) -> ServiceResult[T]:
        """Create a successful result."""
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def fail(cls, error: str, **metadata: Any) -> ServiceResult[T]:
        """Create a failed result."""
        return cls(success=False, error=error, metadata=metadata)

    @classmethod
    def with_warnings(cls, data: T, warnings: list[str], **metadata: Any) -> ServiceResult[T]:
        """Create a successful result with warnings."""
        return cls(success=True, data=data, warnings=warnings, metadata=metadata)

    @classmethod
    def degraded(cls, data: T, cause: str, **metadata: Any) -> ServiceResult[T]:
        """Create a successful result carrying fallback data."""
        return cls(
            success=True,
            data=data,
            error=cause,
            warnings=[f"Fallback used: {cause}"],
            metadata=metadata,
            fallback_used=True,
        )

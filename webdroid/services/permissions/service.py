"""
Permission Inference Service.

Asks the permission analyst agent which Android permissions a web app needs.
Inference is best-effort: any failure degrades to a fixed, safe profile.
"""

from __future__ import annotations

import time

from ...agents import AgentContext, PermissionAnalysisInput, PermissionAnalystAgent
from ...core.config import AnalysisConfig, get_config
from ...core.logging import get_logger
from ...core.types import ServiceResult
from ...models.project import FALLBACK_PERMISSIONS, PermissionProfile

logger = get_logger(__name__)

EMPTY_SOURCE_MARKER = "GENERIC_WEB_APP"


class PermissionInferenceService:
    """Service mapping markup to a ``PermissionProfile``."""

    def __init__(
        self,
        agent: PermissionAnalystAgent | None = None,
        config: AnalysisConfig | None = None,
    ) -> None:
        self.agent = agent or PermissionAnalystAgent()
        self.config = config or get_config().analysis

    def truncate(self, markup_text: str) -> str:
        """Bounded prefix of the markup sent to the model."""
        return (markup_text or EMPTY_SOURCE_MARKER)[: self.config.max_source_chars]

    async def infer(
        self,
        markup_text: str,
        session_id: str = "adhoc",
    ) -> ServiceResult[PermissionProfile]:
        """Infer permissions for the given markup.

        Never raises. When the agent fails for any reason the result is
        ``ServiceResult.degraded`` holding ``FALLBACK_PERMISSIONS``.

        Args:
            markup_text: Markup to analyze; empty text is analyzed as a generic web app
            session_id: Session identifier for logging

        Returns:
            ServiceResult containing the inferred or fallback profile
        """
        start_time = time.perf_counter()
        source_text = self.truncate(markup_text)

        logger.info(
            "Starting permission inference",
            source_chars=len(markup_text or ""),
            sent_chars=len(source_text),
        )

        try:
            response = await self.agent.invoke(
                PermissionAnalysisInput(
                    source_text=source_text,
                    max_chars=self.config.max_source_chars,
                ),
                AgentContext(session_id=session_id, stage="analyze"),
            )
            if response.success and response.output is not None:
                cause = None
            else:
                cause = response.error or "Agent returned no output"
        except Exception as e:
            response = None
            cause = f"{type(e).__name__}: {e}"

        duration_ms = (time.perf_counter() - start_time) * 1000

        if cause is not None:
            logger.warning(
                "Permission inference failed, using default permissions",
                cause=cause,
                duration_ms=duration_ms,
            )
            return ServiceResult.degraded(FALLBACK_PERMISSIONS, cause, duration_ms=duration_ms)

        profile = response.output
        logger.info(
            "Permission inference completed",
            permissions=profile.declared_permissions(),
            duration_ms=duration_ms,
        )
        return ServiceResult.ok(
            profile,
            duration_ms=duration_ms,
            total_tokens=response.total_tokens,
            model=response.model_used,
        )

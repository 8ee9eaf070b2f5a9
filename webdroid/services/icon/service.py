"""
Icon Generation Service.

Produces the launcher icon from the app name and description. Fails closed:
when generation fails the result is a placeholder that references a remote
image instead of raising.
"""

from __future__ import annotations

import io
import time

from PIL import Image, UnidentifiedImageError

from ...agents import AgentContext, IconDesignerAgent
from ...core.config import AnalysisConfig, get_config
from ...core.exceptions import ValidationError
from ...core.logging import get_logger
from ...core.types import ServiceResult
from ...models.project import IconAsset, placeholder_icon

logger = get_logger(__name__)

DEFAULT_ICON_MIME_TYPE = "image/png"


def sniff_mime_type(data: bytes) -> str:
    """MIME type of an encoded image, defaulting to PNG when unrecognized."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            return Image.MIME.get(image.format, DEFAULT_ICON_MIME_TYPE)
    except (UnidentifiedImageError, OSError):
        return DEFAULT_ICON_MIME_TYPE


class IconGenerationService:
    """Service wrapping the icon designer agent."""

    def __init__(
        self,
        agent: IconDesignerAgent | None = None,
        config: AnalysisConfig | None = None,
    ) -> None:
        self.agent = agent or IconDesignerAgent()
        self.config = config or get_config().analysis

    async def generate(
        self,
        app_name: str,
        description: str,
        session_id: str = "adhoc",
    ) -> ServiceResult[IconAsset]:
        """Generate a launcher icon.

        Args:
            app_name: Application name used in the prompt
            description: Free-text description of the app; must not be empty
            session_id: Session identifier for logging

        Returns:
            ServiceResult containing the generated icon, or a degraded result
            holding the placeholder icon

        Raises:
            ValidationError: If ``description`` is empty.
        """
        if not description or not description.strip():
            raise ValidationError(
                message="A description is required to generate an icon",
                field_name="description",
            )

        start_time = time.perf_counter()
        try:
            data = await self.agent.generate(
                app_name,
                description,
                AgentContext(session_id=session_id, stage="design"),
            )
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.warning(
                "Icon generation failed, using placeholder",
                cause=str(e),
                duration_ms=duration_ms,
            )
            return ServiceResult.degraded(
                placeholder_icon(self.config.placeholder_icon_url),
                str(e),
                duration_ms=duration_ms,
            )

        duration_ms = (time.perf_counter() - start_time) * 1000
        mime_type = sniff_mime_type(data)
        logger.info("Icon generated", size_bytes=len(data), mime_type=mime_type, duration_ms=duration_ms)
        return ServiceResult.ok(IconAsset(data=data, mime_type=mime_type), duration_ms=duration_ms)

"""
Stage runner for build sessions.

Each method performs one wizard stage on a session snapshot and returns the
next snapshot. Stages of one session run strictly in sequence.
"""

from __future__ import annotations

from pathlib import Path

from ..archive import ArchiveCodec, ZipArchiveCodec
from ..core.exceptions import StageTransitionError
from ..core.logging import bind_context, get_logger
from ..core.types import ServiceResult
from ..models.project import AssembledProject
from ..models.session import BuildSession, Stage
from ..services.assembly import ProjectAssembler
from ..services.icon import IconGenerationService
from ..services.ingestion import IngestionOutput, IngestionService
from ..services.permissions import PermissionInferenceService

logger = get_logger(__name__)


class BuildPipeline:
    """Runs the upload, analyze, design and build stages."""

    def __init__(
        self,
        codec: ArchiveCodec | None = None,
        ingestion: IngestionService | None = None,
        permissions: PermissionInferenceService | None = None,
        icons: IconGenerationService | None = None,
        assembler: ProjectAssembler | None = None,
    ) -> None:
        codec = codec or ZipArchiveCodec()
        self.ingestion = ingestion or IngestionService(codec)
        self.permissions = permissions or PermissionInferenceService()
        self.icons = icons or IconGenerationService()
        self.assembler = assembler or ProjectAssembler(codec)

    def _adopt(self, session: BuildSession, result: ServiceResult[IngestionOutput], adopt_app_name: bool) -> BuildSession:
        output = result.data
        updated = session.with_source(output.source, result.warnings)
        if adopt_app_name:
            updated = updated.with_config(app_name=output.suggested_app_name)
        return updated

    async def upload(
        self,
        session: BuildSession,
        file_name: str,
        data: bytes,
        adopt_app_name: bool = True,
    ) -> BuildSession:
        """Ingest an uploaded file, replacing any previous source.

        Raises:
            UnsupportedFileTypeError: If the file type is not supported; the
                session is left unchanged.
            ArchiveError: If an archive cannot be read.
        """
        bind_context(session_id=session.session_id)
        result = await self.ingestion.ingest(file_name, data)
        return self._adopt(session, result, adopt_app_name)

    async def upload_path(self, session: BuildSession, path: Path, adopt_app_name: bool = True) -> BuildSession:
        bind_context(session_id=session.session_id)
        result = await self.ingestion.ingest_path(path)
        return self._adopt(session, result, adopt_app_name)

    def paste(self, session: BuildSession, markup: str) -> BuildSession:
        """Use pasted markup; any uploaded archive is discarded."""
        return session.with_source(self.ingestion.ingest_text(markup))

    async def analyze(self, session: BuildSession) -> BuildSession:
        """Infer permissions and move to the analyze stage.

        Raises:
            StageTransitionError: If no source has been provided.
        """
        bind_context(session_id=session.session_id)
        if session.source is None:
            raise StageTransitionError(
                message="no source has been uploaded",
                stage=session.stage.label,
                target_stage=Stage.ANALYZE.label,
                session_id=session.session_id,
            )

        result = await self.permissions.infer(session.source.markup_text, session.session_id)
        updated = session.with_permissions(result.data, defaulted=result.fallback_used)
        if result.fallback_used:
            logger.warning("Default permissions applied", cause=result.error)
        return updated.go_to(Stage.ANALYZE)

    async def design(self, session: BuildSession) -> BuildSession:
        """Generate the icon and move to the design stage.

        Only the icon changes; the permission profile is kept.

        Raises:
            ValidationError: If the project has no description.
            StageTransitionError: If permissions have not been analyzed.
        """
        bind_context(session_id=session.session_id)
        session.require(Stage.DESIGN)

        result = await self.icons.generate(
            session.config.app_name,
            session.config.description,
            session.session_id,
        )
        return session.with_icon(result.data, defaulted=result.fallback_used).go_to(Stage.DESIGN)

    async def build(self, session: BuildSession) -> tuple[BuildSession, AssembledProject]:
        """Assemble the project archive.

        Raises:
            StageTransitionError: If permissions have not been analyzed.
            AssemblyError: If the project cannot be assembled.
        """
        bind_context(session_id=session.session_id)
        building = session.go_to(Stage.BUILD)
        project = await self.assembler.assemble(
            building.config,
            building.permissions,
            building.source,
            building.icon,
        )
        return building, project

"""
Main pipeline orchestration for webdroid.

Runs upload, analyze, design and build in order as a Prefect flow and
delivers the archive to the output directory.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from prefect import flow, get_run_logger
from pydantic import BaseModel, Field

from ..core.exceptions import WebdroidError
from ..core.logging import bind_context, clear_context
from ..models.project import PermissionProfile, ProjectConfig
from ..models.session import BuildSession
from .tasks import assemble_project, deliver_project, generate_icon, infer_permissions, ingest_source


class BuildRequest(BaseModel):
    """Parameters of one build."""

    source_path: Path = Field(description="HTML file or zip archive to wrap")
    app_name: str | None = Field(default=None, description="Overrides the name derived from the file")
    package_name: str = Field(default="com.example.myapp")
    version_name: str = Field(default="1.0.0")
    description: str = Field(default="", description="Used to generate the icon")
    generate_icon: bool = Field(default=True)
    output_dir: Path | None = Field(default=None)


class PipelineResult(BaseModel):
    """Result of a pipeline run."""

    session_id: str
    success: bool
    started_at: datetime
    completed_at: datetime

    archive_path: str | None = None
    archive_name: str | None = None
    file_count: int = 0
    permissions: PermissionProfile | None = None
    permissions_defaulted: bool = False
    icon_written: bool = False
    icon_defaulted: bool = False
    warnings: list[str] = Field(default_factory=list)

    error: str | None = None
    failed_stage: str | None = None


def _now() -> datetime:
    return datetime.now(timezone.utc)


@flow(
    name="webdroid-build",
    description="Wrap a web application into an Android project archive",
    version="1.0.0",
    retries=0,
)
async def webdroid_flow(request: BuildRequest) -> PipelineResult:
    """Execute the complete build pipeline.

    Args:
        request: Build parameters

    Returns:
        PipelineResult describing the delivered archive or the failure
    """
    logger = get_run_logger()
    started_at = _now()
    session = BuildSession(
        config=ProjectConfig(
            package_name=request.package_name,
            version_name=request.version_name,
            description=request.description,
        )
    )
    clear_context()
    bind_context(session_id=session.session_id)
    logger.info(f"Starting build. Session: {session.session_id}")

    stage = "upload"
    try:
        session = await ingest_source(session, request.source_path, request.app_name is None)
        if request.app_name is not None:
            session = session.with_config(app_name=request.app_name)

        stage = "analyze"
        session = await infer_permissions(session)

        stage = "design"
        if request.generate_icon and request.description.strip():
            session = await generate_icon(session)
        else:
            logger.info("Skipping icon generation")

        stage = "build"
        session, project = await assemble_project(session)
        archive_path = await deliver_project(session, project, request.output_dir)

    except WebdroidError as e:
        logger.error(f"Build failed at stage '{stage}': {e}")
        return PipelineResult(
            session_id=session.session_id,
            success=False,
            started_at=started_at,
            completed_at=_now(),
            permissions=session.permissions,
            warnings=list(session.warnings),
            error=str(e),
            failed_stage=stage,
        )

    return PipelineResult(
        session_id=session.session_id,
        success=True,
        started_at=started_at,
        completed_at=_now(),
        archive_path=archive_path,
        archive_name=project.archive_name,
        file_count=len(project.paths),
        permissions=session.permissions,
        permissions_defaulted=session.permissions_defaulted,
        icon_written=project.icon_written,
        icon_defaulted=session.icon_defaulted,
        warnings=list(session.warnings),
    )


async def run_pipeline(**kwargs: object) -> PipelineResult:
    """Build a project from keyword arguments matching ``BuildRequest``."""
    return await webdroid_flow(BuildRequest(**kwargs))

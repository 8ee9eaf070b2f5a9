"""
Prefect tasks for the webdroid pipeline.

Each task wraps one stage of ``BuildPipeline`` so the flow gets Prefect's
logging and state tracking.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from prefect import task
from prefect.cache_policies import NO_CACHE
from prefect.logging import get_run_logger

from ..core.config import get_config
from ..models.project import AssembledProject
from ..models.session import BuildSession
from ..storage import LocalStorageBackend
from .stages import BuildPipeline


@lru_cache(maxsize=1)
def get_pipeline() -> BuildPipeline:
    """Get the shared stage runner."""
    return BuildPipeline()


def get_storage(output_dir: Path | None = None) -> LocalStorageBackend:
    """Get storage backend."""
    return LocalStorageBackend(output_dir or get_config().storage.base_path)


@task(name="ingest_source", description="Ingest the uploaded web source", cache_policy=NO_CACHE)
async def ingest_source(session: BuildSession, source_path: Path, adopt_app_name: bool) -> BuildSession:
    logger = get_run_logger()
    logger.info(f"Ingesting {source_path.name}")
    updated = await get_pipeline().upload_path(session, source_path, adopt_app_name)
    for warning in updated.warnings:
        logger.warning(warning)
    return updated


@task(name="infer_permissions", description="Infer Android permissions from the markup", cache_policy=NO_CACHE)
async def infer_permissions(session: BuildSession) -> BuildSession:
    logger = get_run_logger()
    updated = await get_pipeline().analyze(session)
    if updated.permissions_defaulted:
        logger.warning("Permission analysis failed; default permissions applied")
    logger.info(f"Permissions: {', '.join(updated.permissions.declared_permissions())}")
    return updated


@task(name="generate_icon", description="Generate the launcher icon", cache_policy=NO_CACHE)
async def generate_icon(session: BuildSession) -> BuildSession:
    logger = get_run_logger()
    updated = await get_pipeline().design(session)
    if updated.icon_defaulted:
        logger.warning("Icon generation failed; placeholder used")
    return updated


@task(name="assemble_project", description="Assemble the Android project archive", cache_policy=NO_CACHE)
async def assemble_project(session: BuildSession) -> tuple[BuildSession, AssembledProject]:
    logger = get_run_logger()
    updated, project = await get_pipeline().build(session)
    logger.info(f"Assembled {project.archive_name} ({len(project.paths)} files)")
    return updated, project


@task(name="deliver_project", description="Write the archive and build report", retries=2, retry_delay_seconds=1, cache_policy=NO_CACHE)
async def deliver_project(session: BuildSession, project: AssembledProject, output_dir: Path | None = None) -> str:
    storage = get_storage(output_dir)
    key = await storage.store_bytes(
        project.archive_name,
        project.data,
        {
            "app_name": session.config.app_name,
            "package_name": session.config.package_name,
            "version_name": session.config.version_name,
            "session_id": session.session_id,
            "files": len(project.paths),
            "permissions_defaulted": session.permissions_defaulted,
            "icon_written": project.icon_written,
        },
    )
    await storage.store_model(f"{project.root_folder}_permissions.json", session.permissions)
    return str(storage.get_local_path(key))

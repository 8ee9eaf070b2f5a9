"""Pipeline orchestration for webdroid."""

from .pipeline import BuildRequest, PipelineResult, run_pipeline, webdroid_flow
from .stages import BuildPipeline

__all__ = [
    "BuildPipeline",
    "BuildRequest",
    "PipelineResult",
    "run_pipeline",
    "webdroid_flow",
]

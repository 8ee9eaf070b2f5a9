"""Android project templates."""

from .renderer import (
    render_build_gradle,
    render_github_workflow,
    render_layout,
    render_main_activity,
    render_manifest,
)

__all__ = [
    "render_build_gradle",
    "render_github_workflow",
    "render_layout",
    "render_main_activity",
    "render_manifest",
]

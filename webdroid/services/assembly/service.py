"""
Project Assembly Service.

Builds the Android project tree from the rendered templates, the uploaded web
assets and the launcher icon, and serializes it into a single archive.
"""

from __future__ import annotations

import asyncio
import io
import time

from PIL import Image, UnidentifiedImageError

from ...archive import ArchiveCodec, FileTree
from ...core.config import AssemblyConfig, get_config
from ...core.exceptions import AssemblyError, AssetMergeError, WebdroidError
from ...core.logging import get_logger
from ...models.project import (
    AssembledProject,
    IconAsset,
    PermissionProfile,
    ProjectConfig,
    ProjectSource,
)
from ..templates import (
    render_build_gradle,
    render_github_workflow,
    render_layout,
    render_main_activity,
    render_manifest,
)

logger = get_logger(__name__)

ASSET_ERROR_HTML = "<h1>Error loading assets</h1>"
RECOGNIZED_ICON_FORMATS = ("PNG", "JPEG", "WEBP")


class ProjectAssembler:
    """Service assembling the downloadable Android project.

    Templates, icon and CI workflow are mandatory: a failure there aborts the
    build with ``AssemblyError``. Asset copying is best-effort and degrades to
    a single diagnostic ``index.html``.
    """

    def __init__(self, codec: ArchiveCodec, config: AssemblyConfig | None = None) -> None:
        """Initialize the assembler.

        Args:
            codec: Archive codec used to serialize the project
            config: Assembly settings. Uses global config if not provided.
        """
        self.codec = codec
        self.config = config or get_config().assembly

    def _write_sources(
        self,
        main: FileTree,
        app: FileTree,
        config: ProjectConfig,
        permissions: PermissionProfile,
    ) -> None:
        main.file("AndroidManifest.xml", render_manifest(config, permissions))
        main.folder(f"java/{config.java_package_path}").file(
            "MainActivity.java", render_main_activity(config, permissions)
        )
        main.folder("res/layout").file("activity_main.xml", render_layout())
        app.file("build.gradle", render_build_gradle(config))

    def _copy_assets(self, assets: FileTree, source: ProjectSource) -> int:
        """Copy every file entry of the asset tree verbatim.

        Raises:
            AssetMergeError: On the first entry that cannot be read.
        """
        copied = 0
        for path, entry in (source.asset_tree or {}).items():
            if entry.is_dir:
                continue
            if not entry.is_safe:
                logger.warning("Skipping asset outside the assets folder", path=path)
                continue
            try:
                assets.file(path, entry.read_bytes())
            except Exception as e:
                raise AssetMergeError(
                    message=f"Could not copy asset '{path}'",
                    entry_path=path,
                    cause=e,
                )
            copied += 1
        return copied

    def _populate_assets(self, assets: FileTree, source: ProjectSource) -> tuple[int, bool]:
        """Fill ``assets/`` and return (file count, whether the fallback was used)."""
        if source.asset_tree is None:
            assets.file("index.html", source.markup_text)
            return 1, False

        try:
            return self._copy_assets(assets, source), False
        except AssetMergeError as e:
            discarded = assets.clear()
            logger.error(
                "Asset merge failed, writing diagnostic index.html",
                error=str(e),
                discarded=discarded,
            )
            fallback = source.markup_text if source.entry_point else ASSET_ERROR_HTML
            assets.file("index.html", fallback or ASSET_ERROR_HTML)
            return 1, True

    def _render_icon(self, icon: IconAsset) -> bytes | None:
        """Normalize an embedded icon to a square PNG.

        Returns:
            PNG bytes, or None when the icon has no recognizable image data.
        """
        if not icon.is_embedded:
            return None
        size = self.config.icon_size_px
        buffer = io.BytesIO()
        try:
            with Image.open(io.BytesIO(icon.data)) as image:
                if image.format not in RECOGNIZED_ICON_FORMATS:
                    logger.warning("Unsupported icon format, skipping icon", format=image.format)
                    return None
                # Pillow decodes lazily; truncated payloads only fail here
                image.load()
                resized = image.convert("RGBA").resize((size, size), Image.Resampling.LANCZOS)
            resized.save(buffer, format="PNG", optimize=True)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            logger.warning(
                "Icon data is not a usable image, skipping icon",
                mime_type=icon.mime_type,
                error=str(e),
            )
            return None
        return buffer.getvalue()

    async def assemble(
        self,
        config: ProjectConfig,
        permissions: PermissionProfile,
        source: ProjectSource,
        icon: IconAsset | None = None,
    ) -> AssembledProject:
        """Assemble and serialize the Android project.

        Args:
            config: Validated project settings
            permissions: Permission profile driving the manifest and activity
            source: Uploaded web source
            icon: Optional launcher icon; placeholders are not written

        Returns:
            AssembledProject holding the archive bytes

        Raises:
            AssemblyError: If rendering, icon processing or serialization fails.
        """
        start_time = time.perf_counter()
        root = FileTree(config.folder_name)
        app = root.folder("app")
        main = app.folder("src/main")

        logger.info(
            "Assembling project",
            app_name=config.app_name,
            package_name=config.package_name,
            packaging_mode=source.packaging_mode,
        )

        try:
            self._write_sources(main, app, config, permissions)

            asset_count, asset_fallback = self._populate_assets(main.folder("assets"), source)

            icon_png = self._render_icon(icon) if icon is not None else None
            if icon_png is not None:
                mipmap = main.folder(f"res/mipmap-{self.config.icon_density}")
                mipmap.file("ic_launcher.png", icon_png)
                mipmap.file("ic_launcher_round.png", icon_png)

            root.folder(".github/workflows").file("build_apk.yml", render_github_workflow(config))

            files = root.to_dict()
            data = await asyncio.to_thread(self.codec.write_archive, files)
        except WebdroidError as e:
            raise AssemblyError(
                message=f"Project assembly failed: {e.message}",
                operation="assemble",
                app_name=config.app_name,
                cause=e,
            )
        except Exception as e:
            raise AssemblyError(
                message=f"Project assembly failed: {e}",
                operation="assemble",
                app_name=config.app_name,
                cause=e,
            )

        project = AssembledProject(
            archive_name=config.archive_name(self.config.archive_suffix),
            root_folder=config.folder_name,
            data=data,
            paths=sorted(files),
            asset_count=asset_count,
            asset_fallback_used=asset_fallback,
            icon_written=icon_png is not None,
        )

        logger.info(
            "Project assembled",
            archive_name=project.archive_name,
            files=len(project.paths),
            assets=asset_count,
            size_bytes=project.size_bytes,
            duration_ms=(time.perf_counter() - start_time) * 1000,
        )
        return project

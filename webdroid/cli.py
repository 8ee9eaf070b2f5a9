"""
webdroid CLI.

Command-line interface for wrapping web applications into Android projects.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError as SchemaError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .core.config import get_config
from .core.exceptions import WebdroidError
from .core.logging import setup_logging
from .models.project import PermissionProfile, ProjectConfig

app = typer.Typer(
    name="webdroid",
    help="Wrap an HTML/JS web application into a buildable Android project",
    add_completion=False,
)

console = Console()


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        from . import __version__
        console.print(f"webdroid v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """webdroid: web app to Android project generator."""
    pass


def _permissions_table(profile: PermissionProfile, defaulted: bool) -> Table:
    title = "Permissions (defaults)" if defaulted else "Permissions"
    table = Table(title=title)
    table.add_column("Permission", style="cyan")
    for name in profile.declared_permissions():
        table.add_row(name)
    return table


@app.command()
def build(
    source: Path = typer.Argument(
        ...,
        help="HTML file (.html/.htm) or zip archive of the web app",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
    app_name: Optional[str] = typer.Option(
        None,
        "--name",
        "-n",
        help="App name (defaults to one derived from the file name)",
    ),
    package_name: str = typer.Option(
        "com.example.myapp",
        "--package",
        "-p",
        help="Package name (e.g., com.example.myapp)",
    ),
    version_name: str = typer.Option(
        "1.0.0",
        "--version-name",
        help="Version name of the app",
    ),
    description: str = typer.Option(
        "",
        "--description",
        "-d",
        help="App description, used to generate the icon",
    ),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Directory the archive is written to",
    ),
    no_icon: bool = typer.Option(
        False,
        "--no-icon",
        help="Skip icon generation",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable verbose logging",
    ),
) -> None:
    """Build a downloadable Android project archive from a web app."""
    config = get_config()
    if verbose:
        config.log_level = "DEBUG"
    setup_logging(config)

    try:
        ProjectConfig(
            app_name=app_name or "MyApp",
            package_name=package_name,
            version_name=version_name,
            description=description,
        )
    except SchemaError as e:
        console.print(f"[red]Invalid project settings:[/red] {escape(str(e))}")
        raise typer.Exit(2)

    console.print(Panel.fit(
        "[bold blue]webdroid[/bold blue]\n"
        "Web App → Permissions → Icon → Android Project",
        border_style="blue",
    ))
    console.print(f"\n[bold]Source:[/bold] {source}")
    console.print(f"[bold]Package:[/bold] {package_name}\n")

    async def run_async() -> None:
        from .orchestration import run_pipeline

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Building project...", total=None)
            result = await run_pipeline(
                source_path=source,
                app_name=app_name,
                package_name=package_name,
                version_name=version_name,
                description=description,
                generate_icon=not no_icon,
                output_dir=output_dir,
            )
            progress.update(task, completed=True)

        for warning in result.warnings:
            console.print(f"[yellow]Warning:[/yellow] {escape(warning)}")

        if not result.success:
            console.print("\n[bold red]✗ Build failed![/bold red]")
            console.print(f"Error: {escape(result.error or '')}")
            if result.failed_stage:
                console.print(f"Failed at: {result.failed_stage}")
            raise typer.Exit(1)

        console.print("\n[bold green]✓ Project generated![/bold green]\n")
        if result.permissions is not None:
            console.print(_permissions_table(result.permissions, result.permissions_defaulted))

        table = Table(title="Build Results")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("Session", result.session_id)
        table.add_row("Duration", f"{(result.completed_at - result.started_at).total_seconds():.1f}s")
        table.add_row("Files", str(result.file_count))
        table.add_row("Icon", "generated" if result.icon_written else ("placeholder" if result.icon_defaulted else "none"))
        console.print(table)

        console.print(f"\n[bold]Archive:[/bold] {result.archive_path}")
        console.print("\nNext steps:")
        console.print("  1. Unzip the archive and push the folder to a GitHub repository")
        console.print("  2. The 'Build Android APK' workflow uploads a debug APK artifact")

    asyncio.run(run_async())


@app.command()
def analyze(
    source: Path = typer.Argument(
        ...,
        help="HTML file or zip archive to analyze",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
) -> None:
    """Infer the Android permissions a web app needs (no project is built)."""
    setup_logging(get_config())

    async def run_async() -> None:
        from .orchestration import BuildPipeline
        from .models.session import BuildSession

        pipeline = BuildPipeline()
        try:
            session = await pipeline.upload_path(BuildSession(), source)
        except WebdroidError as e:
            console.print(f"[red]{escape(str(e))}[/red]")
            raise typer.Exit(1)

        for warning in session.warnings:
            console.print(f"[yellow]Warning:[/yellow] {escape(warning)}")

        console.print("  [dim]→ Analyzing source...[/dim]")
        session = await pipeline.analyze(session)

        console.print(_permissions_table(session.permissions, session.permissions_defaulted))
        console.print(f"\n[bold]Reasoning:[/bold] {escape(session.permissions.reasoning)}")

    asyncio.run(run_async())


@app.command(name="list")
def list_archives(
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Directory to list (defaults to the configured output path)",
    ),
) -> None:
    """List delivered project archives."""
    from .storage import LocalStorageBackend

    storage = LocalStorageBackend(output_dir or get_config().storage.base_path)

    async def run_async() -> None:
        keys = [key for key in await storage.list_keys() if key.endswith(".zip")]
        if not keys:
            console.print("[dim]No archives found[/dim]")
            return

        table = Table(title="Delivered Archives")
        table.add_column("Archive", style="cyan")
        table.add_column("Package")
        table.add_column("Size", justify="right")
        table.add_column("SHA-256")
        for key in keys:
            meta = await storage.get_metadata(key)
            table.add_row(
                key,
                str(meta.get("package_name", "")),
                f"{meta.get('size_bytes', 0):,}",
                str(meta.get("hash", ""))[:16],
            )
        console.print(table)

    asyncio.run(run_async())


@app.command()
def config() -> None:
    """Show the current configuration."""
    cfg = get_config()

    table = Table(title="Current Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Log Level", cfg.log_level)
    table.add_row("Output Path", str(cfg.storage.base_path))
    table.add_row("Agent Provider", cfg.agent.provider)
    table.add_row("Analysis Model", cfg.agent.model)
    table.add_row("Image Model", cfg.agent.image_model)
    table.add_row("Max Source Chars", str(cfg.analysis.max_source_chars))
    table.add_row("Icon Bucket", f"mipmap-{cfg.assembly.icon_density} ({cfg.assembly.icon_size_px}px)")

    console.print(table)

    console.print("\n[dim]Configure via environment variables:[/dim]")
    console.print("  WEBDROID_LOG_LEVEL, WEBDROID_AGENT_PROVIDER, WEBDROID_AGENT_MODEL,")
    console.print("  WEBDROID_IMAGE_MODEL, WEBDROID_OUTPUT_PATH, WEBDROID_MAX_SOURCE_CHARS")
    console.print("  OPENAI_API_KEY, ANTHROPIC_API_KEY, AZURE_OPENAI_API_KEY")


def run() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    run()

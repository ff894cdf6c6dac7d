"""
clipscribe.cli - Typer CLI entry point.

Provides the upload command plus config and environment helpers.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from clipscribe import __version__
from clipscribe.config import (
    CONFIG_FILENAME,
    ClipscribeConfig,
    create_default_config,
    load_config,
    write_config,
)
from clipscribe.exceptions import ClipscribeError, ConfigError, DependencyError
from clipscribe.logging import configure_logging
from clipscribe.media import VideoAsset
from clipscribe.pipeline import STATUS_MESSAGES, PipelineResult, PipelineStatus, UploadPipeline
from clipscribe.submit import RemoteSubmissionClient
from clipscribe.transcode import MediaTranscoder, shared_engine
from clipscribe.utils import format_size

app = typer.Typer(
    name="clipscribe",
    help="Extract audio from a video, upload it, and request its transcription.",
    add_completion=False,
)
console = Console()

STATUS_STYLES = {
    PipelineStatus.CONVERTING: "cyan",
    PipelineStatus.UPLOADING: "cyan",
    PipelineStatus.TRANSCRIBING: "cyan",
    PipelineStatus.SUCCEEDED: "green",
    PipelineStatus.FAILED: "red",
}


def version_callback(value: bool) -> None:
    if value:
        console.print(f"clipscribe {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Clipscribe - video to transcription upload pipeline."""
    pass


def _load_config_or_exit(config_path: Path | None) -> ClipscribeConfig:
    try:
        return load_config(config_path)
    except (FileNotFoundError, ConfigError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


def print_status(status: PipelineStatus) -> None:
    style = STATUS_STYLES.get(status, "dim")
    console.print(f"[{style}]{STATUS_MESSAGES[status]}[/{style}]")


async def run_upload(
    config: ClipscribeConfig,
    video: VideoAsset,
    prompt: str | None,
) -> PipelineResult | None:
    """Run one pipeline against the configured service and shared engine."""
    transcoder = MediaTranscoder(shared_engine(config.ffmpeg_binary))
    async with RemoteSubmissionClient(config.api_base_url, timeout=config.request_timeout) as client:
        pipeline = UploadPipeline(transcoder, client, on_status=print_status)
        return await pipeline.start(video, prompt)


@app.command("upload")
def upload(
    video_path: Path = typer.Argument(..., help="MP4 video to transcribe"),
    prompt: str | None = typer.Option(
        None,
        "--prompt",
        "-p",
        help="Keywords mentioned in the video, separated by commas",
    ),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Path to clipscribe.yaml"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
) -> None:
    """Convert a video to audio, upload it, and request its transcription."""
    configure_logging(verbose)
    config = _load_config_or_exit(config_path)

    try:
        video = VideoAsset.from_path(video_path.expanduser())
    except ClipscribeError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[dim]{video.filename} ({format_size(video.size)}) → {config.api_base_url}[/dim]")

    result = asyncio.run(run_upload(config, video, prompt))

    if result is None or not result.ok:
        error = result.error if result else None
        console.print(f"[red]Error: {error or 'pipeline did not start'}[/red]")
        cause = getattr(error, "__cause__", None)
        if isinstance(cause, DependencyError) and cause.install_hint:
            console.print(f"[dim]{cause.install_hint}[/dim]")
        raise typer.Exit(1)

    console.print(f"\n[green]✓[/green] Video id: [bold]{result.resource_id}[/bold]")


@app.command("check")
def check(
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Path to clipscribe.yaml"),
) -> None:
    """Check that FFmpeg is available."""
    from clipscribe.validation import check_ffmpeg

    config = _load_config_or_exit(config_path)

    try:
        info = check_ffmpeg(config.ffmpeg_binary)
    except DependencyError as e:
        console.print(f"[red]Error: {e}[/red]")
        if e.install_hint:
            console.print(f"[dim]{e.install_hint}[/dim]")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] ffmpeg {info['ffmpeg_version']} ({info['ffmpeg_path']})")


@app.command("init")
def init_config(
    path: str = typer.Option(".", "--path", "-d", help="Directory to write clipscribe.yaml in"),
) -> None:
    """Write a default clipscribe.yaml."""
    config_file = Path(path) / CONFIG_FILENAME

    if config_file.exists():
        console.print(f"[red]Error: '{config_file}' already exists[/red]")
        raise typer.Exit(1)

    write_config(create_default_config(), config_file)
    console.print(f"[green]✓[/green] Created {config_file}")


@app.command("config")
def show_config(
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Path to clipscribe.yaml"),
) -> None:
    """Show the resolved configuration."""
    config = _load_config_or_exit(config_path)

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    for key, value in config.model_dump().items():
        table.add_row(key, "-" if value is None else str(value))

    console.print(table)

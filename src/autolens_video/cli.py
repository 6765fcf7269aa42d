import asyncio
import json
import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from ._version import VERSION
from .exceptions import VideoPipelineError

# Lazy load rich to keep startup fast for scripted use
_console = None


def get_console():
    global _console
    if _console is None:
        from rich.console import Console
        _console = Console()
    return _console


def _run(coro):
    """Run a pipeline coroutine, turning pipeline errors into a clean exit."""
    try:
        return asyncio.run(coro)
    except KeyboardInterrupt:
        from .subprocess_manager import cleanup_all_subprocesses
        cleanup_all_subprocesses()
        sys.exit(130)
    except VideoPipelineError as e:
        get_console().print(f"[bold red]❌ {e.user_message}[/]")
        if e.suggestion:
            get_console().print(f"   [dim]{e.suggestion}[/]")
        sys.exit(1)


@click.group()
@click.version_option(version=VERSION)
def cli():
    """AutoLens Video - vehicle marketing video compiler"""
    pass


# =============================================================================
# Transitions
# =============================================================================

@cli.command()
@click.option("--category", default=None, help="Only show one category (cut, fade, slide, zoom, wipe, dissolve)")
@click.option("--style", default=None, help="Only show transitions suitable for a vehicle style")
def transitions(category: Optional[str], style: Optional[str]):
    """List the transition catalog."""
    from rich.table import Table
    from .transitions import get_catalog

    catalog = get_catalog()
    entries = list(catalog)
    if category:
        entries = [t for t in entries if t in catalog.list_by_category(category)]
    if style:
        entries = [t for t in entries if t in catalog.list_suitable_for(style)]

    table = Table(title="Transitions")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Category", style="magenta")
    table.add_column("Duration", justify="right")
    table.add_column("Suitable for", style="green")
    for t in entries:
        table.add_row(t.id, t.display_name, t.category.value, f"{t.default_duration:g}s", t.suitable_for)

    get_console().print(table)


@cli.command()
@click.argument("style")
def recommend(style: str):
    """Show the recommended transition pair for a vehicle style."""
    from .transition_selector import recommended_sequence

    for t in recommended_sequence(style):
        get_console().print(f"  [bold cyan]{t.id}[/] ({t.display_name}, {t.default_duration:g}s)")


@cli.command()
@click.argument("style")
@click.option("--mood", "moods", multiple=True, help="Scene mood tag (repeatable)")
def pacing(style: str, moods: Tuple[str, ...]):
    """Pick transitions from a vehicle style and scene moods."""
    from .transition_selector import optimize_for_pacing

    click.echo(" ".join(optimize_for_pacing(style, list(moods))))


@cli.command()
@click.argument("transition_ids", nargs=-1)
@click.option("--durations", required=True, help="Comma-separated clip durations in seconds")
def validate(transition_ids: Tuple[str, ...], durations: str):
    """Check a transition sequence against clip durations."""
    from .transition_selector import validate_sequence

    try:
        clip_durations = [float(d) for d in durations.split(",") if d.strip()]
    except ValueError:
        raise click.BadParameter("durations must be numbers", param_hint="--durations")

    result = validate_sequence(list(transition_ids), clip_durations)
    if result.is_valid:
        get_console().print("[green]✅ Sequence is valid[/]")
        return
    for error in result.errors:
        get_console().print(f"[red]  • {error}[/]")
    sys.exit(1)


@cli.command()
@click.argument("transition_ids", nargs=-1)
@click.option("--clips", "clip_count", type=int, required=True, help="Number of clips to join")
def graph(transition_ids: Tuple[str, ...], clip_count: int):
    """Print the filter graph for a transition sequence."""
    from .filter_graph import build_graph

    click.echo(build_graph(list(transition_ids), clip_count))


# =============================================================================
# Compilation & post-processing
# =============================================================================

@cli.command()
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--dry-run", is_flag=True, help="Print the ffmpeg command instead of running it")
@click.option("--job-id", default=None, help="Also write a debug log to OUTPUT_DIR/compile_<job-id>.log")
def compile(manifest: Path, dry_run: bool, job_id: Optional[str]):
    """Compile clips and audio described by a JSON manifest."""
    from .compiler import CompilationRequest, VideoCompiler
    from .config import get_settings
    from .ffmpeg_utils import format_command
    from .logger import configure_file_logging, remove_file_logging

    try:
        request = CompilationRequest.from_dict(json.loads(manifest.read_text(encoding="utf-8")))
    except (ValueError, KeyError, TypeError) as e:
        raise click.BadParameter(f"invalid manifest: {e}", param_hint="MANIFEST")

    compiler = VideoCompiler()
    if dry_run:
        try:
            click.echo(format_command(compiler.build_command(request)))
        except VideoPipelineError as e:
            get_console().print(f"[bold red]❌ {e.user_message}[/]")
            sys.exit(1)
        return

    log_file = None
    if job_id:
        log_file = configure_file_logging(get_settings().paths.output_dir, job_id)
        get_console().print(f"[dim]Log: {log_file}[/]", soft_wrap=True)

    try:
        output = _run(compiler.compile(request))
    finally:
        if log_file is not None:
            remove_file_logging(log_file)
    get_console().print(f"🎬 [bold green]{output}[/]", soft_wrap=True)


@cli.command()
@click.argument("video", type=click.Path(exists=True, dir_okay=False))
@click.argument("platform", type=click.Choice(["youtube", "instagram", "tiktok"]))
def optimize(video: str, platform: str):
    """Re-encode a video for a social platform."""
    from .post_processing import PostProcessor

    output = _run(PostProcessor().optimize_for_platform(video, platform))
    get_console().print(f"✅ {output}", soft_wrap=True)


@cli.command()
@click.argument("video", type=click.Path(exists=True, dir_okay=False))
def info(video: str):
    """Show duration, resolution and container of a video."""
    from .post_processing import PostProcessor

    video_info = _run(PostProcessor().extract_info(video))
    click.echo(json.dumps(video_info.to_dict(), indent=2))


@cli.command()
@click.argument("video", type=click.Path(exists=True, dir_okay=False))
@click.argument("watermark_image", type=click.Path(exists=True, dir_okay=False))
@click.option("--position", default="bottom-right",
              type=click.Choice(["top-left", "top-right", "bottom-left", "bottom-right"]))
def watermark(video: str, watermark_image: str, position: str):
    """Overlay a watermark image in one corner."""
    from .post_processing import PostProcessor

    output = _run(PostProcessor().add_watermark(video, watermark_image, position))
    get_console().print(f"✅ {output}", soft_wrap=True)


@cli.command()
@click.argument("video", type=click.Path(exists=True, dir_okay=False))
@click.option("--at", "time_offset", type=float, default=None, help="Offset in seconds (default 5)")
def thumbnail(video: str, time_offset: Optional[float]):
    """Extract a single frame as a JPEG thumbnail."""
    from .post_processing import PostProcessor

    output = _run(PostProcessor().generate_thumbnail(video, time_offset))
    get_console().print(f"✅ {output}", soft_wrap=True)


@cli.command()
def formats():
    """List delivery formats."""
    from rich.table import Table
    from .output_formats import VIDEO_OUTPUT_FORMATS

    table = Table(title="Output Formats")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Platform", style="magenta")
    table.add_column("Resolution")
    table.add_column("Bitrate")
    table.add_column("Max", justify="right")
    for fmt in VIDEO_OUTPUT_FORMATS:
        table.add_row(fmt.id, fmt.platform, fmt.resolution, fmt.bitrate, f"{fmt.max_duration}s")

    get_console().print(table)


@cli.command()
def check():
    """Verify that ffmpeg can be launched."""
    from .post_processing import PostProcessor

    if asyncio.run(PostProcessor().check_ffmpeg_availability()):
        get_console().print("[green]✅ FFmpeg available[/]")
    else:
        get_console().print("[red]❌ FFmpeg not available[/]")
        sys.exit(1)


if __name__ == "__main__":
    cli()

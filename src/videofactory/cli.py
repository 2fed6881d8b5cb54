"""CLI entry point for the video factory."""

import asyncio
import logging
import typer
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import config, FallbackStrategy
from .models import (
    AspectRatio,
    BatchManifest,
    GenerationRequest,
    GenerationTask,
    Language,
    StitchedResult,
    TaskStatus,
    Voice,
)

app = typer.Typer(
    name="video-factory",
    help="Prompt-to-video generation with stock-footage fallback",
    no_args_is_help=True
)

# Large video downloads need more than httpx's default timeout
HTTP_TIMEOUT = 120.0


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"video-factory version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    )
) -> None:
    """Video Factory - Create short videos from prompts using AI."""
    pass


def _require_generation_config() -> None:
    try:
        config.validate_generation_required()
    except ValueError as e:
        typer.echo(f"❌ Configuration error: {e}")
        raise typer.Exit(1)
    if not config.has_stock_credentials:
        typer.echo("⚠️  No PEXELS_API_KEY / PIXABAY_API_KEY set; fallbacks will use a placeholder clip")


def _print_task(task: GenerationTask) -> None:
    prompt_preview = task.request.prompt[:60] + "..." if len(task.request.prompt) > 60 else task.request.prompt
    if task.status is not TaskStatus.SUCCESS or task.result is None:
        typer.echo(f"❌ {prompt_preview}")
        typer.echo(f"   Error: {task.error}")
        return

    result = task.result
    typer.echo(f"✅ {prompt_preview}")
    if result.is_fallback:
        typer.echo("   ⚠️  Fallback: primary generation was unavailable, stock footage used")
    if isinstance(result, StitchedResult):
        typer.echo(f"   Clips: {len(result.videos)}")
        for index, video in enumerate(result.videos, start=1):
            typer.echo(f"     [{index}] {video}")
    else:
        typer.echo(f"   Video: {result.video}")
    if result.audio:
        typer.echo(f"   Narration: {result.audio}")
    if result.captions:
        typer.echo(f"   Captions: {result.captions}")


async def _run_tasks(
    requests: List[GenerationRequest],
    output: Path,
    strategy: Optional[FallbackStrategy],
) -> List[GenerationTask]:
    import httpx
    from .pipeline import create_orchestrator
    from .storage import ArtifactStore

    async with httpx.AsyncClient(timeout=HTTP_TIMEOUT) as http:
        orchestrator = create_orchestrator(http, store=ArtifactStore(output), strategy=strategy)
        for request in requests:
            orchestrator.submit(request)

        if len(requests) == 1:
            task_id = orchestrator.registry.pending_ids()[0]
            return [await orchestrator.run(task_id, on_progress=lambda message: typer.echo(f"   {message}"))]

        def report(task_id: str, message: str) -> None:
            typer.echo(f"   [{task_id[:8]}] {message}")

        return await orchestrator.run_pending(on_progress=report)


@app.command()
def generate(
    prompt: str = typer.Argument(
        ...,
        help="What the video should show"
    ),
    script: Optional[str] = typer.Option(
        None,
        "--script",
        "-s",
        help="Narration script (generated from the prompt if omitted)"
    ),
    duration: int = typer.Option(
        15,
        "--duration",
        "-d",
        help="Target duration in seconds",
        min=5,
        max=60
    ),
    aspect_ratio: AspectRatio = typer.Option(
        AspectRatio.PORTRAIT,
        "--aspect-ratio",
        "-a",
        help="Output aspect ratio"
    ),
    voice: Voice = typer.Option(
        Voice.KORE,
        "--voice",
        help="Narration voice ('none' for a silent video)"
    ),
    language: Language = typer.Option(
        Language.ENGLISH,
        "--language",
        "-l",
        help="Narration language"
    ),
    fallback: Optional[FallbackStrategy] = typer.Option(
        None,
        "--fallback",
        "-f",
        help="Fallback strategy when generation is quota-blocked"
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output directory (defaults to VIDEO_FACTORY_WORKSPACE)"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable verbose logging"
    ),
) -> None:
    """Generate one video from a prompt."""
    setup_logging(verbose)
    _require_generation_config()

    request = GenerationRequest(
        prompt=prompt,
        script=script,
        duration=duration,
        aspect_ratio=aspect_ratio,
        voice=voice,
        language=language,
    )

    typer.echo(f"🎬 Generating: {request.prompt}")
    typer.echo(f"   Duration: {request.duration}s, aspect ratio {request.aspect_ratio.value}, voice {request.voice.value}")

    tasks = asyncio.run(_run_tasks([request], output or config.workspace, fallback))
    typer.echo("")
    _print_task(tasks[0])

    if tasks[0].status is TaskStatus.ERROR:
        raise typer.Exit(1)


@app.command()
def batch(
    manifest: Path = typer.Argument(
        ...,
        help="YAML file listing generation requests",
        exists=True,
        file_okay=True,
        dir_okay=False
    ),
    fallback: Optional[FallbackStrategy] = typer.Option(
        None,
        "--fallback",
        "-f",
        help="Fallback strategy when generation is quota-blocked"
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output directory (defaults to VIDEO_FACTORY_WORKSPACE)"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable verbose logging"
    ),
) -> None:
    """Generate every request in a manifest concurrently."""
    setup_logging(verbose)

    try:
        loaded = BatchManifest.from_yaml(manifest)
    except Exception as e:
        typer.echo(f"❌ Error loading manifest: {e}")
        raise typer.Exit(1)

    if not loaded.requests:
        typer.echo("✅ No requests to generate")
        raise typer.Exit(0)

    _require_generation_config()
    typer.echo(f"📋 Batch: {loaded.name or manifest.stem} ({len(loaded.requests)} requests)\n")

    tasks = asyncio.run(_run_tasks(loaded.requests, output or config.workspace, fallback))

    typer.echo("")
    for task in tasks:
        _print_task(task)

    failed = sum(1 for task in tasks if task.status is TaskStatus.ERROR)
    fallbacks = sum(1 for task in tasks if task.result is not None and task.result.is_fallback)
    typer.echo(f"\n📊 Summary:")
    typer.echo(f"   Generated: {len(tasks) - failed}")
    typer.echo(f"   Fallbacks: {fallbacks}")
    typer.echo(f"   Failed: {failed}")

    if failed > 0:
        raise typer.Exit(1)


@app.command()
def cues(
    captions: Path = typer.Argument(
        ...,
        help="WebVTT caption file",
        exists=True,
        file_okay=True,
        dir_okay=False
    ),
    videos: Optional[List[str]] = typer.Option(
        None,
        "--video",
        help="Clip URL, in scene order (repeat for each scene)"
    ),
) -> None:
    """Show the cue timeline a multi-clip player would follow."""
    from .player import format_clock, parse_cues, scene_schedule

    timeline = parse_cues(captions.read_text(encoding="utf-8"))
    if not timeline:
        typer.echo(f"❌ No cues found in {captions}")
        raise typer.Exit(1)

    typer.echo(f"🕒 {len(timeline)} cues in {captions}")
    if not videos:
        for index, cue in enumerate(timeline, start=1):
            typer.echo(f"   [{index}] {format_clock(cue.start)} → {format_clock(cue.end)} ({cue.duration:.1f}s)")
        return

    schedule = scene_schedule(timeline, videos)
    for cue, video in schedule:
        typer.echo(f"   {format_clock(cue.start)} → {format_clock(cue.end)}  {video}")
    if len(timeline) > len(videos):
        typer.echo(f"   ⚠️  {len(timeline) - len(videos)} cue(s) past the last clip hold the final scene")


@app.command(name="config")
def show_config() -> None:
    """Show which services are configured."""
    def mark(value: str) -> str:
        return "✅" if value else "❌"

    typer.echo(f"{mark(config.gemini_api_key)} GEMINI_API_KEY (video, speech)")
    typer.echo(f"{mark(config.anthropic_api_key)} ANTHROPIC_API_KEY (scripts, captions, scenes)")
    typer.echo(f"{mark(config.pexels_api_key)} PEXELS_API_KEY (stock footage)")
    typer.echo(f"{mark(config.pixabay_api_key)} PIXABAY_API_KEY (stock footage)")
    typer.echo(f"   Workspace: {config.workspace}")
    typer.echo(f"   Fallback strategy: {config.fallback_strategy.value}")
    typer.echo(f"   Poll interval: {config.poll_interval:.0f}s")


if __name__ == "__main__":
    app()

"""CLI entry point for the promo video generator."""

import asyncio
import logging
import typer
from pathlib import Path
from typing import Optional

from . import __version__
from .config import config
from .errors import ConfigurationError, PromoVideoError
from .models import BrandConfiguration, Session, SessionEvent, SessionEventKind

app = typer.Typer(
    name="promo-video",
    help="Turn marketing copy into a storyboard and a promotional video",
    no_args_is_help=True
)


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
        typer.echo(f"promo-video version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    )
) -> None:
    """Promo Video Generator - marketing copy to a 25-second promo."""
    pass


def _build_client():
    """Construct the generation client, exiting on missing credentials."""
    from .generation import GenerationClient

    try:
        config.validate_required()
        client = GenerationClient()
    except ConfigurationError as e:
        typer.echo(f"❌ Configuration error: {e}")
        raise typer.Exit(1)

    return client


def _print_analysis(session: Session) -> None:
    analysis = session.analysis
    typer.echo(f"\n🔎 Analysis:")
    typer.echo(f"   Product: {analysis.product_name}")
    typer.echo(f"   Features: {', '.join(analysis.features) or '-'}")
    typer.echo(f"   Target: {analysis.target_audience}")
    typer.echo(f"   CTA: {analysis.call_to_action}")
    typer.echo(f"   Mood: {analysis.mood}")
    typer.echo(f"   Audio: {analysis.audio_mix_ratio}")


def _print_storyboard(session: Session) -> None:
    total_duration = sum(scene.duration_seconds for scene in session.scenes)
    typer.echo(f"\n📽️  Storyboard ({total_duration:.1f}s):")
    for scene in session.scenes:
        typer.echo(f"   • {scene.id}. {scene.type.value} ({scene.duration_seconds}s) [{scene.camera_angle}]")
        typer.echo(f"     {scene.narrative}")
        prompt_preview = scene.visual_prompt[:70] + "..." if len(scene.visual_prompt) > 70 else scene.visual_prompt
        typer.echo(f"     → {prompt_preview}")


def _echo_progress(session: Session):
    """Listener that reports previews and render progress as they land."""

    def listener(event: SessionEvent) -> None:
        if event.kind == SessionEventKind.PREVIEW:
            scene = session.get_scene(event.scene_id)
            is_data = scene.preview_image.startswith("data:")
            status_icon = "✅" if is_data else "⚠️ "
            typer.echo(f"   {status_icon} Preview {scene.id}/4 ({scene.type.value})")
        elif event.kind == SessionEventKind.VIDEO and session.video.is_generating:
            typer.echo(f"   ⏳ Rendering... {session.video.progress}%")

    return listener


def _brand(color: str, secondary_color: str, logo: Optional[Path]) -> BrandConfiguration:
    return BrandConfiguration(
        primary_color=color,
        secondary_color=secondary_color,
        logo_reference=str(logo) if logo else None,
    )


@app.command()
def analyze(
    text: str = typer.Argument(
        ...,
        help="Marketing copy to analyze"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging"
    ),
) -> None:
    """Extract product, features, audience and CTA from marketing copy."""
    setup_logging(verbose)
    client = _build_client()

    typer.echo(f"🎬 Analyzing: {text[:70]}")
    try:
        analysis = asyncio.run(client.analyze(text))
    except PromoVideoError as e:
        typer.echo(f"❌ Error analyzing text: {e}")
        raise typer.Exit(1)

    typer.echo(analysis.model_dump_json(indent=2))


@app.command()
def run(
    text: str = typer.Argument(
        ...,
        help="Marketing copy for the promo"
    ),
    color: str = typer.Option(
        "#8b5cf6",
        "--color",
        "-c",
        help="Primary brand color"
    ),
    secondary_color: str = typer.Option(
        "#ffffff",
        "--secondary-color",
        help="Secondary brand color"
    ),
    logo: Optional[Path] = typer.Option(
        None,
        "--logo",
        help="Brand logo file"
    ),
    previews: bool = typer.Option(
        True,
        "--previews/--no-previews",
        help="Render a still preview per scene"
    ),
    render: bool = typer.Option(
        False,
        "--render",
        "-r",
        help="Render the final video with Veo"
    ),
    output: Path = typer.Option(
        Path("output/promo.mp4"),
        "--output",
        "-o",
        help="Where to write the rendered video"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging"
    ),
) -> None:
    """Build the storyboard, previews and (optionally) the final video."""
    from .pipeline import StoryboardPipeline
    from .services.gemini import decode_data_uri

    setup_logging(verbose)
    pipeline = StoryboardPipeline(_build_client())
    brand = _brand(color, secondary_color, logo)

    typer.echo(f"🎬 Promo for: {text[:70]}")
    typer.echo(f"   Brand color: {brand.primary_color}")

    async def drive() -> Session:
        session = await pipeline.start(text, brand)
        _print_analysis(session)
        _print_storyboard(session)
        session.subscribe(_echo_progress(session))

        if previews:
            typer.echo(f"\n🎨 Rendering previews...")
            await pipeline.fill_previews()
        if render:
            typer.echo(f"\n⏳ Rendering video (this can take a few minutes)...")
            await pipeline.render_video()
        return session

    try:
        session = asyncio.run(drive())
    except PromoVideoError as e:
        typer.echo(f"❌ Error: {e}")
        raise typer.Exit(1)

    if not render:
        typer.echo(f"\n✅ Storyboard ready")
        return

    video = session.video
    if video.error or not video.video_reference:
        typer.echo(f"❌ {video.error or 'Video render produced nothing'}")
        raise typer.Exit(1)

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(decode_data_uri(video.video_reference))
    typer.echo(f"\n✅ Video saved: {output}")


if __name__ == "__main__":
    app()

"""CLI entry point for the short-form content generator."""

import json
import logging
import typer
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import config
from .errors import PipelineError, RequestValidationError
from .models import DurationPreference, GenerationRequest, Platform, PipelineRun

app = typer.Typer(
    name="reel-maker",
    help="Turn a topic into a script, voiceover, video, thumbnail and social posts",
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
        typer.echo(f"reel-maker version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    )
) -> None:
    """Reel Maker - Create short-form content packages from a topic."""
    pass


@app.command()
def capabilities() -> None:
    """Show which external services are configured."""
    caps = config.capabilities().describe()
    services = {
        "script": "Claude (ANTHROPIC_API_KEY)",
        "speech": "OpenAI speech (OPENAI_API_KEY)",
        "video": "Veo (GOOGLE_CLOUD_PROJECT, REELGEN_ENABLE_VEO)",
        "image": "Imagen (GOOGLE_CLOUD_PROJECT)",
    }
    for name, enabled in caps.items():
        icon = "✅" if enabled else "⚪"
        mode = "primary" if enabled else "local fallback"
        typer.echo(f"   {icon} {name}: {mode} - {services[name]}")


@app.command()
def script(
    topic: str = typer.Argument(
        ...,
        help="Topic for the video"
    ),
    tone: Optional[str] = typer.Option(None, "--tone", "-t", help="Brand tone"),
    audience: Optional[str] = typer.Option(None, "--audience", "-a", help="Target audience"),
    cta: Optional[str] = typer.Option(None, "--cta", help="Call to action"),
    duration: DurationPreference = typer.Option(
        DurationPreference.MEDIUM,
        "--duration",
        "-d",
        help="Duration aim"
    ),
    output: Path = typer.Option(
        Path("script.yaml"),
        "--output",
        "-o",
        help="Output script file path"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Draft only the narration script and save it as YAML."""
    from .pipeline import Orchestrator

    setup_logging(verbose)
    typer.echo(f"📝 Drafting script: {topic}")

    try:
        request = GenerationRequest.from_payload(
            {
                "topic": topic,
                "tone": tone,
                "audience": audience,
                "callToAction": cta,
                "durationPreference": duration.value,
            }
        )
    except RequestValidationError as e:
        typer.echo(f"❌ Invalid request: {e}")
        raise typer.Exit(1)

    generator = Orchestrator().script_generator
    drafted = generator.generate(
        request.topic,
        request.tone,
        request.audience,
        request.call_to_action,
        request.duration_preference,
    )

    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        drafted.to_yaml(output)
    except OSError as e:
        typer.echo(f"❌ Error saving script: {e}")
        raise typer.Exit(1)

    typer.echo(f"\n✅ Script saved: {output}")
    typer.echo(f"   Hook: {drafted.hook}")
    typer.echo(f"   Scenes: {len(drafted.scenes)}")
    for scene in drafted.scenes:
        typer.echo(f"   • {scene.id}: {scene.title}")
    typer.echo(f"   Keywords: {', '.join(drafted.keywords)}")


@app.command()
def generate(
    topic: str = typer.Argument(
        ...,
        help="Topic for the content package"
    ),
    tone: Optional[str] = typer.Option(None, "--tone", "-t", help="Brand tone"),
    audience: Optional[str] = typer.Option(None, "--audience", "-a", help="Target audience"),
    cta: Optional[str] = typer.Option(None, "--cta", help="Call to action"),
    duration: DurationPreference = typer.Option(
        DurationPreference.MEDIUM,
        "--duration",
        "-d",
        help="Duration aim"
    ),
    platforms: Optional[List[Platform]] = typer.Option(
        None,
        "--platform",
        "-p",
        help="Target platform (repeatable; all four when omitted)"
    ),
    output: Path = typer.Option(
        Path("./output"),
        "--output",
        "-o",
        help="Output directory for result.json and decoded assets"
    ),
    json_only: bool = typer.Option(
        False,
        "--json-only",
        help="Write result.json without decoding the assets"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Generate the full bundle: script, voiceover, video, thumbnail and posts."""
    from .pipeline import Orchestrator

    setup_logging(verbose)
    typer.echo(f"🎬 Generating: {topic}")

    orchestrator = Orchestrator()
    enabled = [name for name, on in orchestrator.capabilities.describe().items() if on]
    typer.echo(f"   External services: {', '.join(enabled) or 'none (local fallbacks)'}")

    payload = {
        "topic": topic,
        "tone": tone,
        "audience": audience,
        "callToAction": cta,
        "durationPreference": duration.value,
        "platforms": [p.value for p in platforms or []],
    }

    run = PipelineRun()
    try:
        result = orchestrator.generate(payload, run=run)
    except RequestValidationError as e:
        typer.echo(f"❌ Invalid request: {e}")
        raise typer.Exit(1)
    except PipelineError as e:
        typer.echo(f"❌ Generation failed: {e}")
        raise typer.Exit(1)

    output.mkdir(parents=True, exist_ok=True)
    result_path = output / "result.json"
    with open(result_path, "w") as f:
        json.dump(result.to_payload(), f, indent=2)
    typer.echo(f"\n📄 Result saved: {result_path}")

    if not json_only:
        for name, asset in (
            ("voiceover", result.voiceover),
            ("video", result.video),
            ("thumbnail", result.thumbnail),
        ):
            asset_path = output / f"{name}.{asset.format.lower()}"
            asset_path.write_bytes(asset.to_bytes())
            typer.echo(f"   {name}: {asset_path} ({asset.size} bytes)")

    typer.echo(f"\n📋 Summary:")
    typer.echo(f"   Hook: {result.script.hook}")
    typer.echo(f"   Scenes: {len(result.script.scenes)}")
    typer.echo(f"   Fallbacks: {', '.join(run.fallbacks) or 'none'}")

    typer.echo(f"\n📣 Platform drops:")
    for post in result.social_posts:
        typer.echo(f"   • {Platform(post.platform).label}: {post.headline}")
        typer.echo(f"     {' '.join(post.hashtags)}")
        typer.echo(f"     {post.schedule_hint}")

    typer.echo(f"\n🛠️  Workflow notes:")
    for note in result.workflow_notes:
        typer.echo(f"   - {note}")

    typer.echo(f"\n✅ Bundle complete")


if __name__ == "__main__":
    app()

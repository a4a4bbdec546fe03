"""Pipeline orchestrator: request in, five-artifact bundle out."""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from ..agents.script import SPEAKING_RATE, ScriptBrief, ScriptGenerator
from ..config import Capabilities, Config, config
from ..models import (
    GenerationRequest,
    GenerationResult,
    MediaAsset,
    PipelineRun,
    PipelineState,
    Script,
    StageOutcome,
    ThumbnailAsset,
)
from ..errors import PipelineError
from ..retry import RetryPolicy
from ..services.anthropic import AnthropicClient
from ..services.imagen import ImagenClient
from ..services.speech import SpeechClient
from ..services.veo import VeoClient
from .packager import PlatformPackager
from .scheduler import StageFailed, StageGraph
from .thumbnail import ThumbnailDesigner
from .video import VideoComposer
from .voiceover import VoiceoverSynthesizer

logger = logging.getLogger(__name__)

SCRIPT = "script"
VOICEOVER = "voiceover"
THUMBNAIL = "thumbnail"
VIDEO = "video"
POSTS = "posts"

# State reached once every listed stage has finished
_MILESTONES = [
    (PipelineState.VIDEO_COMPOSED, {SCRIPT, VOICEOVER, VIDEO}),
    (PipelineState.THUMBNAIL_DESIGNED, {SCRIPT, VOICEOVER, VIDEO, THUMBNAIL}),
    (PipelineState.PACKAGED, {SCRIPT, VOICEOVER, VIDEO, THUMBNAIL, POSTS}),
]

_FALLBACK_NOTES = {
    SCRIPT: "Script came from the built-in template; set ANTHROPIC_API_KEY for AI-written copy.",
    VOICEOVER: "Voiceover is a placeholder tone; record your own narration or set OPENAI_API_KEY for synthesized speech.",
    VIDEO: "Video is a colour-block placeholder timed to the narration; drop in footage or set GOOGLE_CLOUD_PROJECT to render with Veo.",
    THUMBNAIL: "Thumbnail is a placeholder SVG; set GOOGLE_CLOUD_PROJECT to generate artwork with Imagen.",
}


def _client_or_none(enabled: bool, factory: Callable[[], Any], label: str) -> Optional[Any]:
    if not enabled:
        return None
    try:
        return factory()
    except ValueError as e:
        logger.warning(f"{label} enabled but not configured, using fallback: {e}")
        return None


class Orchestrator:
    """Sequences the stages and assembles the GenerationResult.

    Stages and clients hold no per-request state, so one instance can serve
    concurrent requests; each call to `generate` gets its own PipelineRun and
    thread pool.
    """

    def __init__(
        self,
        capabilities: Optional[Capabilities] = None,
        cfg: Optional[Config] = None,
        *,
        script_generator: Optional[ScriptGenerator] = None,
        voiceover: Optional[VoiceoverSynthesizer] = None,
        video: Optional[VideoComposer] = None,
        thumbnail: Optional[ThumbnailDesigner] = None,
        packager: Optional[PlatformPackager] = None,
        max_workers: int = 4,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            capabilities: Which collaborators may be called. Defaults to
                ``cfg.capabilities()``.
            cfg: Configuration. Defaults to the global config.
            script_generator, voiceover, video, thumbnail, packager: Stage
                overrides; built from capabilities and config when omitted.
            max_workers: Thread pool size per request.
        """
        self._config = cfg or config
        self._capabilities = capabilities if capabilities is not None else self._config.capabilities()
        self._max_workers = max_workers
        retry = RetryPolicy.from_config(self._config)
        cfg = self._config
        caps = self._capabilities

        self._script = script_generator or ScriptGenerator(
            client=_client_or_none(
                caps.script,
                lambda: AnthropicClient(
                    api_key=cfg.anthropic_api_key,
                    model=cfg.default_model,
                    timeout=cfg.request_timeout,
                ),
                "Script generation",
            ),
            retry=retry,
        )
        self._voiceover = voiceover or VoiceoverSynthesizer(
            client=_client_or_none(
                caps.speech,
                lambda: SpeechClient(
                    api_key=cfg.openai_api_key,
                    model=cfg.tts_model,
                    voice=cfg.tts_voice,
                    timeout=cfg.request_timeout,
                ),
                "Speech synthesis",
            ),
            retry=retry,
        )
        self._video = video or VideoComposer(
            client=_client_or_none(
                caps.video,
                lambda: VeoClient(
                    project_id=cfg.google_cloud_project,
                    location=cfg.google_cloud_location,
                    model=cfg.veo_model,
                    output_bucket=cfg.veo_output_bucket,
                    timeout=cfg.request_timeout,
                    max_poll_time=cfg.veo_max_poll_time,
                ),
                "Video rendering",
            ),
            retry=retry,
        )
        self._thumbnail = thumbnail or ThumbnailDesigner(
            client=_client_or_none(
                caps.image,
                lambda: ImagenClient(
                    project_id=cfg.google_cloud_project,
                    location=cfg.google_cloud_location,
                    model=cfg.imagen_model,
                    timeout=cfg.request_timeout,
                ),
                "Image generation",
            ),
            retry=retry,
        )
        self._packager = packager or PlatformPackager()

    @property
    def capabilities(self) -> Capabilities:
        return self._capabilities

    @property
    def script_generator(self) -> ScriptGenerator:
        return self._script

    def generate(
        self,
        request: Union[GenerationRequest, Mapping[str, Any]],
        run: Optional[PipelineRun] = None,
    ) -> GenerationResult:
        """Run the full pipeline for one request.

        Args:
            request: A GenerationRequest or a raw payload mapping.
            run: Optional state tracker to observe transitions.

        Returns:
            The fully assembled GenerationResult.

        Raises:
            RequestValidationError: Before any stage runs, for a bad request.
            PipelineError: For any unexpected failure; no partial result.
        """
        request = GenerationRequest.from_payload(request)
        run = run if run is not None else PipelineRun()
        finished: set = set()
        logger.info(f"Generating bundle for topic '{request.topic}'")

        try:
            outcomes = self._build_graph(request).run(
                max_workers=self._max_workers,
                on_start=lambda name: self._on_start(run, name),
                on_complete=lambda name, _: self._on_complete(run, finished, name),
            )
            result = self._assemble(request, outcomes, run)

        except StageFailed as e:
            logger.error(f"Pipeline failed in {e.stage}: {e.error}")
            run.fail(str(e))
            raise PipelineError(f"{e.stage} stage failed: {e.error}", stage=e.stage) from e.error

        except PipelineError as e:
            logger.error(f"Pipeline failed: {e}")
            run.fail(str(e))
            raise

        except Exception as e:
            logger.error(f"Unexpected pipeline error: {e}")
            run.fail(str(e))
            raise PipelineError(str(e) or "Unexpected error occurred") from e

        run.advance(PipelineState.COMPLETE)
        logger.info(
            f"Bundle complete: {len(result.script.scenes)} scenes, {len(result.social_posts)} posts, "
            f"fallbacks: {', '.join(run.fallbacks) or 'none'}"
        )
        return result

    def _build_graph(self, request: GenerationRequest) -> StageGraph:
        brief = ScriptBrief(
            topic=request.topic,
            tone=request.tone,
            audience=request.audience,
            call_to_action=request.call_to_action,
            duration=request.duration_preference,
        )
        platforms = request.resolved_platforms()

        graph = StageGraph()
        graph.add(SCRIPT, lambda deps: self._script.run(brief))
        graph.add(
            VOICEOVER,
            lambda deps: self._voiceover.run(deps[SCRIPT].value.spoken_text()),
            depends_on=[SCRIPT],
        )
        graph.add(
            THUMBNAIL,
            lambda deps: self._thumbnail.run(
                request.topic, brief.tone_or_default, deps[SCRIPT].value.hook
            ),
            depends_on=[SCRIPT],
        )
        graph.add(
            POSTS,
            lambda deps: StageOutcome.primary(
                self._packager.package(deps[SCRIPT].value, platforms, brief.cta_or_default)
            ),
            depends_on=[SCRIPT],
        )
        graph.add(
            VIDEO,
            lambda deps: self._video.run(deps[SCRIPT].value, deps[VOICEOVER].value),
            depends_on=[SCRIPT, VOICEOVER],
        )
        return graph

    @staticmethod
    def _on_start(run: PipelineRun, name: str) -> None:
        if name in (VOICEOVER, THUMBNAIL):
            if run.advance(PipelineState.MEDIA_SYNTHESIZING):
                logger.info("State -> media_synthesizing")

    @staticmethod
    def _on_complete(run: PipelineRun, done: set, name: str) -> None:
        done.add(name)
        if name == SCRIPT and run.advance(PipelineState.SCRIPT_DRAFTED):
            logger.info("State -> script_drafted")
        for state, required in _MILESTONES:
            if required <= done and run.advance(state):
                logger.info(f"State -> {state.value}")

    def _assemble(
        self,
        request: GenerationRequest,
        outcomes: Dict[str, StageOutcome],
        run: PipelineRun,
    ) -> GenerationResult:
        script: Script = outcomes[SCRIPT].value
        voiceover: MediaAsset = outcomes[VOICEOVER].value
        video: MediaAsset = outcomes[VIDEO].value
        thumbnail: ThumbnailAsset = outcomes[THUMBNAIL].value
        posts = outcomes[POSTS].value

        expected = request.resolved_platforms()
        if [post.platform for post in posts] != [platform.value for platform in expected]:
            raise PipelineError("Packaged platforms do not match the request", stage=POSTS)
        for label, asset in ((VOICEOVER, voiceover), (VIDEO, video), (THUMBNAIL, thumbnail)):
            if not asset.base64:
                raise PipelineError(f"{label} asset is empty", stage=label)
        if not thumbnail.prompt:
            raise PipelineError("thumbnail prompt is empty", stage=THUMBNAIL)

        for name in (SCRIPT, VOICEOVER, VIDEO, THUMBNAIL):
            if outcomes[name].used_fallback:
                run.fallbacks.append(name)

        return GenerationResult(
            script=script,
            voiceover=voiceover,
            video=video,
            thumbnail=thumbnail,
            social_posts=posts,
            workflow_notes=self._workflow_notes(script, thumbnail, posts, outcomes),
        )

    @staticmethod
    def _workflow_notes(
        script: Script,
        thumbnail: ThumbnailAsset,
        posts: List,
        outcomes: Dict[str, StageOutcome],
    ) -> List[str]:
        seconds = int(round(script.word_count() / SPEAKING_RATE))
        notes = [
            f"Land the hook in the first two seconds: \"{script.hook}\"",
            f"{len(script.scenes)} scenes, roughly {seconds}s of narration; trim any beat that drags.",
            "Use each scene's visual idea as a shot-list entry and cut on sentence breaks.",
            f"Regenerate the thumbnail in your image tool with this prompt: {thumbnail.prompt}",
        ]

        for name in (SCRIPT, VOICEOVER, VIDEO, THUMBNAIL):
            outcome = outcomes[name]
            if not outcome.used_fallback:
                continue
            if outcome.error_message:
                notes.append(
                    f"The {name} service call failed ({outcome.error_message}); a local fallback was used instead."
                )
            else:
                notes.append(_FALLBACK_NOTES[name])

        if posts:
            plan = "; ".join(f"{post.platform}: {post.schedule_hint}" for post in posts)
            notes.append(f"Posting plan: {plan}.")

        return notes

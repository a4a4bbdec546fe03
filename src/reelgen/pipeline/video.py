"""Video stage: script beats plus voiceover to a vertical MP4."""

import logging
import tempfile
from pathlib import Path
from typing import List, Optional

from moviepy import AudioFileClip

from ..editor.audio import load_audio, sync_audio, write_audio_file
from ..editor.compositor import Color, color_slideshow, encode_mp4, load_clip, loop_to_duration
from ..errors import CollaboratorError
from ..models import MediaAsset, Script, StageOutcome
from ..retry import RetryPolicy
from ..services.veo import VeoClient
from ..text import stable_seed, truncate

logger = logging.getLogger(__name__)

VIDEO_FORMAT = "mp4"
SECONDS_PER_SEGMENT = 1.5
MIN_SEGMENT_SECONDS = 0.25
VEO_CLIP_SECONDS = 8.0
MAX_PROMPT_CHARS = 900

PALETTE: List[Color] = [
    (99, 102, 241),
    (236, 72, 153),
    (14, 165, 233),
    (245, 158, 11),
    (16, 185, 129),
    (139, 92, 246),
    (239, 68, 68),
    (20, 184, 166),
]


def build_video_prompt(script: Script) -> str:
    """Veo prompt assembled from the script's visual beats."""
    shots = "; ".join(scene.visual_idea for scene in script.scenes)
    prompt = (
        f"Vertical 9:16 short-form video. Opening line: {script.hook} "
        f"Shots: {shots}. Cinematic lighting, smooth camera motion, no on-screen text."
    )
    return truncate(prompt, MAX_PROMPT_CHARS)


def segment_durations(script: Script, total: Optional[float]) -> List[float]:
    """Seconds per hook/scene/closing segment, weighted by word count."""
    texts = [script.hook, *(scene.narration for scene in script.scenes), script.closing]
    if not total or total <= 0:
        return [SECONDS_PER_SEGMENT] * len(texts)

    weights = [max(1, len(text.split())) for text in texts]
    scale = total / sum(weights)
    return [max(MIN_SEGMENT_SECONDS, weight * scale) for weight in weights]


def segment_colors(script: Script, count: int) -> List[Color]:
    offset = stable_seed(script.hook) % len(PALETTE)
    return [PALETTE[(offset + i) % len(PALETTE)] for i in range(count)]


def _open_voiceover(voiceover: MediaAsset, directory: Path) -> Optional[AudioFileClip]:
    if not voiceover.base64:
        return None
    path = write_audio_file(voiceover.to_bytes(), voiceover.format, directory)
    try:
        return load_audio(path)
    except Exception as e:
        logger.warning(f"Voiceover ({voiceover.format}) could not be decoded; rendering silent video: {e}")
        return None


class VideoComposer:
    """Renders the vertical video from the script and the finished voiceover."""

    def __init__(
        self,
        client: Optional[VeoClient] = None,
        retry: Optional[RetryPolicy] = None,
    ) -> None:
        self._client = client
        self._retry = retry or RetryPolicy()

    @property
    def available(self) -> bool:
        return self._client is not None

    def compose(self, script: Script, voiceover: MediaAsset) -> MediaAsset:
        return self.run(script, voiceover).value

    def run(self, script: Script, voiceover: MediaAsset) -> StageOutcome[MediaAsset]:
        if not self.available:
            logger.info("No video service configured; rendering placeholder slideshow")
            return StageOutcome.fallback(self.placeholder(script, voiceover))

        try:
            data = self._render_with_veo(script, voiceover)
        except CollaboratorError as e:
            logger.warning(f"Veo rendering failed, rendering placeholder slideshow: {e}")
            return StageOutcome.fallback(self.placeholder(script, voiceover), error_message=str(e))

        return StageOutcome.primary(MediaAsset.from_bytes(VIDEO_FORMAT, data))

    def _request_clip(self, script: Script) -> bytes:
        result = self._client.generate_clip(
            prompt=build_video_prompt(script),
            duration=VEO_CLIP_SECONDS,
            aspect_ratio="9:16",
        )
        if not result.ok:
            raise CollaboratorError(
                "veo", result.error_message or "no video returned", retryable=result.retryable
            )
        return result.video

    def _render_with_veo(self, script: Script, voiceover: MediaAsset) -> bytes:
        clip_bytes = self._retry.call(lambda: self._request_clip(script), description="Veo clip")

        with tempfile.TemporaryDirectory(prefix="reelgen-veo-") as tmp:
            audio = _open_voiceover(voiceover, Path(tmp))
            if audio is None:
                return clip_bytes

            clip = None
            try:
                clip = load_clip(clip_bytes, Path(tmp))
                video = sync_audio(loop_to_duration(clip, audio.duration), audio, fade_out=0.25)
                logger.info(f"Muxing {audio.duration:.1f}s voiceover into Veo clip")
                return encode_mp4(video, fps=24, preset="veryfast")
            except Exception as e:
                raise CollaboratorError("veo", f"unusable clip: {e}", retryable=False) from e
            finally:
                audio.close()
                if clip is not None:
                    clip.close()

    def placeholder(self, script: Script, voiceover: MediaAsset) -> MediaAsset:
        """Colour slideshow, one segment per spoken block, voiceover attached."""
        with tempfile.TemporaryDirectory(prefix="reelgen-video-") as tmp:
            audio = _open_voiceover(voiceover, Path(tmp))
            video = None
            try:
                durations = segment_durations(script, audio.duration if audio else None)
                colors = segment_colors(script, len(durations))
                video = color_slideshow(list(zip(colors, durations)))
                if audio is not None:
                    video = sync_audio(video, audio)
                data = encode_mp4(video)
            finally:
                if video is not None:
                    video.close()
                if audio is not None:
                    audio.close()

        logger.info(f"Rendered {len(data)} byte placeholder video ({len(durations)} segments)")
        return MediaAsset.from_bytes(VIDEO_FORMAT, data)

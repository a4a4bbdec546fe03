"""Video compositor for slideshows, looping and encoding to bytes."""

import tempfile
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from moviepy import ColorClip, VideoClip, VideoFileClip, concatenate_videoclips
from moviepy.video.fx import Loop

Color = Tuple[int, int, int]

# 9:16, small enough to encode in a moment
PLACEHOLDER_SIZE = (180, 320)
PLACEHOLDER_FPS = 6


def color_slideshow(
    segments: Sequence[Tuple[Color, float]],
    size: Tuple[int, int] = PLACEHOLDER_SIZE,
) -> VideoClip:
    """Concatenate solid-colour clips.

    Args:
        segments: (rgb colour, duration in seconds) per clip, in order.
        size: Frame size (width, height).

    Returns:
        Concatenated video clip.

    Raises:
        ValueError: If segments is empty or a duration is not positive.
    """
    if not segments:
        raise ValueError("No segments provided")

    clips: List[VideoClip] = []
    for i, (color, duration) in enumerate(segments):
        if duration <= 0:
            raise ValueError(f"Segment {i} has non-positive duration {duration}")
        clips.append(ColorClip(size=size, color=color, duration=duration))

    if len(clips) == 1:
        return clips[0]

    return concatenate_videoclips(clips, method="chain")


def loop_to_duration(clip: VideoClip, duration: float) -> VideoClip:
    """Loop or trim a clip so it lasts exactly ``duration`` seconds."""
    if clip.duration >= duration:
        return clip.subclipped(0, duration)
    return clip.with_effects([Loop(duration=duration)])


def load_clip(data: bytes, directory: Path, name: str = "clip.mp4") -> VideoFileClip:
    """Write clip bytes into ``directory`` and open them."""
    path = directory / name
    path.write_bytes(data)
    return VideoFileClip(str(path))


def export(
    video: VideoClip,
    output_path: Path,
    fps: int = 30,
    codec: str = "libx264",
    audio_codec: str = "aac",
    bitrate: Optional[str] = None,
    preset: str = "medium"
) -> Path:
    """Export video to file with proper encoding.

    Args:
        video: Video clip to export.
        output_path: Path for output file.
        fps: Frames per second (default 30).
        codec: Video codec (default libx264).
        audio_codec: Audio codec (default aac).
        bitrate: Video bitrate (e.g., "5000k"). None for auto.
        preset: Encoding preset (ultrafast, fast, medium, slow, slower).

    Returns:
        Path to the exported video file.
    """
    # Ensure output directory exists
    output_path.parent.mkdir(parents=True, exist_ok=True)

    # Build export parameters
    export_params = {
        "fps": fps,
        "codec": codec,
        "audio_codec": audio_codec,
        "preset": preset,
        "audio": video.audio is not None,
        "logger": None,
    }

    if bitrate:
        export_params["bitrate"] = bitrate

    video.write_videofile(str(output_path), **export_params)

    return output_path


def encode_mp4(video: VideoClip, fps: int = PLACEHOLDER_FPS, preset: str = "ultrafast") -> bytes:
    """Encode a clip to H.264/AAC MP4 and return the file bytes."""
    with tempfile.TemporaryDirectory(prefix="reelgen-render-") as tmp:
        output_path = export(video, Path(tmp) / "render.mp4", fps=fps, preset=preset)
        return output_path.read_bytes()

"""Video editing and assembly module."""

from .compositor import (
    PLACEHOLDER_FPS,
    PLACEHOLDER_SIZE,
    color_slideshow,
    encode_mp4,
    export,
    load_clip,
    loop_to_duration,
)
from .audio import (
    fade_audio,
    load_audio,
    synthesize_tone,
    sync_audio,
    write_audio_file,
)

__all__ = [
    # Compositor
    "PLACEHOLDER_FPS",
    "PLACEHOLDER_SIZE",
    "color_slideshow",
    "encode_mp4",
    "export",
    "load_clip",
    "loop_to_duration",
    # Audio
    "fade_audio",
    "load_audio",
    "synthesize_tone",
    "sync_audio",
    "write_audio_file",
]

"""Audio processing for voiceover placeholders and muxing."""

import io
import wave
from pathlib import Path

import numpy as np
from moviepy import AudioFileClip, VideoClip
from moviepy.audio.fx import AudioFadeIn, AudioFadeOut


def synthesize_tone(
    duration: float = 3.0,
    frequency: float = 440.0,
    sample_rate: int = 22050,
    volume: float = 0.2,
    fade: float = 0.25,
) -> bytes:
    """Render a mono 16-bit WAV sine tone with linear fades.

    The output depends only on the arguments, so repeated calls return
    identical bytes.

    Args:
        duration: Length in seconds.
        frequency: Tone pitch in Hz.
        sample_rate: Samples per second.
        volume: Peak amplitude as a fraction of full scale.
        fade: Fade in/out length in seconds.

    Returns:
        WAV file bytes.
    """
    if duration <= 0:
        raise ValueError("duration must be positive")

    frames = int(round(duration * sample_rate))
    t = np.arange(frames, dtype=np.float64) / sample_rate
    signal = np.sin(2 * np.pi * frequency * t) * volume

    fade_frames = min(int(fade * sample_rate), frames // 2)
    if fade_frames > 0:
        ramp = np.linspace(0.0, 1.0, fade_frames)
        signal[:fade_frames] *= ramp
        signal[-fade_frames:] *= ramp[::-1]

    samples = np.round(signal * 32767).astype("<i2")

    output = io.BytesIO()
    with wave.open(output, "wb") as wav_file:
        wav_file.setnchannels(1)
        wav_file.setsampwidth(2)
        wav_file.setframerate(sample_rate)
        wav_file.writeframes(samples.tobytes())
    return output.getvalue()


def load_audio(audio_path: Path) -> AudioFileClip:
    """Load an audio file.

    Raises:
        FileNotFoundError: If audio file doesn't exist.
    """
    if not audio_path.exists():
        raise FileNotFoundError(f"Audio file not found: {audio_path}")

    return AudioFileClip(str(audio_path))


def write_audio_file(data: bytes, format: str, directory: Path) -> Path:
    """Write encoded audio bytes into ``directory`` as voiceover.<format>."""
    path = directory / f"voiceover.{format}"
    path.write_bytes(data)
    return path


def fade_audio(
    audio: AudioFileClip,
    fade_in: float = 0.0,
    fade_out: float = 0.0
) -> AudioFileClip:
    """Apply fade in/out effects to audio.

    Args:
        audio: Audio clip to process.
        fade_in: Duration of fade in effect (seconds).
        fade_out: Duration of fade out effect (seconds).

    Returns:
        Audio clip with fade effects applied.
    """
    effects = []

    if fade_in > 0:
        effects.append(AudioFadeIn(fade_in))

    if fade_out > 0:
        effects.append(AudioFadeOut(fade_out))

    if effects:
        return audio.with_effects(effects)

    return audio


def sync_audio(
    video: VideoClip,
    audio: AudioFileClip,
    fade_out: float = 0.0
) -> VideoClip:
    """Attach audio to video, trimming the audio to the video's length.

    Args:
        video: Video clip to add audio to.
        audio: Voiceover clip.
        fade_out: Duration of fade out at the end (seconds).

    Returns:
        Video clip with synchronized audio.
    """
    if audio.duration > video.duration:
        audio = audio.subclipped(0, video.duration)

    if fade_out > 0:
        audio = fade_audio(audio, fade_out=min(fade_out, audio.duration / 2))

    return video.with_audio(audio)

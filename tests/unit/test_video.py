"""Unit tests for the video stage."""

from unittest.mock import Mock

import pytest

import reelgen.pipeline.video as video_stage
from reelgen.editor.compositor import color_slideshow, encode_mp4
from reelgen.models import MediaAsset
from reelgen.pipeline import VideoComposer
from reelgen.pipeline.video import (
    MAX_PROMPT_CHARS,
    MIN_SEGMENT_SECONDS,
    SECONDS_PER_SEGMENT,
    build_video_prompt,
    segment_colors,
    segment_durations,
)
from reelgen.pipeline.voiceover import placeholder_voiceover
from reelgen.services.veo import GenerationStatus, VeoResult


def _is_mp4(data: bytes) -> bool:
    return data[4:8] == b"ftyp"


@pytest.mark.unit
def test_segment_durations_follow_voiceover_length(sample_script):
    durations = segment_durations(sample_script, 12.0)

    assert len(durations) == len(sample_script.scenes) + 2
    assert sum(durations) == pytest.approx(12.0, rel=0.05)
    assert all(d >= MIN_SEGMENT_SECONDS for d in durations)


@pytest.mark.unit
def test_segment_durations_without_audio(sample_script):
    assert segment_durations(sample_script, None) == [SECONDS_PER_SEGMENT] * 4


@pytest.mark.unit
def test_segment_colors_are_deterministic(sample_script):
    assert segment_colors(sample_script, 4) == segment_colors(sample_script, 4)
    assert len(set(segment_colors(sample_script, 4))) == 4


@pytest.mark.unit
def test_video_prompt_uses_visual_ideas(sample_script):
    prompt = build_video_prompt(sample_script)

    assert "9:16" in prompt
    assert "alarm clock" in prompt
    assert len(prompt) <= MAX_PROMPT_CHARS


@pytest.mark.unit
@pytest.mark.slow
def test_placeholder_video_is_mp4(sample_script):
    outcome = VideoComposer().run(sample_script, placeholder_voiceover())

    assert outcome.used_fallback
    assert outcome.value.format == "mp4"
    assert _is_mp4(outcome.value.to_bytes())


@pytest.mark.unit
@pytest.mark.slow
def test_unusable_veo_clip_falls_back(sample_script, mock_veo_client, no_retry_delay):
    mock_veo_client.generate_clip.return_value = VeoResult(
        operation_name="op", status=GenerationStatus.COMPLETED, video=b"not a video"
    )
    composer = VideoComposer(client=mock_veo_client, retry=no_retry_delay)

    outcome = composer.run(sample_script, placeholder_voiceover())

    assert outcome.used_fallback
    assert "unusable clip" in outcome.error_message
    assert _is_mp4(outcome.value.to_bytes())
    # Decoding failures are not retried
    assert mock_veo_client.generate_clip.call_count == 1


@pytest.mark.unit
def test_failed_veo_operation_retries_then_falls_back(
    sample_script, mock_veo_client, no_retry_delay, monkeypatch
):
    mock_veo_client.generate_clip.return_value = VeoResult(
        operation_name="op", status=GenerationStatus.FAILED, error_message="quota exhausted"
    )
    composer = VideoComposer(client=mock_veo_client, retry=no_retry_delay)
    monkeypatch.setattr(composer, "placeholder", lambda script, voiceover: voiceover)

    outcome = composer.run(sample_script, placeholder_voiceover())

    assert outcome.used_fallback
    assert "quota exhausted" in outcome.error_message
    assert mock_veo_client.generate_clip.call_count == 2


@pytest.mark.unit
def test_expired_veo_deadline_is_not_retried(sample_script, mock_veo_client, no_retry_delay, monkeypatch):
    mock_veo_client.generate_clip.return_value = VeoResult(
        operation_name="op",
        status=GenerationStatus.FAILED,
        error_message="Operation timed out after 300s",
        retryable=False,
    )
    composer = VideoComposer(client=mock_veo_client, retry=no_retry_delay)
    monkeypatch.setattr(composer, "placeholder", lambda script, voiceover: voiceover)

    outcome = composer.run(sample_script, placeholder_voiceover())

    assert outcome.used_fallback
    assert "timed out" in outcome.error_message
    assert mock_veo_client.generate_clip.call_count == 1


@pytest.mark.unit
def test_invalid_veo_arguments_surface(sample_script, mock_veo_client, no_retry_delay):
    mock_veo_client.generate_clip.side_effect = ValueError("aspect_ratio must be one of 16:9, 9:16, got 4:3")
    composer = VideoComposer(client=mock_veo_client, retry=no_retry_delay)

    with pytest.raises(ValueError, match="aspect_ratio"):
        composer.run(sample_script, placeholder_voiceover())
    assert mock_veo_client.generate_clip.call_count == 1


@pytest.mark.unit
def test_placeholder_closes_clip_when_encoding_fails(sample_script, monkeypatch):
    slideshow = Mock()
    monkeypatch.setattr(video_stage, "color_slideshow", Mock(return_value=slideshow))
    monkeypatch.setattr(video_stage, "encode_mp4", Mock(side_effect=OSError("ffmpeg missing")))
    silent = MediaAsset(format="wav", base64="")

    with pytest.raises(OSError):
        VideoComposer().placeholder(sample_script, silent)
    slideshow.close.assert_called_once()


@pytest.mark.unit
@pytest.mark.slow
def test_veo_clip_is_looped_to_voiceover(sample_script, mock_veo_client, no_retry_delay):
    clip = encode_mp4(color_slideshow([((255, 0, 0), 1.0)]))
    mock_veo_client.generate_clip.return_value = VeoResult(
        operation_name="op", status=GenerationStatus.COMPLETED, video=clip
    )
    composer = VideoComposer(client=mock_veo_client, retry=no_retry_delay)

    outcome = composer.run(sample_script, placeholder_voiceover())

    assert not outcome.used_fallback
    assert outcome.value.format == "mp4"
    assert _is_mp4(outcome.value.to_bytes())
    kwargs = mock_veo_client.generate_clip.call_args.kwargs
    assert kwargs["aspect_ratio"] == "9:16"

"""Voiceover stage: script text to an audio asset."""

import logging
from typing import Optional

from ..editor.audio import synthesize_tone
from ..errors import CollaboratorError
from ..models import MediaAsset, StageOutcome
from ..retry import RetryPolicy
from ..services.speech import SpeechClient

logger = logging.getLogger(__name__)

FALLBACK_FORMAT = "wav"
FALLBACK_DURATION = 3.0


def placeholder_voiceover() -> MediaAsset:
    """Short soft tone so the bundle always has playable audio."""
    return MediaAsset.from_bytes(FALLBACK_FORMAT, synthesize_tone(duration=FALLBACK_DURATION))


class VoiceoverSynthesizer:
    """Converts the script's spoken text into audio."""

    def __init__(
        self,
        client: Optional[SpeechClient] = None,
        retry: Optional[RetryPolicy] = None,
    ) -> None:
        self._client = client
        self._retry = retry or RetryPolicy()

    @property
    def available(self) -> bool:
        return self._client is not None

    def synthesize(self, script_text: str) -> MediaAsset:
        return self.run(script_text).value

    def run(self, script_text: str) -> StageOutcome[MediaAsset]:
        if not self.available:
            logger.info("No speech service configured; using placeholder tone")
            return StageOutcome.fallback(placeholder_voiceover())

        try:
            result = self._retry.call(
                lambda: self._client.synthesize(script_text),
                description="speech synthesis",
            )
        except CollaboratorError as e:
            logger.warning(f"Speech synthesis failed, using placeholder tone: {e}")
            return StageOutcome.fallback(placeholder_voiceover(), error_message=str(e))

        logger.info(f"Synthesized {len(result.audio)} bytes of {result.format} voiceover")
        return StageOutcome.primary(MediaAsset.from_bytes(result.format, result.audio))
